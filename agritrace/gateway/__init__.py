"""Ledger Gateway contracts and the local SQLite implementation.

Modules
-------
base
    ``LedgerGateway`` and ``IdentityProvider`` Protocols, plus
    ``StaticIdentity``.
local
    ``LocalLedgerGateway`` — an append-only, hash-chained SQLite ledger
    for development and tests.
"""

from agritrace.gateway.base import IdentityProvider, LedgerGateway, StaticIdentity
from agritrace.gateway.local import LocalLedgerGateway

__all__ = ["IdentityProvider", "LedgerGateway", "LocalLedgerGateway", "StaticIdentity"]
