"""Contracts for the collaborators the traceability core depends on.

Defines the ``LedgerGateway`` and ``IdentityProvider`` Protocols.  The
remote ledger client and the session layer live outside this package;
any object with these methods can be handed to
``BatchTraceabilityService``.

Integer event codes cross this boundary and nowhere else: gateways accept
an ``int`` in ``record_event`` and must return ``EventType`` members in
the events they read back (converting through ``EventType.from_code``).
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from agritrace.models.actor import Actor
from agritrace.models.batch import Batch, SupplyChainEvent
from agritrace.models.receipts import GatewayReceipt


# ---------------------------------------------------------------------------
# Protocols
# ---------------------------------------------------------------------------


@runtime_checkable
class LedgerGateway(Protocol):
    """Protocol for ledger access backends.

    All methods are coroutines: each crosses the network boundary and may
    take unbounded time.
    """

    @property
    def connected(self) -> bool:
        """Whether ``connect()`` has completed successfully."""
        ...

    async def connect(self) -> None:
        """Open the ledger connection.  Raises ``GatewayUnavailable`` on failure."""
        ...

    async def get_batch(self, batch_id: int) -> Batch:
        """Return the batch descriptor.  Raises ``NotFound`` if absent."""
        ...

    async def get_batch_history(self, batch_id: int) -> list[SupplyChainEvent]:
        """Return the batch's events in ledger order."""
        ...

    async def record_event(
        self, batch_id: int, event_code: int, payload: str
    ) -> GatewayReceipt:
        """Append an event.  Raises ``SubmissionFailed`` if the ledger rejects it."""
        ...

    async def get_all_batches(self, limit: int) -> list[Batch]:
        """Return up to ``limit`` batches, most recent first."""
        ...


@runtime_checkable
class IdentityProvider(Protocol):
    """Protocol for the identity/session layer."""

    def current_actor(self) -> Actor | None:
        """Return the signed-in actor, or ``None`` when nobody is signed in."""
        ...


# ---------------------------------------------------------------------------
# Default implementations
# ---------------------------------------------------------------------------


class StaticIdentity:
    """Identity provider that always reports the same actor.

    Suitable for the CLI and for tests; a real session layer should
    provide its own ``IdentityProvider``.
    """

    def __init__(self, actor: Actor | None) -> None:
        self._actor = actor

    def current_actor(self) -> Actor | None:
        return self._actor
