"""Error taxonomy for the traceability core.

Every error surfaces to the caller unmodified with a human-readable
message.  Nothing here is retried automatically.
"""

from __future__ import annotations


class TraceabilityError(RuntimeError):
    """Base class for all traceability errors."""


class NotFound(TraceabilityError):
    """Raised when the ledger has no batch with the requested id."""

    def __init__(self, batch_id: int) -> None:
        self.batch_id = batch_id
        super().__init__(f"Batch #{batch_id} was not found on the ledger.")


class GatewayUnavailable(TraceabilityError):
    """Raised when the ledger connection has not been established."""


class Unauthorized(TraceabilityError):
    """Raised when the caller's role may not record the requested event type."""


class SubmissionFailed(TraceabilityError):
    """Raised when the ledger rejects a write or the network faults during one."""


class ValidationError(TraceabilityError, ValueError):
    """Raised for malformed caller input, before any ledger call."""


class LedgerDataError(TraceabilityError):
    """Raised when data read from the ledger violates the domain model.

    For example an event type code outside the closed enumeration.
    """


class LedgerIntegrityError(LedgerDataError):
    """Raised when a batch's hash chain is broken."""
