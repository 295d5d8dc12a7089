"""Batch Traceability Service — the façade over the Ledger Gateway.

Reads a batch's descriptor and ordered history, and records new events
on behalf of the current actor.  Enforces:

- Input validation before any ledger call (``ValidationError``)
- Role eligibility on every write, not only in the form (``Unauthorized``)
- Distinct failures for a missing connection and a missing batch
- Ledger order preserved on reads; events are never synthesized or dropped

Writes are eventually consistent.  The service counts the batch history
just before submitting, re-reads it exactly once afterwards, and reports
whether a matching event appeared past that count in the receipt status.
It never polls or retries.
"""

from __future__ import annotations

import logging
from typing import Any

from agritrace.core.errors import (
    GatewayUnavailable,
    SubmissionFailed,
    TraceabilityError,
    Unauthorized,
    ValidationError,
)
from agritrace.core.payload import payload_digest
from agritrace.core.registry import eligible_event_types, is_eligible
from agritrace.gateway.base import IdentityProvider, LedgerGateway
from agritrace.models.actor import Actor
from agritrace.models.batch import Batch, SupplyChainEvent
from agritrace.models.events import EventType, EventTypeOption
from agritrace.models.receipts import ReceiptStatus, SubmissionReceipt

logger = logging.getLogger(__name__)

DEFAULT_BATCH_LIMIT = 20


def validate_batch_id(value: Any) -> int:
    """Return ``value`` as a positive batch id, or raise ``ValidationError``.

    Accepts ints and decimal strings (ids typed by a user or taken from a
    URL).
    """
    if isinstance(value, bool):
        raise ValidationError(f"Batch id must be a positive integer, got {value!r}.")
    if isinstance(value, str):
        text = value.strip()
        if not (text.isascii() and text.isdigit()):
            raise ValidationError(f"Batch id must be a positive integer, got {value!r}.")
        value = int(text)
    if not isinstance(value, int) or value <= 0:
        raise ValidationError(f"Batch id must be a positive integer, got {value!r}.")
    return value


def _validate_event_type(value: Any) -> EventType:
    if isinstance(value, EventType):
        return value
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"Unknown event type {value!r}.")
    try:
        return EventType(value)
    except ValueError:
        raise ValidationError(f"Unknown event type {value!r}.") from None


class BatchTraceabilityService:
    """Async façade the presentation layer calls.

    Parameters
    ----------
    gateway:
        The ledger backend.  Its connection is shared and owned by the
        caller; this service only checks that it is open.
    identity:
        Supplies the current actor and their role.
    """

    def __init__(self, gateway: LedgerGateway, identity: IdentityProvider) -> None:
        self._gateway = gateway
        self._identity = identity

    @property
    def gateway(self) -> LedgerGateway:
        return self._gateway

    @property
    def current_actor(self) -> Actor | None:
        return self._identity.current_actor()

    # ------------------------------------------------------------------
    # Connection
    # ------------------------------------------------------------------

    async def connect(self) -> None:
        """Open the gateway connection if it is not open yet."""
        if not self._gateway.connected:
            await self._gateway.connect()

    def _require_connection(self) -> None:
        if not self._gateway.connected:
            raise GatewayUnavailable(
                "Not connected to the ledger. Connect before loading batches."
            )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_batch(self, batch_id: Any) -> Batch:
        """Return the batch descriptor.

        Raises ``ValidationError``, ``GatewayUnavailable`` or ``NotFound``.
        """
        batch_id = validate_batch_id(batch_id)
        self._require_connection()
        logger.debug("Loading batch #%d.", batch_id)
        return await self._gateway.get_batch(batch_id)

    async def get_history(self, batch_id: Any) -> list[SupplyChainEvent]:
        """Return the batch's events exactly as the ledger ordered them.

        A batch with no recorded events yields an empty list.
        """
        batch_id = validate_batch_id(batch_id)
        self._require_connection()
        events = list(await self._gateway.get_batch_history(batch_id))
        logger.debug("Batch #%d history: %d event(s).", batch_id, len(events))
        return events

    async def list_batches(self, limit: int = DEFAULT_BATCH_LIMIT) -> list[Batch]:
        """Return up to ``limit`` batches, most recent first."""
        if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
            raise ValidationError(f"Limit must be a positive integer, got {limit!r}.")
        self._require_connection()
        return list(await self._gateway.get_all_batches(limit))

    async def eligible_event_types(self) -> list[EventTypeOption]:
        """Event types the current actor may record."""
        actor = self.current_actor
        return eligible_event_types(actor.role if actor else None)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def record_event(
        self, batch_id: Any, event_type: EventType | int, payload: str
    ) -> SubmissionReceipt:
        """Submit a new event for the current actor.

        Raises ``Unauthorized`` without touching the ledger when the
        actor's role may not record ``event_type``.  Any ledger-level
        rejection surfaces as ``SubmissionFailed``.

        Returns a receipt whose status is ``CONFIRMED`` when the event was
        already visible on the follow-up read, ``PENDING_PROPAGATION``
        otherwise.
        """
        batch_id = validate_batch_id(batch_id)
        event_type = _validate_event_type(event_type)
        if not isinstance(payload, str):
            raise ValidationError("Event payload must be a serialized string.")

        actor = self.current_actor
        if actor is None:
            raise Unauthorized("No signed-in actor; cannot record events.")
        if not is_eligible(actor.role, event_type):
            logger.warning(
                "Refused %s event on batch #%d for %s (role %r).",
                event_type.label, batch_id, actor.label, actor.role,
            )
            raise Unauthorized(
                f"Role {actor.role!r} may not record {event_type.label} events."
            )

        self._require_connection()
        baseline = await self._history_length(batch_id)
        try:
            gateway_receipt = await self._gateway.record_event(
                batch_id, int(event_type), payload
            )
        except TraceabilityError:
            raise
        except Exception as exc:
            raise SubmissionFailed(f"Failed to record event: {exc}") from exc

        logger.info(
            "Recorded %s event on batch #%d (tx %s).",
            event_type.label, batch_id, gateway_receipt.tx_hash,
        )

        visible = await self._is_visible(batch_id, event_type, payload, baseline)
        if not visible:
            logger.warning(
                "Event on batch #%d accepted but not yet visible in history.",
                batch_id,
            )

        return SubmissionReceipt(
            batch_id=batch_id,
            event_type=event_type,
            tx_hash=gateway_receipt.tx_hash,
            payload_digest=payload_digest(payload),
            status=ReceiptStatus.CONFIRMED if visible else ReceiptStatus.PENDING_PROPAGATION,
        )

    async def _history_length(self, batch_id: int) -> int | None:
        """Count the events visible before a write; ``None`` if unreadable."""
        try:
            return len(await self.get_history(batch_id))
        except Exception as exc:
            logger.warning(
                "Could not read history of batch #%d before write: %s",
                batch_id, exc,
            )
            return None

    async def _is_visible(
        self,
        batch_id: int,
        event_type: EventType,
        payload: str,
        baseline: int | None,
    ) -> bool:
        """Re-read the history once and look for the event just written.

        Only events past ``baseline`` count, so an identical earlier event
        cannot stand in for one that has not propagated yet.
        """
        if baseline is None:
            return False
        try:
            events = await self.get_history(batch_id)
        except Exception as exc:
            logger.warning(
                "Could not re-read history of batch #%d after write: %s",
                batch_id, exc,
            )
            return False
        return any(
            event.event_type == event_type and event.data_ref == payload
            for event in events[baseline:]
        )
