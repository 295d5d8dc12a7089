"""Event type and role enumerations — the closed variants of the domain.

The ledger identifies event types and roles by small integers.  Those
integers are converted to these enums at the gateway boundary only;
everything inside the core works with the enum members.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any

from pydantic import BaseModel, ConfigDict

from agritrace.core.errors import LedgerDataError


class EventType(IntEnum):
    """Kinds of supply chain event, keyed by their ledger codes."""

    HARVEST = 0
    SHIPMENT = 1
    PROCESSING = 2
    QUALITY_CHECK = 3
    SALE = 4

    @property
    def label(self) -> str:
        """Human-readable name for display."""
        return _EVENT_LABELS[self]

    @classmethod
    def from_code(cls, code: Any) -> EventType:
        """Convert a raw ledger code, rejecting anything outside the enumeration."""
        if isinstance(code, bool) or not isinstance(code, int):
            raise LedgerDataError(f"Event type code must be an integer, got {code!r}.")
        try:
            return cls(code)
        except ValueError:
            raise LedgerDataError(f"Unknown event type code {code!r}.") from None


_EVENT_LABELS: dict[EventType, str] = {
    EventType.HARVEST: "Harvest",
    EventType.SHIPMENT: "Shipment",
    EventType.PROCESSING: "Processing",
    EventType.QUALITY_CHECK: "Quality Check",
    EventType.SALE: "Sale",
}


class Role(IntEnum):
    """Permission class of the acting party, as supplied by the identity layer."""

    PRODUCER = 1
    PROCESSOR = 2
    RETAILER = 3
    CERTIFIER = 4

    @classmethod
    def coerce(cls, value: Any) -> Role | None:
        """Return the matching role, or ``None`` when absent or unrecognized."""
        if value is None or isinstance(value, bool):
            return None
        try:
            return cls(int(value))
        except (TypeError, ValueError):
            return None


class EventTypeOption(BaseModel):
    """An event type offered to a caller, with its display label."""

    model_config = ConfigDict(frozen=True)

    event_type: EventType
    label: str
