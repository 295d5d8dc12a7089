"""Event Type Registry — which roles may record which event types.

The eligibility table below is the single source of truth for role
checks.  The form layer uses it to offer choices and the batch service
uses it again to refuse writes that bypass the form.

Harvest has an entry (the mapping is total over ``EventType``) but is
never offered: it is recorded alongside batch creation, which happens
outside this package.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Mapping

from agritrace.models.events import EventType, EventTypeOption, Role

ROLE_ELIGIBILITY: Mapping[EventType, frozenset[Role]] = MappingProxyType({
    EventType.HARVEST: frozenset({Role.PRODUCER}),
    EventType.SHIPMENT: frozenset({Role.PRODUCER}),
    EventType.PROCESSING: frozenset({Role.PROCESSOR}),
    EventType.QUALITY_CHECK: frozenset({Role.PROCESSOR, Role.CERTIFIER}),
    EventType.SALE: frozenset({Role.RETAILER}),
})

# Event types a caller may pick when adding to an existing batch, in display order.
OFFERED_EVENT_TYPES: tuple[EventType, ...] = (
    EventType.SHIPMENT,
    EventType.PROCESSING,
    EventType.QUALITY_CHECK,
    EventType.SALE,
)


def eligible_event_types(role: Any) -> list[EventTypeOption]:
    """Return the event types ``role`` may record, in display order.

    An absent or unrecognized role yields an empty list rather than an
    error.
    """
    known = Role.coerce(role)
    if known is None:
        return []
    return [
        EventTypeOption(event_type=et, label=et.label)
        for et in OFFERED_EVENT_TYPES
        if known in ROLE_ELIGIBILITY[et]
    ]


def is_eligible(role: Any, event_type: EventType) -> bool:
    """Whether ``role`` may record ``event_type`` through the event workflow."""
    return any(opt.event_type == event_type for opt in eligible_event_types(role))
