"""Timeline Presenter — display-ready view of a batch's event history.

A pure function of the event list: the input is never mutated, input
order is kept, and only the final event is marked latest.  Empty input
gives empty output.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict

from agritrace.models.batch import SupplyChainEvent

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S UTC"
NO_DATA_TEXT = "No additional data"


class TimelineEntry(BaseModel):
    """One row of a rendered timeline."""

    model_config = ConfigDict(frozen=True)

    event: SupplyChainEvent
    is_latest: bool
    display_timestamp: str
    label: str
    actor_short: str
    details: str


def format_timestamp(epoch_seconds: int) -> str:
    """Render epoch seconds as a UTC wall-clock string."""
    moment = datetime.fromtimestamp(epoch_seconds, tz=timezone.utc)
    return moment.strftime(TIMESTAMP_FORMAT)


def short_address(address: str) -> str:
    """Abbreviate an actor address to ``0x1234...abcd``."""
    if len(address) <= 12:
        return address
    return f"{address[:6]}...{address[-4:]}"


def present(events: Sequence[SupplyChainEvent]) -> list[TimelineEntry]:
    """Turn an ordered event list into timeline entries."""
    last_index = len(events) - 1
    return [
        TimelineEntry(
            event=event,
            is_latest=index == last_index,
            display_timestamp=format_timestamp(event.timestamp),
            label=event.event_type.label,
            actor_short=short_address(event.actor),
            details=event.data_ref or NO_DATA_TEXT,
        )
        for index, event in enumerate(events)
    ]
