"""Event Payload Builder — the off-chain metadata attached to an event.

The payload is compact JSON with a fixed field order.  Absent or empty
fields are left out entirely so that "not provided" and "explicitly
empty" cannot be confused downstream.  The serialized string is what the
ledger stores as the event's data reference; the ledger layer may hash it
separately.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from agritrace.core.errors import ValidationError
from agritrace.core.hasher import content_address
from agritrace.models.actor import Actor
from agritrace.models.events import EventType

logger = logging.getLogger(__name__)

QUALITY_SCORE_MIN = 1
QUALITY_SCORE_MAX = 10


class EventPayload(BaseModel):
    """Canonical off-chain payload.  Field order is the serialization order."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    notes: str | None = None
    location: str | None = None
    quality_score: int | None = Field(default=None, alias="qualityScore")
    certificate_ref: str | None = Field(default=None, alias="certificateHash")
    recorded_by: str | None = Field(default=None, alias="recordedBy")
    role: int | None = None

    @field_validator("notes", "location", "certificate_ref", "recorded_by", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    def serialize(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)


def _normalize_quality_score(value: int | str | None) -> int | None:
    """Accept an int or numeric string in 1..10; blank means absent."""
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        try:
            value = int(value)
        except ValueError:
            raise ValidationError(
                f"Quality score must be a whole number, got {value!r}."
            ) from None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"Quality score must be a whole number, got {value!r}.")
    if not QUALITY_SCORE_MIN <= value <= QUALITY_SCORE_MAX:
        raise ValidationError(
            f"Quality score must be between {QUALITY_SCORE_MIN} and "
            f"{QUALITY_SCORE_MAX}, got {value}."
        )
    return value


def build_payload(
    event_type: EventType,
    notes: str | None,
    location: str | None,
    quality_score: int | str | None = None,
    certificate_ref: str | None = None,
    *,
    actor_label: str | None,
    actor_role: int | None,
) -> str:
    """Serialize an event form into the canonical payload string.

    Quality score and certificate reference are only meaningful for
    quality checks, but they are accepted for any ``event_type``.
    Identical inputs always produce byte-identical output.
    """
    payload = EventPayload(
        notes=notes,
        location=location,
        quality_score=_normalize_quality_score(quality_score),
        certificate_ref=certificate_ref,
        recorded_by=actor_label,
        role=actor_role,
    )
    if event_type != EventType.QUALITY_CHECK and (
        payload.quality_score is not None or payload.certificate_ref is not None
    ):
        logger.debug(
            "Quality fields supplied for %s event; keeping them in the payload.",
            event_type.label,
        )
    return payload.serialize()


def payload_digest(payload: str) -> str:
    """Content address of a serialized payload ("sha256:<hex>")."""
    return content_address(payload)


def parse_payload(data_ref: str) -> EventPayload | None:
    """Parse a stored data reference back into a payload.

    Returns ``None`` when the reference is not a payload object (for
    example a bare hash recorded by another client).
    """
    if not data_ref:
        return None
    try:
        return EventPayload.model_validate_json(data_ref)
    except PydanticValidationError:
        return None


class EventForm(BaseModel):
    """User-supplied fields for a new event."""

    model_config = ConfigDict(frozen=True)

    event_type: EventType
    notes: str = ""
    location: str = ""
    quality_score: int | str | None = None
    certificate_ref: str = ""

    def build(self, actor: Actor) -> str:
        """Build the payload on behalf of ``actor``."""
        return build_payload(
            self.event_type,
            self.notes,
            self.location,
            self.quality_score,
            self.certificate_ref,
            actor_label=actor.label,
            actor_role=actor.role,
        )
