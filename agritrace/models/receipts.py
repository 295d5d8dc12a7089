"""Submission receipts — acknowledgment of a ledger write.

A receipt says the ledger accepted the write.  It says nothing about
whether the event is already visible to readers; ``status`` reports what
the single follow-up read observed.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from agritrace.models.events import EventType


class ReceiptStatus(str, Enum):
    """Visibility of a recorded event at the time the receipt was issued."""

    CONFIRMED = "confirmed"
    PENDING_PROPAGATION = "pending_propagation"


class GatewayReceipt(BaseModel):
    """Raw acknowledgment returned by a Ledger Gateway write."""

    model_config = ConfigDict(frozen=True)

    tx_hash: str
    block_number: int | None = None


class SubmissionReceipt(BaseModel):
    """Receipt returned by ``BatchTraceabilityService.record_event``."""

    model_config = ConfigDict(frozen=True)

    batch_id: int
    event_type: EventType
    tx_hash: str
    payload_digest: str  # "sha256:<hex>" of the submitted payload
    status: ReceiptStatus = ReceiptStatus.PENDING_PROPAGATION
    submitted_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    @property
    def is_confirmed(self) -> bool:
        return self.status == ReceiptStatus.CONFIRMED
