"""Batch and event records as returned by the ledger.

Both are immutable.  A batch is created once by the ledger and never
changes; all later activity is appended as ``SupplyChainEvent`` entries
that reference the batch by id.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

from agritrace.models.events import EventType


class Batch(BaseModel):
    """A tracked unit of product with an immutable identity and creator."""

    model_config = ConfigDict(frozen=True)

    batch_id: int = Field(gt=0)
    product_type: str
    creator: str
    creation_timestamp: int = Field(ge=0)  # seconds since epoch

    @property
    def created_at(self) -> datetime:
        """Creation time as an aware UTC datetime."""
        return datetime.fromtimestamp(self.creation_timestamp, tz=timezone.utc)


class SupplyChainEvent(BaseModel):
    """An append-only record of an action taken against a batch."""

    model_config = ConfigDict(frozen=True)

    batch_id: int = Field(gt=0)
    event_type: EventType
    actor: str
    timestamp: int = Field(ge=0)  # ledger-assigned, seconds since epoch
    data_ref: str = ""  # serialized payload or hash of off-chain context
