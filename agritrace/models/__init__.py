"""Agritrace data models — all Pydantic v2, all frozen (immutable)."""

from agritrace.models.actor import Actor
from agritrace.models.batch import Batch, SupplyChainEvent
from agritrace.models.events import EventType, EventTypeOption, Role
from agritrace.models.receipts import GatewayReceipt, ReceiptStatus, SubmissionReceipt

__all__ = [
    # events
    "EventType",
    "EventTypeOption",
    "Role",
    # batch
    "Batch",
    "SupplyChainEvent",
    # actor
    "Actor",
    # receipts
    "GatewayReceipt",
    "ReceiptStatus",
    "SubmissionReceipt",
]
