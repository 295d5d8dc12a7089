"""Shared test fixtures for Agritrace."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from agritrace.core.errors import GatewayUnavailable, NotFound, SubmissionFailed
from agritrace.core.service import BatchTraceabilityService
from agritrace.gateway.base import StaticIdentity
from agritrace.gateway.local import LocalLedgerGateway
from agritrace.models.actor import Actor
from agritrace.models.batch import Batch, SupplyChainEvent
from agritrace.models.events import EventType, Role
from agritrace.models.receipts import GatewayReceipt

PRODUCER_ADDRESS = "0xA11CEf00d0000000000000000000000000000001"
PROCESSOR_ADDRESS = "0xB0Bf00d000000000000000000000000000000002"


class FakeLedgerGateway:
    """In-memory ``LedgerGateway`` that records every call it receives.

    ``hide_writes`` keeps accepted events out of reads (propagation lag),
    ``fail_history`` / ``fail_write`` inject failures.
    """

    def __init__(self) -> None:
        self.batches: dict[int, Batch] = {}
        self.events: dict[int, list[SupplyChainEvent]] = {}
        self.writes: list[tuple[int, int, str]] = []
        self.reads: list[tuple[str, int]] = []
        self.hide_writes = False
        self.fail_history: Exception | None = None
        self.fail_write: Exception | None = None
        self._connected = False
        self._clock = 1_700_000_000

    @property
    def connected(self) -> bool:
        return self._connected

    async def connect(self) -> None:
        self._connected = True

    def add_batch(self, batch_id: int, product_type: str = "Cocoa beans") -> Batch:
        batch = Batch(
            batch_id=batch_id,
            product_type=product_type,
            creator=PRODUCER_ADDRESS,
            creation_timestamp=self._clock,
        )
        self.batches[batch_id] = batch
        self.events[batch_id] = []
        return batch

    def add_event(self, batch_id: int, event_type: EventType, data_ref: str = "") -> SupplyChainEvent:
        self._clock += 60
        event = SupplyChainEvent(
            batch_id=batch_id,
            event_type=event_type,
            actor=PRODUCER_ADDRESS,
            timestamp=self._clock,
            data_ref=data_ref,
        )
        self.events[batch_id].append(event)
        return event

    def _require(self) -> None:
        if not self._connected:
            raise GatewayUnavailable("not connected")

    async def get_batch(self, batch_id: int) -> Batch:
        self._require()
        self.reads.append(("batch", batch_id))
        if batch_id not in self.batches:
            raise NotFound(batch_id)
        return self.batches[batch_id]

    async def get_batch_history(self, batch_id: int) -> list[SupplyChainEvent]:
        self._require()
        self.reads.append(("history", batch_id))
        if self.fail_history is not None:
            raise self.fail_history
        return list(self.events.get(batch_id, []))

    async def record_event(self, batch_id: int, event_code: int, payload: str) -> GatewayReceipt:
        self._require()
        if self.fail_write is not None:
            raise self.fail_write
        if batch_id not in self.batches:
            raise SubmissionFailed(f"Transaction reverted: batch #{batch_id} does not exist.")
        self.writes.append((batch_id, event_code, payload))
        if not self.hide_writes:
            self.add_event(batch_id, EventType.from_code(event_code), payload)
        return GatewayReceipt(tx_hash=f"0x{len(self.writes):064x}")

    async def get_all_batches(self, limit: int) -> list[Batch]:
        self._require()
        return sorted(self.batches.values(), key=lambda b: b.batch_id, reverse=True)[:limit]


@pytest.fixture
def fake_gateway() -> FakeLedgerGateway:
    """A fake gateway holding batch 42 with a Harvest and a Shipment event."""
    gw = FakeLedgerGateway()
    gw.add_batch(42)
    gw.add_event(42, EventType.HARVEST, '{"notes":"Picked at dawn"}')
    gw.add_event(42, EventType.SHIPMENT, '{"location":"Lagos Warehouse"}')
    return gw


@pytest.fixture
def make_actor() -> Callable[..., Actor]:
    """Factory fixture: build an Actor for a role."""

    def _factory(role: int | None = Role.PROCESSOR, label: str = "Ada Processing Ltd") -> Actor:
        return Actor(label=label, role=int(role) if role is not None else None,
                     address=PROCESSOR_ADDRESS)

    return _factory


@pytest.fixture
def make_service(
    fake_gateway: FakeLedgerGateway, make_actor: Callable[..., Actor]
) -> Callable[..., BatchTraceabilityService]:
    """Factory fixture: a service over the fake gateway acting as ``role``."""

    def _factory(role: int | None = Role.PROCESSOR, gateway=None) -> BatchTraceabilityService:
        return BatchTraceabilityService(
            gateway or fake_gateway, StaticIdentity(make_actor(role))
        )

    return _factory


@pytest.fixture
def ledger_path(tmp_path: Path) -> Path:
    """Path for a temp SQLite ledger."""
    return tmp_path / "ledger.db"


@pytest.fixture
def local_gateway(ledger_path: Path) -> LocalLedgerGateway:
    """A LocalLedgerGateway backed by a temp database (not yet connected)."""
    return LocalLedgerGateway(ledger_path, signer=PROCESSOR_ADDRESS)
