"""Local Ledger Gateway — append-only, hash-chained SQLite ledger.

Stands in for the remote ledger during development and testing.  It
honours the ``LedgerGateway`` contract, including its failure modes:

- Append-only: events are only ever inserted; no update, no delete.
- Hash-chained: each event row includes SHA-256 of the previous row for
  the same batch, so ``verify_chain()`` detects tampering.
- Propagation lag: with ``auto_confirm=False`` an accepted event stays
  pending (invisible to reads) until ``confirm_pending()`` runs, the way
  a remote ledger acknowledges a transaction before readers see it.
- Connection lifecycle: every operation raises ``GatewayUnavailable``
  until ``connect()`` has been awaited.

SQLite work runs in a worker thread so callers on the event loop are
never blocked.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any

from agritrace.core.errors import (
    GatewayUnavailable,
    LedgerIntegrityError,
    NotFound,
    SubmissionFailed,
)
from agritrace.core.hasher import compute_entry_hash
from agritrace.models.batch import Batch, SupplyChainEvent
from agritrace.models.events import EventType
from agritrace.models.receipts import GatewayReceipt

logger = logging.getLogger(__name__)

DEFAULT_SIGNER = "0x0000000000000000000000000000000000000001"


# ---------------------------------------------------------------------------
# DDL
# ---------------------------------------------------------------------------

_CREATE_BATCHES = """
CREATE TABLE IF NOT EXISTS batches (
    id                  INTEGER PRIMARY KEY AUTOINCREMENT,
    product_type        TEXT NOT NULL,
    creator             TEXT NOT NULL,
    creation_timestamp  INTEGER NOT NULL
);
"""

_CREATE_EVENTS = """
CREATE TABLE IF NOT EXISTS batch_events (
    id                   INTEGER PRIMARY KEY AUTOINCREMENT,
    batch_id             INTEGER NOT NULL REFERENCES batches(id),
    event_code           INTEGER NOT NULL,
    actor                TEXT NOT NULL,
    timestamp            INTEGER NOT NULL,
    data_ref             TEXT NOT NULL DEFAULT '',
    confirmed            INTEGER NOT NULL DEFAULT 1,
    previous_entry_hash  TEXT NOT NULL DEFAULT '',
    entry_hash           TEXT NOT NULL UNIQUE
);
"""

_CREATE_IDX_BATCH = """
CREATE INDEX IF NOT EXISTS idx_batch_events ON batch_events(batch_id, id);
"""


class LocalLedgerGateway:
    """SQLite-backed ``LedgerGateway``.

    Parameters
    ----------
    db_path:
        Path to the SQLite database file.  Created on ``connect()``.
    signer:
        Address recorded as the actor of events written through this
        gateway (the remote ledger takes it from the transaction signer).
    auto_confirm:
        When ``False``, newly recorded events stay pending until
        ``confirm_pending()`` is called.
    clock:
        Returns the current time in epoch seconds.
    """

    def __init__(
        self,
        db_path: Path,
        *,
        signer: str = DEFAULT_SIGNER,
        auto_confirm: bool = True,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._db_path = Path(db_path)
        self._signer = signer
        self._auto_confirm = auto_confirm
        self._clock = clock
        self._connected = False

    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def signer(self) -> str:
        return self._signer

    # ------------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------------

    async def connect(self) -> None:
        """Create the schema if needed and mark the gateway connected."""
        try:
            await asyncio.to_thread(self._init_schema)
        except sqlite3.Error as exc:
            raise GatewayUnavailable(
                f"Cannot open ledger at {self._db_path}: {exc}"
            ) from exc
        self._connected = True
        logger.debug("Connected to local ledger at %s.", self._db_path)

    async def close(self) -> None:
        self._connected = False

    def _open(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), check_same_thread=False)
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA foreign_keys=ON")
        return conn

    def _init_schema(self) -> None:
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        with self._open() as conn:
            conn.execute(_CREATE_BATCHES)
            conn.execute(_CREATE_EVENTS)
            conn.execute(_CREATE_IDX_BATCH)
            conn.commit()

    def _require_connection(self) -> None:
        if not self._connected:
            raise GatewayUnavailable(
                "Ledger connection has not been established; call connect() first."
            )

    async def _read(self, fn: Callable[..., Any], *args: Any) -> Any:
        try:
            return await asyncio.to_thread(fn, *args)
        except sqlite3.Error as exc:
            raise GatewayUnavailable(f"Ledger read failed: {exc}") from exc

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_batch(self, batch_id: int) -> Batch:
        self._require_connection()
        row = await self._read(self._fetch_batch_row, batch_id)
        if row is None:
            raise NotFound(batch_id)
        return self._row_to_batch(row)

    async def get_batch_history(self, batch_id: int) -> list[SupplyChainEvent]:
        self._require_connection()
        rows = await self._read(self._fetch_event_rows, batch_id, True)
        return [self._row_to_event(row) for row in rows]

    async def get_all_batches(self, limit: int) -> list[Batch]:
        self._require_connection()
        rows = await self._read(self._fetch_recent_batches, limit)
        return [self._row_to_batch(row) for row in rows]

    def _fetch_batch_row(self, batch_id: int) -> tuple | None:
        with self._open() as conn:
            return conn.execute(
                "SELECT id, product_type, creator, creation_timestamp "
                "FROM batches WHERE id = ?",
                (batch_id,),
            ).fetchone()

    def _fetch_recent_batches(self, limit: int) -> list[tuple]:
        with self._open() as conn:
            return conn.execute(
                "SELECT id, product_type, creator, creation_timestamp "
                "FROM batches ORDER BY id DESC LIMIT ?",
                (limit,),
            ).fetchall()

    def _fetch_event_rows(self, batch_id: int, confirmed_only: bool) -> list[tuple]:
        query = (
            "SELECT batch_id, event_code, actor, timestamp, data_ref, "
            "previous_entry_hash, entry_hash FROM batch_events WHERE batch_id = ?"
        )
        if confirmed_only:
            query += " AND confirmed = 1"
        query += " ORDER BY id ASC"
        with self._open() as conn:
            return conn.execute(query, (batch_id,)).fetchall()

    # ------------------------------------------------------------------
    # Writes (append-only)
    # ------------------------------------------------------------------

    async def create_batch(
        self,
        product_type: str,
        *,
        creator: str | None = None,
        harvest_data: str = "",
        record_harvest: bool = True,
    ) -> Batch:
        """Register a new batch, recording its Harvest event alongside.

        Batch creation is not part of the traceability workflow; this
        exists so a local ledger can be seeded.
        """
        self._require_connection()
        creator = creator or self._signer
        try:
            batch_id, created = await asyncio.to_thread(
                self._insert_batch, product_type, creator, harvest_data, record_harvest
            )
        except sqlite3.Error as exc:
            raise SubmissionFailed(f"Ledger write failed: {exc}") from exc
        logger.info("Created batch #%d (%s) for %s.", batch_id, product_type, creator)
        return Batch(
            batch_id=batch_id,
            product_type=product_type,
            creator=creator,
            creation_timestamp=created,
        )

    def _insert_batch(
        self, product_type: str, creator: str, harvest_data: str, record_harvest: bool
    ) -> tuple[int, int]:
        created = int(self._clock())
        with self._open() as conn:
            cur = conn.execute(
                "INSERT INTO batches (product_type, creator, creation_timestamp) "
                "VALUES (?, ?, ?)",
                (product_type, creator, created),
            )
            batch_id = int(cur.lastrowid)
            if record_harvest:
                self._append_event(
                    conn,
                    batch_id,
                    int(EventType.HARVEST),
                    creator,
                    harvest_data,
                    confirmed=True,
                )
            conn.commit()
        return batch_id, created

    async def record_event(
        self, batch_id: int, event_code: int, payload: str
    ) -> GatewayReceipt:
        self._require_connection()
        try:
            entry_hash = await asyncio.to_thread(
                self._insert_event, batch_id, event_code, payload
            )
        except sqlite3.Error as exc:
            raise SubmissionFailed(f"Ledger write failed: {exc}") from exc
        logger.info(
            "Recorded event code %d on batch #%d (tx %s).",
            event_code, batch_id, entry_hash[:12],
        )
        return GatewayReceipt(tx_hash=f"0x{entry_hash}")

    def _insert_event(self, batch_id: int, event_code: int, payload: str) -> str:
        if event_code not in {int(et) for et in EventType}:
            raise SubmissionFailed(
                f"Transaction reverted: invalid event type code {event_code}."
            )
        with self._open() as conn:
            exists = conn.execute(
                "SELECT 1 FROM batches WHERE id = ?", (batch_id,)
            ).fetchone()
            if exists is None:
                raise SubmissionFailed(
                    f"Transaction reverted: batch #{batch_id} does not exist."
                )
            entry_hash = self._append_event(
                conn,
                batch_id,
                event_code,
                self._signer,
                payload,
                confirmed=self._auto_confirm,
            )
            conn.commit()
        return entry_hash

    def _append_event(
        self,
        conn: sqlite3.Connection,
        batch_id: int,
        event_code: int,
        actor: str,
        data_ref: str,
        *,
        confirmed: bool,
    ) -> str:
        """Insert one event row, linking it to the batch's previous entry."""
        last = conn.execute(
            "SELECT entry_hash, timestamp FROM batch_events "
            "WHERE batch_id = ? ORDER BY id DESC LIMIT 1",
            (batch_id,),
        ).fetchone()
        previous_hash, last_ts = (last[0], last[1]) if last else ("", 0)

        # Timestamps never go backwards within a batch.
        timestamp = max(int(self._clock()), last_ts)

        entry_dict = {
            "batch_id": batch_id,
            "event_code": event_code,
            "actor": actor,
            "timestamp": timestamp,
            "data_ref": data_ref,
            "previous_entry_hash": previous_hash,
        }
        entry_hash = compute_entry_hash(entry_dict)
        conn.execute(
            """
            INSERT INTO batch_events
                (batch_id, event_code, actor, timestamp, data_ref, confirmed,
                 previous_entry_hash, entry_hash)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                batch_id,
                event_code,
                actor,
                timestamp,
                data_ref,
                1 if confirmed else 0,
                previous_hash,
                entry_hash,
            ),
        )
        return entry_hash

    async def confirm_pending(self) -> int:
        """Make every pending event visible to readers.  Returns how many."""
        self._require_connection()
        count = await asyncio.to_thread(self._confirm_all)
        if count:
            logger.info("Confirmed %d pending event(s).", count)
        return count

    def _confirm_all(self) -> int:
        with self._open() as conn:
            cur = conn.execute("UPDATE batch_events SET confirmed = 1 WHERE confirmed = 0")
            conn.commit()
            return cur.rowcount

    # ------------------------------------------------------------------
    # Chain verification
    # ------------------------------------------------------------------

    async def verify_chain(self, batch_id: int) -> bool:
        """Verify the hash chain of a batch, pending events included.

        Returns True if the chain is valid, raises LedgerIntegrityError otherwise.
        """
        self._require_connection()
        rows = await self._read(self._fetch_event_rows, batch_id, False)

        prev_hash = ""
        for position, row in enumerate(rows):
            (row_batch, event_code, actor, timestamp, data_ref,
             previous_entry_hash, entry_hash) = row
            if previous_entry_hash != prev_hash:
                raise LedgerIntegrityError(
                    f"Chain broken at event {position} of batch #{batch_id}: "
                    f"expected previous_hash={prev_hash!r}, "
                    f"got {previous_entry_hash!r}"
                )
            expected_hash = compute_entry_hash({
                "batch_id": row_batch,
                "event_code": event_code,
                "actor": actor,
                "timestamp": timestamp,
                "data_ref": data_ref,
                "previous_entry_hash": previous_entry_hash,
            })
            if entry_hash != expected_hash:
                raise LedgerIntegrityError(
                    f"Tampered event {position} of batch #{batch_id}: "
                    f"expected hash={expected_hash!r}, got {entry_hash!r}"
                )
            prev_hash = entry_hash

        return True

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _row_to_batch(row: tuple) -> Batch:
        batch_id, product_type, creator, creation_timestamp = row
        return Batch(
            batch_id=batch_id,
            product_type=product_type,
            creator=creator,
            creation_timestamp=creation_timestamp,
        )

    @staticmethod
    def _row_to_event(row: tuple[Any, ...]) -> SupplyChainEvent:
        batch_id, event_code, actor, timestamp, data_ref, _prev, _hash = row
        return SupplyChainEvent(
            batch_id=batch_id,
            event_type=EventType.from_code(event_code),
            actor=actor,
            timestamp=timestamp,
            data_ref=data_ref,
        )
