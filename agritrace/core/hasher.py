"""Canonical hashing helpers for event payloads and ledger entries."""

from __future__ import annotations

import hashlib
import json
from typing import Any


def canonical_json_bytes(obj: Any) -> bytes:
    """Serialize ``obj`` so that equal values always produce equal bytes.

    Keys are sorted, separators carry no whitespace and non-ASCII text is
    escaped before UTF-8 encoding.
    """
    text = json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=True)
    return text.encode("utf-8")


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def content_address(data: str | bytes) -> str:
    """Return ``sha256:<hex>`` for a serialized payload."""
    raw = data.encode("utf-8") if isinstance(data, str) else data
    return f"sha256:{sha256_hex(raw)}"


def compute_entry_hash(fields: dict[str, Any]) -> str:
    """Hash the fields of one event row.

    A stored ``entry_hash`` key is ignored, so a row read back from the
    ledger can be re-hashed and compared with what it claims.
    """
    hashed = {name: value for name, value in fields.items() if name != "entry_hash"}
    return sha256_hex(canonical_json_bytes(hashed))
