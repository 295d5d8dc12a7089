"""Shared wiring for CLI commands: ledger, identity, service."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from agritrace.config import config
from agritrace.core.service import BatchTraceabilityService
from agritrace.gateway.base import StaticIdentity
from agritrace.gateway.local import LocalLedgerGateway
from agritrace.models.actor import Actor
from agritrace.models.events import EventType

console = Console()

_EVENT_TYPE_ALIASES: dict[str, EventType] = {
    "".join(ch for ch in et.label.lower() if ch.isalnum()): et for et in EventType
}


def require_ledger(ledger_db: str) -> Path:
    """Exit with a message when the ledger file does not exist yet."""
    db_path = Path(ledger_db)
    if not db_path.exists():
        console.print(f"[bold red]Ledger not found:[/bold red] {escape(ledger_db)}")
        console.print("[dim]Create a batch first with: agritrace new-batch[/dim]")
        raise typer.Exit(code=1)
    return db_path


def build_service(
    db_path: Path,
    *,
    role: int | None = None,
    label: str | None = None,
    address: str | None = None,
) -> tuple[BatchTraceabilityService, LocalLedgerGateway]:
    """Wire a local gateway and a static identity into a service."""
    address = address or config.actor_address
    gateway = LocalLedgerGateway(
        db_path,
        signer=address,
        auto_confirm=config.auto_confirm,
    )
    actor = Actor(
        label=label or config.actor_label,
        role=role if role is not None else config.actor_role,
        address=address,
    )
    return BatchTraceabilityService(gateway, StaticIdentity(actor)), gateway


def parse_event_type(value: str) -> EventType:
    """Accept a ledger code ("3") or a name ("quality-check", "QualityCheck")."""
    text = value.strip()
    if text.isdigit():
        try:
            return EventType(int(text))
        except ValueError:
            pass
    key = "".join(ch for ch in text.lower() if ch.isalnum())
    if key in _EVENT_TYPE_ALIASES:
        return _EVENT_TYPE_ALIASES[key]
    choices = ", ".join(et.label for et in EventType)
    raise typer.BadParameter(f"Unknown event type {value!r}. Choose from: {choices}.")
