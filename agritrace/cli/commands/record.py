"""``agritrace record BATCH_ID`` — record a supply chain event.

Builds the event payload from the options given, checks the acting role
against the event type registry, submits the event, and reports whether
the ledger already shows it.
"""

from __future__ import annotations

import asyncio
from typing import Optional

import typer
from rich.markup import escape

from agritrace.cli.commands._common import (
    build_service,
    console,
    parse_event_type,
    require_ledger,
)
from agritrace.config import config
from agritrace.core.errors import TraceabilityError
from agritrace.core.payload import EventForm
from agritrace.models.events import EventType
from agritrace.timeline.renderer import TimelineRenderer


def record_cmd(
    batch_id: str = typer.Argument(..., help="The batch ID to record against."),
    event_type: str = typer.Option(
        ...,
        "--type",
        "-t",
        help="Event type name or code (shipment, processing, quality-check, sale).",
    ),
    location: str = typer.Option("", "--location", help="Where the event took place."),
    notes: str = typer.Option("", "--notes", "-n", help="Additional information."),
    quality_score: Optional[int] = typer.Option(
        None, "--quality-score", "-q", help="Quality score 1-10 (quality checks only)."
    ),
    certificate: str = typer.Option(
        "", "--certificate", "-c", help="Certificate reference (quality checks only)."
    ),
    role: Optional[int] = typer.Option(None, "--role", "-r", help="Acting role code."),
    label: Optional[str] = typer.Option(None, "--as", help="Acting party's display name."),
    ledger_db: str = typer.Option(
        str(config.ledger_path),
        "--ledger",
        "-l",
        help="Path to the ledger SQLite database.",
    ),
) -> None:
    """Record an event on a batch as the configured actor."""
    kind = parse_event_type(event_type)
    if kind != EventType.QUALITY_CHECK and (quality_score is not None or certificate):
        console.print(
            "[yellow]Quality score and certificate only apply to quality checks.[/yellow]"
        )

    db_path = require_ledger(ledger_db)
    service, _ = build_service(db_path, role=role, label=label)
    actor = service.current_actor

    form = EventForm(
        event_type=kind,
        notes=notes,
        location=location,
        quality_score=quality_score,
        certificate_ref=certificate,
    )

    async def _submit():
        await service.connect()
        payload = form.build(actor)
        return await service.record_event(batch_id, kind, payload)

    try:
        receipt = asyncio.run(_submit())
    except TraceabilityError as exc:
        console.print(f"[bold red]Failed to record event:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1)

    TimelineRenderer(console=console).print_receipt(receipt)
