"""``agritrace batches`` and ``agritrace new-batch`` — list and seed batches.

``new-batch`` writes straight to the local ledger: batch creation is not
part of the event workflow, so it bypasses the traceability service.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer
from rich.markup import escape
from rich.panel import Panel

from agritrace.cli.commands._common import build_service, console, require_ledger
from agritrace.config import config
from agritrace.core.errors import TraceabilityError
from agritrace.timeline.presenter import format_timestamp
from agritrace.timeline.renderer import TimelineRenderer


def batches_cmd(
    limit: int = typer.Option(
        config.batch_list_limit,
        "--limit",
        "-n",
        help="Maximum number of batches to list.",
    ),
    ledger_db: str = typer.Option(
        str(config.ledger_path),
        "--ledger",
        "-l",
        help="Path to the ledger SQLite database.",
    ),
) -> None:
    """List the most recent batches on the ledger."""
    db_path = require_ledger(ledger_db)
    service, _ = build_service(db_path)

    async def _list():
        await service.connect()
        return await service.list_batches(limit)

    try:
        batches = asyncio.run(_list())
    except TraceabilityError as exc:
        console.print(f"[bold red]Failed to load batches:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1)

    if not batches:
        console.print("[dim]No batches on the ledger yet.[/dim]")
        return
    console.print(TimelineRenderer(console=console).render_batches(batches))


def new_batch_cmd(
    product_type: str = typer.Argument(..., help="Product carried by the batch, e.g. 'Cocoa beans'."),
    notes: str = typer.Option("", "--notes", "-n", help="Harvest notes stored with the batch."),
    creator: str = typer.Option(
        config.actor_address, "--creator", help="Creator address recorded on the batch."
    ),
    ledger_db: str = typer.Option(
        str(config.ledger_path),
        "--ledger",
        "-l",
        help="Path to the ledger SQLite database.",
    ),
) -> None:
    """Create a batch on the local ledger, with its Harvest event."""
    _, gateway = build_service(Path(ledger_db), address=creator)

    async def _create():
        await gateway.connect()
        return await gateway.create_batch(product_type, creator=creator, harvest_data=notes)

    try:
        batch = asyncio.run(_create())
    except TraceabilityError as exc:
        console.print(f"[bold red]Failed to create batch:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1)

    console.print()
    console.print(
        Panel(
            "\n".join([
                "[bold green]New batch created![/bold green]",
                "",
                f"[bold]Batch ID:[/bold]   {batch.batch_id}",
                f"[bold]Product:[/bold]    {escape(batch.product_type)}",
                f"[bold]Creator:[/bold]    {escape(batch.creator)}",
                f"[bold]Created:[/bold]    {format_timestamp(batch.creation_timestamp)}",
                f"[bold]Ledger DB:[/bold]  {escape(ledger_db)}",
            ]),
            title="[bold]Agritrace[/bold]",
            border_style="green",
            padding=(1, 2),
        )
    )
    console.print()

    # Print the batch id plainly for scripting
    console.print(f"[bold]{batch.batch_id}[/bold]")

