"""``agritrace show BATCH_ID`` — show a batch and its event timeline.

The page is a read-only projection of the ledger: batch details first,
then every recorded event in ledger order with the latest one marked.
Optionally verifies the batch's hash chain before displaying.
"""

from __future__ import annotations

import asyncio

import typer
from rich.markup import escape

from agritrace.cli.commands._common import build_service, console, require_ledger
from agritrace.config import config
from agritrace.core.errors import LedgerIntegrityError, TraceabilityError
from agritrace.timeline.renderer import TimelineRenderer
from agritrace.timeline.view import BatchView, BatchViewState, load_batch_view


def show_cmd(
    batch_id: str = typer.Argument(..., help="The batch ID to show."),
    verify_chain: bool = typer.Option(
        False,
        "--verify-chain",
        "-V",
        help="Verify the batch's hash chain before displaying.",
    ),
    ledger_db: str = typer.Option(
        str(config.ledger_path),
        "--ledger",
        "-l",
        help="Path to the ledger SQLite database.",
    ),
) -> None:
    """Show a batch's details and its complete traceability timeline."""
    db_path = require_ledger(ledger_db)
    service, gateway = build_service(db_path)
    renderer = TimelineRenderer(console=console)

    async def _load() -> tuple[BatchView, bool | None]:
        await service.connect()
        view = await load_batch_view(service, batch_id)
        chain_ok: bool | None = None
        if verify_chain and view.batch is not None:
            try:
                chain_ok = await gateway.verify_chain(view.batch.batch_id)
            except LedgerIntegrityError as exc:
                console.print(f"[bold red]Chain verification failed:[/bold red] {escape(str(exc))}")
                chain_ok = False
        return view, chain_ok

    try:
        view, chain_ok = asyncio.run(_load())
    except TraceabilityError as exc:
        console.print(f"[bold red]Failed to load batch:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1)

    if chain_ok is not None and view.batch is not None:
        renderer.print_chain_verification(view.batch.batch_id, chain_ok)
        console.print()

    renderer.print_view(view)
    if view.state != BatchViewState.LOADED:
        raise typer.Exit(code=1)
