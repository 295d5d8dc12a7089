"""Main Typer application — imports and registers all CLI commands.

Entry point: ``agritrace`` (configured via pyproject.toml console_scripts).

Commands: batches, show, event-types, record, new-batch, verify.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.markup import escape

from agritrace.cli.commands._common import build_service, console, require_ledger
from agritrace.cli.commands.batches import batches_cmd, new_batch_cmd
from agritrace.cli.commands.record import record_cmd
from agritrace.cli.commands.show import show_cmd
from agritrace.config import config
from agritrace.core.errors import LedgerIntegrityError, TraceabilityError
from agritrace.core.registry import eligible_event_types
from agritrace.core.service import validate_batch_id
from agritrace.timeline.renderer import TimelineRenderer

app = typer.Typer(
    name="agritrace",
    help="Agritrace: farm-to-consumer batch traceability on an append-only ledger.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)


@app.callback()
def _configure(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose or config.debug else config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# Register subcommands
app.command(name="batches", help="List the most recent batches.")(batches_cmd)
app.command(name="show", help="Show a batch and its event timeline.")(show_cmd)
app.command(name="record", help="Record a supply chain event on a batch.")(record_cmd)
app.command(name="new-batch", help="Create a batch on the local ledger.")(new_batch_cmd)


@app.command(name="event-types", help="List the event types a role may record.")
def event_types_cmd(
    role: Optional[int] = typer.Option(None, "--role", "-r", help="Role code to check."),
) -> None:
    """List the event types available to a role."""
    role = role if role is not None else config.actor_role
    options = eligible_event_types(role)
    if not options:
        console.print(f"[dim]No event types available for role {role!r}.[/dim]")
        return
    console.print(TimelineRenderer(console=console).render_event_types(options))


@app.command(name="verify", help="Verify a batch's hash chain on the local ledger.")
def verify_cmd(
    batch_id: str = typer.Argument(..., help="The batch ID to verify."),
    ledger_db: str = typer.Option(
        str(config.ledger_path), "--ledger", "-l", help="Path to the ledger SQLite database."
    ),
) -> None:
    """Recompute every event hash of a batch and check the links."""
    db_path: Path = require_ledger(ledger_db)
    _, gateway = build_service(db_path)
    renderer = TimelineRenderer(console=console)

    try:
        bid = validate_batch_id(batch_id)
    except TraceabilityError as exc:
        console.print(f"[bold red]{escape(str(exc))}[/bold red]")
        raise typer.Exit(code=1)

    async def _verify() -> bool:
        await gateway.connect()
        await gateway.get_batch(bid)
        return await gateway.verify_chain(bid)

    try:
        valid = asyncio.run(_verify())
    except LedgerIntegrityError as exc:
        console.print(f"[bold red]Chain verification failed:[/bold red] {escape(str(exc))}")
        renderer.print_chain_verification(bid, False)
        raise typer.Exit(code=1)
    except TraceabilityError as exc:
        console.print(f"[bold red]{escape(str(exc))}[/bold red]")
        raise typer.Exit(code=1)
    renderer.print_chain_verification(bid, valid)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
