"""Rich terminal renderer for batch pages and batch listings.

Turns ``BatchView`` into Rich renderables, with color-coded event types.

Color scheme
------------
- green    : Harvest
- blue     : Shipment
- magenta  : Processing
- yellow   : Quality Check
- red      : Sale
"""

from __future__ import annotations

from collections.abc import Sequence

from rich.console import Console, Group
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from agritrace.models.batch import Batch
from agritrace.models.events import EventType, EventTypeOption
from agritrace.models.receipts import SubmissionReceipt
from agritrace.timeline.presenter import format_timestamp, short_address
from agritrace.timeline.view import BatchView, BatchViewState

_EVENT_STYLES: dict[EventType, str] = {
    EventType.HARVEST: "bold green",
    EventType.SHIPMENT: "bold blue",
    EventType.PROCESSING: "bold magenta",
    EventType.QUALITY_CHECK: "bold yellow",
    EventType.SALE: "bold red",
}


class TimelineRenderer:
    """Renders batch views and listings as Rich terminal output.

    Parameters
    ----------
    console:
        Rich Console instance.  A new one is created if not provided.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    # ------------------------------------------------------------------
    # Batch page
    # ------------------------------------------------------------------

    def render_view(self, view: BatchView) -> Panel:
        """Render a BatchView as a Panel: batch details, then the timeline."""
        if view.state == BatchViewState.NOT_FOUND:
            return Panel(
                Text.from_markup(
                    f"The batch with ID [bold]{escape(view.requested_id)}[/bold] could not be found."
                ),
                title="[bold red]Batch Not Found[/bold red]",
                border_style="red",
                padding=(1, 2),
            )
        if view.state == BatchViewState.UNAVAILABLE or view.batch is None:
            return Panel(
                Text(view.error or "The ledger is unavailable."),
                title="[bold red]Ledger Unavailable[/bold red]",
                border_style="red",
                padding=(1, 2),
            )

        batch = view.batch
        details = "\n".join([
            f"[bold]Product:[/bold]  {escape(batch.product_type)}",
            f"[bold]Creator:[/bold]  {escape(short_address(batch.creator))}",
            f"[bold]Created:[/bold]  {format_timestamp(batch.creation_timestamp)}",
        ])

        if not view.history_available:
            body = Text.from_markup(
                "[yellow]Event history could not be loaded for this batch. "
                "The batch information is still available.[/yellow]"
            )
        elif not view.timeline:
            body = Text.from_markup("[dim]No events recorded yet.[/dim]")
        else:
            body = self._build_timeline_table(view)

        return Panel(
            Group(Text.from_markup(details), Text(""), body),
            title=f"[bold]Batch #{batch.batch_id}: {escape(batch.product_type)}[/bold]",
            subtitle="Complete traceability history from farm to consumer",
            border_style="blue",
            padding=(1, 2),
        )

    def _build_timeline_table(self, view: BatchView) -> Table:
        table = Table(show_header=True, header_style="bold cyan", expand=True)
        table.add_column("#", style="dim", width=4, justify="right")
        table.add_column("Event", min_width=14)
        table.add_column("When", min_width=23)
        table.add_column("Actor", min_width=13)
        table.add_column("Data")

        for i, entry in enumerate(view.timeline):
            style = _EVENT_STYLES.get(entry.event.event_type, "")
            label = f"[{style}]{entry.label}[/{style}]"
            if entry.is_latest:
                label += " [green](latest)[/green]"
            table.add_row(
                str(i + 1),
                label,
                entry.display_timestamp,
                Text(entry.actor_short),
                Text(entry.details, overflow="fold"),
                style=None if entry.is_latest else "dim",
            )
        return table

    # ------------------------------------------------------------------
    # Listings
    # ------------------------------------------------------------------

    def render_batches(self, batches: Sequence[Batch]) -> Table:
        """Render a batch listing as a Table."""
        table = Table(title=f"Total Batches: {len(batches)}", header_style="bold cyan")
        table.add_column("Batch", justify="right", style="bold")
        table.add_column("Product")
        table.add_column("Creator")
        table.add_column("Created")
        for batch in batches:
            table.add_row(
                f"#{batch.batch_id}",
                Text(batch.product_type),
                Text(short_address(batch.creator)),
                format_timestamp(batch.creation_timestamp),
            )
        return table

    def render_event_types(self, options: Sequence[EventTypeOption]) -> Table:
        table = Table(header_style="bold cyan")
        table.add_column("Code", justify="right")
        table.add_column("Event Type")
        for option in options:
            style = _EVENT_STYLES.get(option.event_type, "")
            table.add_row(str(int(option.event_type)), f"[{style}]{option.label}[/{style}]")
        return table

    # ------------------------------------------------------------------
    # Standalone print
    # ------------------------------------------------------------------

    def print_view(self, view: BatchView) -> None:
        self.console.print(self.render_view(view))

    def print_receipt(self, receipt: SubmissionReceipt) -> None:
        """Print a submission receipt, flagging pending propagation."""
        self.console.print(
            f"[green]{receipt.event_type.label} event recorded on batch "
            f"#{receipt.batch_id}.[/green]"
        )
        self.console.print(f"[bold]Transaction:[/bold] {receipt.tx_hash}")
        self.console.print(f"[bold]Payload digest:[/bold] {receipt.payload_digest}")
        if not receipt.is_confirmed:
            self.console.print(
                "[yellow]The ledger accepted the event but it is not visible yet; "
                "refresh the batch shortly.[/yellow]"
            )

    def print_chain_verification(self, batch_id: int, valid: bool) -> None:
        """Print a chain verification result."""
        if valid:
            self.console.print(f"[green]Hash chain for batch #{batch_id} is valid.[/green]")
        else:
            self.console.print(
                f"[bold red]Hash chain for batch #{batch_id} is BROKEN![/bold red]"
            )
