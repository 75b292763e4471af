# produce_tracker/cli/runner.py

"""Headless CLI commands for ingestion, backfill and analytics."""

import logging
import re
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from produce_tracker.config.settings import Settings
from produce_tracker.models.analytics_row import AnalyticsRow
from produce_tracker.services.analytics_engine import NoProduceDataError
from produce_tracker.services.ingestion import IngestionService, UnauthorizedError
from produce_tracker.services.partition_builder import rebuild_month
from produce_tracker.services.produce_service import ProduceService
from produce_tracker.services.table_view import (
    filter_rows,
    percent_change,
    price_change,
    sort_rows,
)
from produce_tracker.storage.chart_exporter import (
    export_comparison_chart,
    export_price_chart,
)
from produce_tracker.storage.snapshot_store import LocalSnapshotStore

logger = logging.getLogger("produce_tracker.cli")

# Stderr console for status messages so stdout stays clean
_err = Console(stderr=True)

_GAP = "—"

_MONTH_RE = re.compile(r"^\d{4}-\d{2}$")


def _open_store(store_dir: str | None) -> LocalSnapshotStore:
    return LocalSnapshotStore(Path(store_dir) if store_dir else None)


def _money(value: float | None) -> str:
    """Format a price, rendering a missing value as an explicit gap."""
    return f"${value:,.2f}" if value is not None else _GAP


def _delta(row: AnalyticsRow, baseline: float | None) -> str:
    """Signed change and percent against a baseline, or a gap.

    Unparsed and no-longer-listed prices get a gap too: their stored
    price is not a live quote to compare.
    """
    diff = price_change(row, baseline)
    if diff is None:
        return _GAP
    if abs(diff) < 0.005:
        return "[dim]=[/dim]"
    colour = "red" if diff > 0 else "green"
    text = f"{diff:+.2f}"
    pct = percent_change(row, baseline)
    if pct is not None:
        text += f" ({pct:+.1f}%)"
    return f"[{colour}]{text}[/{colour}]"


def _flags(row: AnalyticsRow) -> str:
    parts = [
        label
        for label, on in (
            ("organic", row.is_organic),
            ("ipm", row.is_ipm),
            ("waxed", row.is_waxed),
            ("local", row.is_local),
            ("hydro", row.is_hydroponic),
        )
        if on
    ]
    return ", ".join(parts) or _GAP


def _print_rows(rows: list[AnalyticsRow]) -> None:
    """Render the analytics table to stdout."""
    table = Table(
        title="Produce Prices",
        show_lines=False,
        title_style="bold cyan",
    )
    table.add_column("Item", max_width=40)
    table.add_column("Price", justify="right", style="green")
    table.add_column("Unit", style="dim")
    table.add_column("Δ Day", justify="right")
    table.add_column("Δ Week", justify="right")
    table.add_column("Δ Month", justify="right")
    table.add_column("Attributes", style="magenta")
    table.add_column("Origin", overflow="fold", style="dim")

    for row in rows:
        label = escape(row.display_name)
        if row.is_new:
            label += " [bold yellow]NEW[/bold yellow]"
        if row.is_unavailable:
            label += f" [red]gone since {row.unavailable_since_date}[/red]"
        price = _money(row.price) if row.price_parsed else "n/a"
        table.add_row(
            label,
            price,
            row.unit,
            _delta(row, row.prev_day_price),
            _delta(row, row.prev_week_price),
            _delta(row, row.prev_month_price),
            _flags(row),
            escape(row.origin),
        )

    Console().print(table)


def run_table(
    store_dir: str | None = None,
    sort: str = "name",
    descending: bool = False,
    search: str | None = None,
) -> int:
    """Print the current price table, searched and sorted."""
    service = ProduceService(_open_store(store_dir))
    try:
        rows = service.current_rows()
    except NoProduceDataError as exc:
        _err.print(f"[yellow]No data: {exc}[/yellow]")
        return 1

    if not rows:
        _err.print("[yellow]Loaded, but no items are listed.[/yellow]")
        return 0

    try:
        shown = sort_rows(filter_rows(rows, search), sort, descending)
    except ValueError as exc:
        _err.print(f"[red]{exc}[/red]")
        return 1

    if not shown:
        _err.print(f"[yellow]No items match '{escape(search or '')}'.[/yellow]")
        return 0

    _print_rows(shown)
    return 0


def run_months(store_dir: str | None = None) -> int:
    """List stored monthly partitions."""
    service = ProduceService(_open_store(store_dir))
    months = service.months()
    if not months:
        _err.print("[yellow]No partitions stored.[/yellow]")
        return 1

    table = Table(title="Monthly Partitions", title_style="bold cyan")
    table.add_column("Month", style="bold")
    table.add_column("Size", justify="right")
    table.add_column("Current", justify="center")
    table.add_column("URL", overflow="fold", style="dim")
    for info in months:
        table.add_row(
            info.month,
            f"{info.size:,}",
            "✓" if info.is_current_month else "",
            info.url,
        )
    Console().print(table)
    return 0


def run_feed(store_dir: str | None = None) -> int:
    """Print produce arrival/departure events."""
    service = ProduceService(_open_store(store_dir))
    try:
        events = service.events()
    except NoProduceDataError as exc:
        _err.print(f"[yellow]No data: {exc}[/yellow]")
        return 1

    if not events:
        _err.print("[dim]No recent arrivals or departures.[/dim]")
        return 0

    console = Console()
    for event in events:
        console.print(f"[bold cyan]{event.date}[/bold cyan]")
        if event.new_arrivals:
            names = ", ".join(escape(i.display_name) for i in event.new_arrivals)
            console.print(f"  [green]New:[/green] {names}")
        if event.out_of_stock:
            names = ", ".join(escape(i.display_name) for i in event.out_of_stock)
            console.print(f"  [red]Out of stock:[/red] {names}")
    return 0


def run_scrape(
    secret: str | None = None, store_dir: str | None = None,
) -> int:
    """Fetch today's page, store it, and rebuild its month."""
    service = IngestionService(_open_store(store_dir))
    _err.print("[bold]Scraping produce page...[/bold]")
    try:
        result = service.run_scrape(secret or Settings.CRON_SECRET)
    except UnauthorizedError:
        _err.print("[red]Unauthorized: check CRON_SECRET.[/red]")
        return 1

    if not result.success:
        _err.print(f"[red]{result.error}[/red]")
        return 1

    _err.print(
        f"[green]✓ Stored {result.date} ({result.size:,} bytes)[/green]"
    )
    if result.partition is not None:
        _err.print(
            f"[dim]Rebuilt {result.partition.month}: "
            f"{result.partition.item_count} items, "
            f"{result.partition.days_count} days[/dim]"
        )
    if result.error:
        _err.print(f"[yellow]{result.error}[/yellow]")
    return 0


def run_backfill(
    secret: str | None = None, store_dir: str | None = None,
) -> int:
    """Rebuild every monthly partition and print a report."""
    service = IngestionService(_open_store(store_dir))
    _err.print("[bold]Rebuilding all partitions...[/bold]")
    try:
        report = service.run_backfill(secret or Settings.CRON_SECRET)
    except UnauthorizedError:
        _err.print("[red]Unauthorized: check CRON_SECRET.[/red]")
        return 1

    table = Table(
        title="Backfill",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("Month", style="bold")
    table.add_column("Status", justify="center")
    table.add_column("Items", justify="right")
    table.add_column("Days", justify="right")
    table.add_column("Notes", style="dim")

    for r in report.results:
        table.add_row(
            r.month, "[green]OK[/green]",
            str(r.item_count), str(r.days_count), "",
        )
    for f in report.failures:
        table.add_row(
            f.month, "[red]FAILED[/red]", _GAP, _GAP, f.error[:80],
        )

    Console().print(table)
    _err.print(f"[dim]{report.total_items:,} items total[/dim]")
    return 0 if report.success else 1


def run_rebuild(month: str, store_dir: str | None = None) -> int:
    """Rebuild a single month's partition."""
    if not _MONTH_RE.match(month):
        _err.print(f"[red]Invalid month '{month}', expected YYYY-MM[/red]")
        return 1
    try:
        result = rebuild_month(_open_store(store_dir), month)
    except OSError as exc:
        logger.error("Rebuild failed: %s", exc, exc_info=True)
        _err.print(f"[red]Rebuild failed: {exc}[/red]")
        return 1
    _err.print(
        f"[green]✓ {result.month}: {result.item_count} items "
        f"from {result.days_count} days[/green]"
    )
    return 0


def run_chart(
    names: list[str],
    store_dir: str | None = None,
    open_browser: bool = True,
) -> int:
    """Export a price-history chart for one or more items."""
    service = ProduceService(_open_store(store_dir))
    try:
        history = service.history()
    except NoProduceDataError as exc:
        _err.print(f"[yellow]No data: {exc}[/yellow]")
        return 1

    if len(names) == 1:
        path = export_price_chart(names[0], history, open_browser)
    else:
        path = export_comparison_chart(names, history, open_browser)

    if path is None:
        _err.print("[yellow]Not enough history to chart.[/yellow]")
        return 1
    _err.print(f"[dim]Chart saved → {path}[/dim]")
    return 0
