# pricewatch/cli/runner.py

"""Headless CLI runner over the watchlist API."""

import json
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.table import Table

from pricewatch.config.settings import Settings
from pricewatch.errors import PriceWatchError
from pricewatch.filters.watch_validator import WatchValidator
from pricewatch.models.comparison import ComparisonRecord, format_price
from pricewatch.services.health_checker import probe_storage
from pricewatch.services.watchlist_api import WatchlistAPI
from pricewatch.storage.file_manager import FileManager
from pricewatch.storage.watch_store import WatchStore

logger = logging.getLogger("pricewatch.cli")

# Stderr console for status messages so stdout stays clean for JSON
_err = Console(stderr=True)


def _open_store(db_path: str | None) -> WatchStore:
    return WatchStore(db_path=Path(db_path) if db_path else None)


def _print_json(payload: object) -> None:
    json.dump(payload, sys.stdout, ensure_ascii=False, indent=2)
    sys.stdout.write("\n")


def _print_table(records: list[ComparisonRecord]) -> None:
    """Render a Rich table of comparisons to stdout."""
    table = Table(
        title="Watchlist",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("#", style="dim", width=4)
    table.add_column("Product", max_width=50)
    table.add_column("Watching", style="magenta")
    table.add_column("Price", justify="right", style="green")
    table.add_column("Alternate", style="magenta")
    table.add_column("Alt. Price", justify="right", style="green")
    table.add_column("Added", style="dim")

    for idx, r in enumerate(records, 1):
        alt = r.alternate
        table.add_row(
            str(idx),
            r.product_name[:50],
            r.watched.source,
            format_price(r.watched.price, r.watched.currency),
            alt.source if alt else "—",
            format_price(alt.price, alt.currency) if alt else "—",
            r.added_at.strftime("%Y-%m-%d %H:%M"),
        )

    Console().print(table)


def _save_records(
    file_manager: FileManager,
    user_id: int,
    records: list[ComparisonRecord],
) -> None:
    """Write JSON and CSV exports next to each other."""
    try:
        path = file_manager.save_comparisons(user_id, records)
        _err.print(f"[dim]Saved JSON → {path}[/dim]")
        csv_path = file_manager.export_csv(user_id, records)
        _err.print(f"[dim]Saved CSV → {csv_path}[/dim]")
    except OSError as exc:
        logger.error("Save failed: %s", exc, exc_info=True)
        _err.print(f"[red]Save failed: {exc}[/red]")


def run_comparisons(
    user_id: str,
    output_format: str,
    output_dir: str | None,
    db_path: str | None = None,
) -> int:
    """Print the user's comparisons and return an exit code."""
    try:
        store = _open_store(db_path)
    except PriceWatchError as exc:
        _err.print(f"[red]{exc.message}[/red]")
        return 1

    try:
        api = WatchlistAPI(store)
        if output_format == "json" and output_dir is None:
            payload = api.get_comparisons(user_id)
            if not payload["success"]:
                _err.print(f"[red]Error: {payload['error']}[/red]")
                return 1
            _print_json(payload["items"])
            return 0

        # Table output and exports work on typed records
        try:
            uid = WatchValidator.identifier(user_id, "user_id")
            records = api.aggregator.get_comparisons(uid)
        except PriceWatchError as exc:
            logger.error("Comparisons failed: %s", exc.message)
            _err.print(f"[red]Error: {exc.message}[/red]")
            return 1
    finally:
        store.close()

    _err.print(f"[green]✓ {len(records)} watched listings[/green]")
    if output_dir is not None:
        _save_records(FileManager(Path(output_dir)), uid, records)
    if output_format == "table":
        _print_table(records)
    else:
        _print_json([r.to_dict() for r in records])
    return 0


def run_mutation(
    action: str,
    user_id: str,
    product_id: str,
    source: str,
    db_path: str | None = None,
) -> int:
    """Run ``watch`` / ``unwatch`` and print the JSON result."""
    try:
        store = _open_store(db_path)
    except PriceWatchError as exc:
        _err.print(f"[red]{exc.message}[/red]")
        return 1

    try:
        api = WatchlistAPI(store)
        if action == "watch":
            payload = api.add_watch(user_id, product_id, source)
        else:
            payload = api.remove_watch(user_id, product_id, source)
    finally:
        store.close()

    _print_json(payload)
    return 0 if payload["success"] else 1


def run_init_db(db_path: str | None = None) -> int:
    """Create the schema if it does not exist yet."""
    path = Path(db_path) if db_path else Settings.DB_PATH
    try:
        _open_store(db_path).close()
    except PriceWatchError as exc:
        _err.print(f"[red]Database setup failed: {exc.message}[/red]")
        return 1
    _err.print(f"[green]✓ Database ready at {path}[/green]")
    return 0


def run_health_check(db_path: str | None = None) -> int:
    """Probe storage connectivity and print a status table."""
    _err.print("[bold]Running storage health check...[/bold]")
    result = probe_storage(Path(db_path) if db_path else None)

    table = Table(
        title="Storage Health Check",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("Database", style="bold", overflow="fold")
    table.add_column("Status", justify="center")
    table.add_column("Latency", justify="right")
    table.add_column("Notes", style="dim")

    if result.status == "ok":
        status = "[green]✅ OK[/green]"
    elif result.status == "slow":
        status = "[yellow]⚠️  SLOW[/yellow]"
    else:
        status = "[red]❌ DOWN[/red]"

    latency = (
        f"{result.latency_ms:.0f}ms"
        if result.latency_ms > 0
        else "—"
    )
    table.add_row(result.target, status, latency, result.message)

    Console().print(table)
    return 1 if result.status == "down" else 0
