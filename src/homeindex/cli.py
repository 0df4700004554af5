"""Command line interface for HomeIndex."""

from __future__ import annotations

import logging
import os
import time
from pathlib import Path
from typing import List, Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from homeindex.config import AppConfig
from homeindex.errors import HomeIndexError
from homeindex.index.indexer import Indexer
from homeindex.index.scanner import FilesystemScanner
from homeindex.index.scheduler import ScanScheduler
from homeindex.index.search import Searcher
from homeindex.index.storage import SQLiteStore
from homeindex.models import ScanRun


console = Console()
app = typer.Typer(help="HomeIndex - ingest personal files into a searchable store")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _ensure_db_parent(db_path: Path) -> None:
    db_path.parent.mkdir(parents=True, exist_ok=True)


def _load_config(db: Optional[Path]) -> AppConfig:
    load_dotenv()
    config = AppConfig.from_env()
    if db is not None:
        config.db_path = db
    return config


def _build_indexer(config: AppConfig) -> Indexer:
    _ensure_db_parent(config.resolve_db_path(Path.cwd()))
    return Indexer.from_config(config)


def _run_row(name: str, run: ScanRun) -> list[str]:
    return [name, str(run.scanned), str(run.processed), str(run.skipped), str(len(run.errors))]


@app.command()
def scan(
    db: Path = typer.Option(None, "--db", help="SQLite database path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Run one bulk scan of the configured directories."""
    _setup_logging(verbose)
    config = _load_config(db)
    indexer = _build_indexer(config)
    try:
        result = indexer.scan_and_ingest_all()
    finally:
        indexer.close()

    if result is None:
        console.print("[yellow]A scan is already running, skipped.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    for column in ("Category", "Scanned", "Processed", "Empty", "Errors"):
        table.add_column(column)
    table.add_row(*_run_row("documents", result.documents))
    table.add_row(*_run_row("images", result.images))
    console.print(table)

    for error in [*result.documents.errors, *result.images.errors]:
        console.print(f"[red]{error.file or error.directory or '?'}[/red]: {error.error}")


@app.command()
def ingest(
    inputs: List[Path] = typer.Argument(..., help="Files to ingest.", resolve_path=True),
    title: Optional[str] = typer.Option(None, help="Document title (single file only)"),
    db: Path = typer.Option(None, "--db", help="SQLite database path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Ingest individual files, even ones the dedup ledger already knows."""
    _setup_logging(verbose)
    if title is not None and len(inputs) > 1:
        raise typer.BadParameter("--title can only be used with a single file")

    config = _load_config(db)
    indexer = _build_indexer(config)
    failures = 0
    try:
        for path in inputs:
            try:
                result = indexer.ingest_path(path, title=title)
            except (FileNotFoundError, HomeIndexError) as exc:
                failures += 1
                console.print(f"[red]{path}[/red]: {exc}")
                continue
            if result.success:
                console.print(f"Ingested [bold]{path}[/bold] (id {result.id})")
            else:
                console.print(f"[yellow]{path}: {result.reason}[/yellow]")
    finally:
        indexer.close()

    if failures:
        raise typer.Exit(code=1)


@app.command()
def stats(
    db: Path = typer.Option(None, "--db", help="SQLite database path"),
) -> None:
    """Show store and ledger counts."""
    config = _load_config(db)
    resolved_db = config.resolve_db_path(Path.cwd())
    if not resolved_db.exists():
        console.print("[yellow]Database not found, nothing indexed yet.[/yellow]")
        return

    indexer = _build_indexer(config)
    try:
        current = indexer.get_stats()
    finally:
        indexer.close()
    console.print(
        f"Documents: {current.total_documents}, images: {current.total_images}, "
        f"processed files: {current.processed_file_count}"
    )


@app.command()
def search(
    query: str = typer.Argument(..., help="Query text"),
    db: Path = typer.Option(None, "--db", help="SQLite database path"),
    limit: int = typer.Option(10, help="Number of results to display"),
) -> None:
    """Keyword search over indexed documents and images."""
    config = _load_config(db)
    resolved_db = config.resolve_db_path(Path.cwd())
    if not resolved_db.exists():
        raise typer.BadParameter(f"Database not found: {resolved_db}")

    store = SQLiteStore(resolved_db)
    try:
        results = Searcher(store).search(query, limit=limit)
    finally:
        store.close()

    if not results:
        console.print("[yellow]No matches found.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Kind")
    table.add_column("Title")
    table.add_column("Path")
    table.add_column("Snippet")
    for result in results:
        table.add_row(result.kind, result.title, result.file_path, result.snippet)
    console.print(table)


@app.command()
def files(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """List scan groups (directories, albums) and their file counts."""
    _setup_logging(verbose)
    config = _load_config(None)
    scanner = FilesystemScanner.from_config(config)

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Category")
    table.add_column("Group")
    table.add_column("Files")
    table.add_column("Errors")
    for category, groups in (("documents", scanner.scan_documents()), ("images", scanner.scan_images())):
        for group in groups:
            table.add_row(category, group.name, str(len(group.files)), str(len(group.errors)))
    console.print(table)


@app.command()
def watch(
    db: Path = typer.Option(None, "--db", help="SQLite database path"),
    run_now: bool = typer.Option(False, "--run-now", help="Scan once immediately"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Run periodic scans in the foreground until interrupted."""
    _setup_logging(verbose)
    config = _load_config(db)
    config.ensure_directories()
    indexer = _build_indexer(config)
    scheduler = ScanScheduler(indexer, interval=config.scan_interval_seconds, run_on_start=run_now)
    scheduler.start()
    console.print(f"Next scan in {scheduler.next_delay() / 60:.0f} minutes. Press Ctrl+C to stop.")
    try:
        while scheduler.running:
            time.sleep(1)
    except KeyboardInterrupt:
        console.print("Stopping scheduler...")
    finally:
        scheduler.stop()
        indexer.close()


@app.command()
def web(
    host: str = typer.Option("127.0.0.1", help="Host interface"),
    port: int = typer.Option(3000, help="Server port"),
    scheduler: bool = typer.Option(True, "--scheduler/--no-scheduler", help="Run periodic scans"),
) -> None:
    """Start the HTTP API."""
    try:
        import uvicorn
    except ImportError as exc:  # pragma: no cover
        raise typer.BadParameter(
            "uvicorn is not installed. Install the web extras with \"python -m pip install '.[web]'\""
        ) from exc

    from homeindex.web.app import app as web_app

    load_dotenv()
    os.environ["HOMEINDEX_SCHEDULER"] = "1" if scheduler else "0"
    console.print(f"Starting HomeIndex API on http://{host}:{port}")
    uvicorn.run(web_app, host=host, port=port, reload=False, log_level="info")
