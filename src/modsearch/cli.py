"""Command line interface for ModSearch."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from modsearch.config import AppConfig
from modsearch.errors import InvalidPatternError
from modsearch.exporter import export_result, normalize_format
from modsearch.history import SQLiteHistoryStore
from modsearch.ingestion.stats import compute_file_stats
from modsearch.models import FileHandle, FileResult, SearchOptions
from modsearch.search.orchestrator import Searcher
from modsearch.search.pattern import compile_pattern
from modsearch.utils.files import discover, partition_supported
from modsearch.web.app import app as web_app


console = Console()
app = typer.Typer(help="ModSearch - multi-file text search for game-mod scripts and configs")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _ensure_db_parent(db_path: Path) -> None:
    db_path.parent.mkdir(parents=True, exist_ok=True)


def _collect_files(inputs: List[Path], all_files: bool) -> List[FileHandle]:
    handles = list(discover(inputs))
    if all_files:
        return handles
    accepted, rejected = partition_supported(handles)
    if rejected:
        console.print(f"[yellow]Skipped {len(rejected)} unsupported files.[/yellow]")
    return accepted


def _render_file(file: FileResult) -> None:
    console.print(f"[bold cyan]{escape(file.path)}[/bold cyan] ({len(file.matches)} matches)")
    for match in file.matches:
        if match.is_limit_warning:
            console.print(f"  [yellow]{match.line}[/yellow]")
            continue
        if match.context.before is not None:
            console.print(Text(f"  {match.line_number - 1:>6}  {match.context.before}", style="dim"))
        line = Text(f"> {match.line_number:>6}  ")
        for segment in match.segments:
            line.append(segment.text, style="bold red" if segment.is_match else None)
        console.print(line)
        if match.context.after is not None:
            console.print(Text(f"  {match.line_number + 1:>6}  {match.context.after}", style="dim"))
    console.print()


@app.command()
def search(
    query: str = typer.Argument(..., help="Text or regular expression to search for"),
    inputs: List[Path] = typer.Argument(..., help="Files or folders to search.", resolve_path=True),
    case_sensitive: bool = typer.Option(False, "--case-sensitive", "-c", help="Match case"),
    whole_word: bool = typer.Option(False, "--whole-word", "-w", help="Match whole words only"),
    regex: bool = typer.Option(False, "--regex", "-r", help="Treat the query as a regular expression"),
    all_files: bool = typer.Option(False, "--all-files", help="Do not filter by file extension"),
    max_matches: int = typer.Option(AppConfig().max_matches_per_file, help="Maximum matches kept per file"),
    concurrency: int = typer.Option(AppConfig().concurrency, help="Files scanned in parallel"),
    export: Optional[Path] = typer.Option(None, "--export", help="Write a report to this file"),
    fmt: str = typer.Option("text", "--format", help="Report format: text or markdown"),
    history_db: Path = typer.Option(None, "--history-db", help="Search history database path"),
    no_history: bool = typer.Option(False, "--no-history", help="Do not record the query"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Search files for a query and print every matching line."""
    _setup_logging(verbose)
    try:
        report_format = normalize_format(fmt)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    options = SearchOptions(
        query=query,
        case_sensitive=case_sensitive,
        whole_word=whole_word,
        use_regex=regex,
    )
    config = AppConfig(max_matches_per_file=max_matches, concurrency=concurrency)
    # Reject bad patterns and limits before touching the filesystem
    try:
        compile_pattern(options)
        searcher = Searcher(guard=config.guard_policy(), concurrency=config.concurrency)
    except (InvalidPatternError, ValueError) as exc:
        raise typer.BadParameter(str(exc)) from exc

    files = _collect_files(inputs, all_files)
    if not files:
        console.print("[yellow]No supported files found.[/yellow]")
        return

    result = searcher.search(files, options)

    if not result.files:
        console.print("[yellow]No matches found.[/yellow]")
    for file in result.files:
        _render_file(file)

    console.print(
        f"Files: {result.total_files}, matched: {result.matched_files}, "
        f"matches: {result.total_matches}, time: {result.execution_time_ms:.1f}ms"
    )
    if result.diagnostics:
        console.print(f"[yellow]{len(result.diagnostics)} files could not be read.[/yellow]")

    if export is not None:
        export.write_text(export_result(result, report_format), encoding="utf-8")
        console.print(f"Report written to [bold]{escape(str(export))}[/bold]")

    if not no_history:
        history_config = AppConfig(history_path=history_db) if history_db else AppConfig()
        resolved_db = history_config.resolve_history_path(Path.cwd())
        _ensure_db_parent(resolved_db)
        store = SQLiteHistoryStore(resolved_db, limit=history_config.history_limit)
        try:
            store.append(query)
        finally:
            store.close()


@app.command()
def stats(
    inputs: List[Path] = typer.Argument(..., help="Files or folders to inspect.", resolve_path=True),
    all_files: bool = typer.Option(False, "--all-files", help="Do not filter by file extension"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Show size, line count and encoding of files."""
    _setup_logging(verbose)
    files = _collect_files(inputs, all_files)
    if not files:
        console.print("[yellow]No supported files found.[/yellow]")
        return

    config = AppConfig()
    results = compute_file_stats(
        [handle.path for handle in files],
        guard=config.guard_policy(),
        concurrency=config.concurrency,
    )

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("File")
    table.add_column("Size", justify="right")
    table.add_column("Lines", justify="right")
    table.add_column("Encoding")
    table.add_column("Modified")

    for stat in results:
        table.add_row(
            stat.path,
            str(stat.size),
            str(stat.line_count),
            stat.encoding,
            stat.modified_at.strftime("%Y-%m-%d %H:%M"),
        )

    console.print(table)


@app.command()
def history(
    clear: bool = typer.Option(False, "--clear", help="Forget all recorded queries"),
    history_db: Path = typer.Option(None, "--history-db", help="Search history database path"),
) -> None:
    """List recent queries."""
    config = AppConfig(history_path=history_db) if history_db else AppConfig()
    resolved_db = config.resolve_history_path(Path.cwd())

    if not resolved_db.exists():
        console.print("[yellow]No search history yet.[/yellow]")
        return

    store = SQLiteHistoryStore(resolved_db, limit=config.history_limit)
    try:
        if clear:
            removed = store.clear()
            console.print(f"Removed {removed} history entries.")
            return
        entries = store.load()
    finally:
        store.close()

    if not entries:
        console.print("[yellow]No search history yet.[/yellow]")
        return
    for position, entry in enumerate(entries, start=1):
        console.print(f"{position:>2}. {escape(entry)}")


@app.command()
def web(
    host: str = typer.Option("127.0.0.1", help="Host interface"),
    port: int = typer.Option(8000, help="Server port"),
) -> None:
    """Start the HTTP API."""
    import uvicorn

    console.print(f"Starting ModSearch API on http://{host}:{port}")
    uvicorn.run(
        web_app,
        host=host,
        port=port,
        reload=False,
        log_level="info",
    )
