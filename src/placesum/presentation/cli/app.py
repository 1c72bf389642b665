"""placesum CLI application using Typer.

Provides command-line access to the place summary service and the
database maintenance tasks it needs.
"""

import asyncio
import json
import logging
import sys
from typing import Optional

import typer
import uvicorn
from rich.console import Console
from rich.table import Table

from placesum.application.dtos import PlaceSummaryResponse, ResponseStatus
from placesum.infrastructure.persistence.sqlalchemy.database import (
    create_engine_from_settings,
    create_session_maker,
)
from placesum.infrastructure.persistence.sqlalchemy.init_db import (
    create_tables,
    drop_tables,
)
from placesum.infrastructure.persistence.sqlalchemy.repositories import (
    CrawlLockRepositorySQLAlchemy,
    build_place_summary_service,
)
from placesum_config.settings import get_settings

app = typer.Typer(
    name="placesum",
    help="placesum - cached AI review summaries for places",
    no_args_is_help=True,
)
console = Console()

db_app = typer.Typer(
    name="db",
    help="Database schema management",
    no_args_is_help=True,
)
app.add_typer(db_app)

locks_app = typer.Typer(
    name="locks",
    help="Crawl lock maintenance",
    no_args_is_help=True,
)
app.add_typer(locks_app)

_STATUS_STYLES = {
    ResponseStatus.CACHED: "green",
    ResponseStatus.FRESH: "bold green",
    ResponseStatus.STALE: "yellow",
    ResponseStatus.DEGRADED: "red",
    ResponseStatus.MINIMAL: "bold red",
}


def _configure_cli_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
        force=True,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


def _db_display(database_url: str) -> str:
    return database_url.split("@")[-1] if "@" in database_url else database_url


async def _fetch(place_name: str) -> PlaceSummaryResponse:
    settings = get_settings()
    engine = create_engine_from_settings(settings)
    try:
        await create_tables(engine)
        service = build_place_summary_service(create_session_maker(engine), settings)
        try:
            return await service.fetch_summary(place_name)
        finally:
            # A stale hit spawns a refresh; finish it before exiting
            await service.aclose()
    finally:
        await engine.dispose()


def _to_payload(response: PlaceSummaryResponse) -> dict:
    data = response.data
    return {
        "status": response.status.value,
        "data": {
            "place_name_original": data.place_name_original,
            "normalized_key": data.normalized_key,
            "summary": data.summary,
            "pros": list(data.pros),
            "cons": list(data.cons),
            "sentiment": data.sentiment.value,
            "review_count": data.review_count,
            "source_url": data.source_url,
        },
        "is_fresh": response.is_fresh,
        "message": response.message,
        "warning": response.warning,
        "error": response.error,
    }


def _print_response(response: PlaceSummaryResponse) -> None:
    style = _STATUS_STYLES.get(response.status, "white")
    data = response.data

    console.print(
        f"\n[bold]{data.place_name_original}[/bold] [dim]({data.normalized_key})[/dim]"
    )
    console.print(f"Status: [{style}]{response.status.value}[/{style}]")
    for label, text in (
        ("Message", response.message),
        ("Warning", response.warning),
        ("Error", response.error),
    ):
        if text:
            console.print(f"[yellow]{label}:[/yellow] {text}")

    console.print(f"\n{data.summary}\n")

    if data.pros or data.cons:
        table = Table(show_header=True, header_style="bold")
        table.add_column("Pros", style="green")
        table.add_column("Cons", style="red")
        rows = max(len(data.pros), len(data.cons))
        for i in range(rows):
            table.add_row(
                data.pros[i] if i < len(data.pros) else "",
                data.cons[i] if i < len(data.cons) else "",
            )
        console.print(table)

    console.print(
        f"[dim]Sentiment: {data.sentiment.value} | "
        f"Reviews: {data.review_count} | {data.source_url}[/dim]\n"
    )


@app.command("fetch")
def fetch(
    place_name: str = typer.Argument(..., help="Place name, e.g. '스타벅스 강남점'"),
    as_json: bool = typer.Option(False, "--json", help="Print the raw JSON response"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Fetch the review summary for a place (cache first)."""
    _configure_cli_logging(verbose)

    response = asyncio.run(_fetch(place_name))

    if as_json:
        payload = _to_payload(response)
        typer.echo(json.dumps(payload, ensure_ascii=False, indent=2))
    else:
        _print_response(response)

    if response.status is ResponseStatus.MINIMAL:
        raise typer.Exit(code=1)


async def _run_schema_task(drop: bool) -> None:
    engine = create_engine_from_settings(get_settings())
    try:
        if drop:
            await drop_tables(engine)
        else:
            await create_tables(engine)
    finally:
        await engine.dispose()


@db_app.command("init")
def db_init() -> None:
    """Create all tables (idempotent)."""
    _configure_cli_logging(verbose=False)
    console.print(f"Database: {_db_display(get_settings().database_url)}")
    asyncio.run(_run_schema_task(drop=False))
    console.print("[green]Database initialized.[/green]")


@db_app.command("drop")
def db_drop(
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation"),
) -> None:
    """Drop all tables (DELETES ALL DATA)."""
    _configure_cli_logging(verbose=False)
    console.print(f"Database: {_db_display(get_settings().database_url)}")
    if not force:
        typer.confirm(
            "This will DELETE ALL DATA in the database. Continue?",
            abort=True,
        )
    asyncio.run(_run_schema_task(drop=True))
    console.print("[yellow]Database tables dropped.[/yellow]")


@app.command("serve")
def serve(
    host: Optional[str] = typer.Option(None, help="Bind address (default: API_HOST)"),
    port: Optional[int] = typer.Option(None, help="Port (default: API_PORT)"),
    reload: bool = typer.Option(False, "--reload", help="Auto-reload on changes"),
) -> None:
    """Run the HTTP API with uvicorn."""
    settings = get_settings()
    uvicorn.run(
        "placesum.presentation.api.app:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


async def _cleanup_locks() -> int:
    settings = get_settings()
    engine = create_engine_from_settings(settings)
    try:
        repository = CrawlLockRepositorySQLAlchemy(
            create_session_maker(engine),
            ttl_seconds=settings.crawl_lock_ttl_seconds,
        )
        return await repository.cleanup_expired_locks()
    finally:
        await engine.dispose()


@locks_app.command("cleanup")
def locks_cleanup() -> None:
    """Delete expired crawl locks."""
    _configure_cli_logging(verbose=False)
    deleted = asyncio.run(_cleanup_locks())
    console.print(f"Deleted [cyan]{deleted}[/cyan] expired lock(s).")


def cli() -> None:
    """Entry point for the CLI application."""
    app()


if __name__ == "__main__":
    cli()
