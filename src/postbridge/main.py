"""
Postbridge - CLI Entry Point.

Usage:
    postbridge health                       Check configuration and connectivity
    postbridge query subscribers -w is_active=eq.true --limit 5
    postbridge rpc get_stats --params '{"page_id": "123"}'
    postbridge import subscribers rows.json Bulk insert rows from a JSON file
    postbridge --help                       Show help
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Awaitable, Callable, Optional, TypeVar

import typer
from rich.console import Console
from rich.logging import RichHandler

from postbridge.db.client import PostgrestClient, default_headers
from postbridge.db.filters import parse_expression
from postbridge.db.models import COUNT_MODES, QueryResult, RpcResult, SingleResult

T = TypeVar("T")

app = typer.Typer(
    name="postbridge",
    help="Postbridge - query a PostgREST data API from the command line.",
    add_completion=False,
)
console = Console()


def make_client() -> PostgrestClient:
    """Client built from settings, one per command."""
    from postbridge.config import settings

    return PostgrestClient(
        settings.postgrest_url,
        headers=default_headers(),
        timeout=settings.postgrest_timeout,
    )


def _run(work: Callable[[PostgrestClient], Awaitable[T]]) -> T:
    async def runner() -> T:
        async with make_client() as client:
            return await work(client)

    return asyncio.run(runner())


def _sort_key(key: str) -> tuple[str, bool]:
    """Split "pages.name.desc" into ("pages.name", False). A bare column sorts ascending."""
    column, _, direction = key.rpartition(".")
    if column and direction in ("asc", "desc"):
        return column, direction == "asc"
    return key, True


def _print_result(result: QueryResult | SingleResult | RpcResult) -> None:
    payload = {key: value for key, value in result.model_dump(mode="json").items() if value is not None}
    console.print_json(data=payload)
    if result.error is not None:
        raise typer.Exit(1)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every request at DEBUG level"),
) -> None:
    """Configure logging before any command runs."""
    from postbridge.config import settings

    logging.basicConfig(
        level="DEBUG" if verbose else settings.log_level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


@app.command()
def health(
    resource: str = typer.Option("subscribers", "--resource", "-r", help="Resource to count"),
) -> None:
    """Check configuration and reach the data API."""
    from postbridge.config import get_settings

    console.print("\n[bold]Postbridge Health Check[/bold]\n")

    try:
        settings = get_settings()
    except Exception as e:
        console.print(f"\n[red]❌ Configuration error: {e}[/red]")
        console.print("[dim]Check your .env file.[/dim]")
        raise typer.Exit(1)

    console.print("✅ Configuration loaded")
    console.print(f"   Environment: {settings.postbridge_env}")
    console.print(f"   Data API: {settings.postgrest_url}")
    console.print(f"   Log level: {settings.log_level}")
    if settings.postgrest_api_key:
        console.print("✅ API key configured")
    else:
        console.print("ℹ️  No API key, requests are anonymous")

    result = _run(lambda client: client.from_(resource).select("*", count="exact", head=True).execute())
    if result.error is not None:
        console.print(f"❌ {resource}: {result.error.message}")
        raise typer.Exit(1)

    count = result.count if result.count is not None else "?"
    console.print(f"✅ {resource}: {count} rows")
    console.print("\n[green]All checks passed![/green]")


@app.command()
def version() -> None:
    """Show version information."""
    from postbridge import __version__

    console.print(f"Postbridge version {__version__}")


@app.command()
def query(
    resource: str = typer.Argument(..., help="Resource (table or view) to read"),
    select: str = typer.Option("*", "--select", "-s", help="Field list"),
    where: list[str] = typer.Option([], "--where", "-w", help="Filter as column=op.value (repeatable)"),
    order: list[str] = typer.Option([], "--order", "-o", help="Sort key, column or column.desc (repeatable)"),
    limit: Optional[int] = typer.Option(None, "--limit", "-n"),
    offset: Optional[int] = typer.Option(None, "--offset"),
    count: Optional[str] = typer.Option(None, "--count", help="exact, planned or estimated"),
    single: bool = typer.Option(False, "--single", help="Require exactly one row"),
) -> None:
    """Read rows and print the result envelope as JSON."""
    if count is not None and count not in COUNT_MODES:
        console.print(f"[red]--count must be one of {', '.join(COUNT_MODES)}[/red]")
        raise typer.Exit(2)

    try:
        filters = [parse_expression(expression) for expression in where]
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(2)

    async def work(client: PostgrestClient):
        builder = client.from_(resource).select(select, count=count)
        for column, raw in filters:
            builder.add_filter(column, raw)
        for key in order:
            column, ascending = _sort_key(key)
            builder.order(column, ascending=ascending)
        if limit is not None:
            builder.limit(limit)
        if offset is not None:
            builder.offset(offset)
        if single:
            return await builder.single()
        return await builder

    _print_result(_run(work))


@app.command()
def rpc(
    name: str = typer.Argument(..., help="Stored procedure name"),
    params: str = typer.Option("{}", "--params", "-p", help="Arguments as a JSON object"),
) -> None:
    """Call a stored procedure and print the result envelope."""
    try:
        args = json.loads(params)
    except json.JSONDecodeError as e:
        console.print(f"[red]Invalid --params JSON: {e}[/red]")
        raise typer.Exit(2)

    _print_result(_run(lambda client: client.rpc(name, args)))


@app.command("import")
def import_rows(
    resource: str = typer.Argument(..., help="Resource to insert into"),
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON array of rows"),
    label: str = typer.Option("id", "--label", help="Field shown for each imported row"),
) -> None:
    """Bulk insert rows from a JSON file."""
    try:
        rows = json.loads(file.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        console.print(f"[red]Invalid JSON in {file}: {e}[/red]")
        raise typer.Exit(2)
    if not isinstance(rows, list):
        console.print("[red]Expected a JSON array of rows[/red]")
        raise typer.Exit(2)

    console.print(f"Importing {len(rows)} rows into {resource}...")
    result = _run(lambda client: client.from_(resource).insert(rows).execute())

    if result.error is not None:
        console.print(f"[red]❌ Error: {result.error.message}[/red]")
        raise typer.Exit(1)

    imported = result.data or []
    console.print(f"[green]Success![/green] Imported {len(imported)} rows:")
    for row in imported:
        console.print(f"  - {row.get(label, '?')}")


if __name__ == "__main__":
    app()
