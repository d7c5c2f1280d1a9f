"""Omnisearch CLI — Typer-based entry point.

Commands
--------
tools       List the tool catalog.
search      Connect tools, run one aggregated search, print ranked results.
health      Connect tools, run one health cycle, print health and stats.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, get_args

import typer

from omnisearch.catalog import DEFAULT_CATALOG
from omnisearch.config.settings import get_settings
from omnisearch.engine import SearchEngine
from omnisearch.errors import OmnisearchError
from omnisearch.models import ContentType, SearchOptions, SearchResult

app = typer.Typer(
    name="omnisearch",
    help="Omnisearch — one query across every connected workplace tool",
    add_completion=False,
)

_DEFAULT_CONNECT = ["slack", "jira", "github"]


def _setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s  %(name)-30s  %(levelname)-7s  %(message)s",
    )


def _check_tool_ids(tool_ids: list[str]) -> None:
    known = {tool.id for tool in DEFAULT_CATALOG}
    unknown = [t for t in tool_ids if t not in known]
    if unknown:
        typer.echo(f"Unknown tool(s): {', '.join(unknown)}")
        raise typer.Exit(1)


async def _connect_all(engine: SearchEngine, tool_ids: list[str]) -> list[str]:
    """Connect each tool, reporting failures.  Returns the ones that connected."""
    connected: list[str] = []
    for tool_id in tool_ids:
        try:
            await engine.connect(tool_id)
        except OmnisearchError as exc:
            typer.echo(f"  [error] {tool_id}: {exc}")
            continue
        connected.append(tool_id)
    return connected


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command()
def tools() -> None:
    """List all catalog tools."""
    _setup_logging()
    for tool in DEFAULT_CATALOG:
        kind = "simulated" if tool.is_simulated else "credential"
        typer.echo(f"  {tool.id:18s} {kind:10s}  {tool.category:18s}  {tool.description[:50]}")


@app.command()
def search(
    query: str = typer.Argument(..., help="Text to search for."),
    connect: Optional[list[str]] = typer.Option(
        None, "--connect", "-c", help="Tool id to connect (repeatable)."
    ),
    max_results: Optional[int] = typer.Option(None, "--max", "-n", help="Per-tool result cap."),
    content_type: Optional[str] = typer.Option(None, "--type", "-t", help="Only this content type."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Search every connected tool and print the ranked results."""
    _setup_logging(verbose)
    tool_ids = connect or _DEFAULT_CONNECT
    _check_tool_ids(tool_ids)
    if content_type is not None and content_type not in get_args(ContentType):
        typer.echo(f"Unknown content type: {content_type}")
        raise typer.Exit(1)

    options = SearchOptions(
        query=query,
        max_results=max_results,
        content_types=(content_type,) if content_type else None,  # type: ignore[arg-type]
    )

    async def _run() -> int:
        engine = SearchEngine(DEFAULT_CATALOG, get_settings())
        try:
            if not await _connect_all(engine, tool_ids):
                typer.echo("No tools connected.")
                return 1
            return _print_results(await engine.search_all(options))
        finally:
            await engine.aclose()

    raise typer.Exit(asyncio.run(_run()))


def _print_results(results: list[SearchResult]) -> int:
    if not results:
        typer.echo("No results.")
        return 0
    for result in results:
        author = f"  by {result.author}" if result.author else ""
        typer.echo(
            f"  {result.relevance_score:6.2f}  [{result.tool.id}] {result.content_type:14s} "
            f"{result.title[:60]}{author}"
        )
    typer.echo(f"{len(results)} result(s).")
    return 0


@app.command()
def health(
    connect: Optional[list[str]] = typer.Option(
        None, "--connect", "-c", help="Tool id to connect (repeatable)."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Connect tools, run one health check, and print the results."""
    _setup_logging(verbose)
    tool_ids = connect or _DEFAULT_CONNECT
    _check_tool_ids(tool_ids)

    async def _run() -> None:
        engine = SearchEngine(DEFAULT_CATALOG, get_settings())
        try:
            await _connect_all(engine, tool_ids)
            await engine.run_health_checks()
            for status in engine.get_all_health_statuses():
                if status.tool_id not in tool_ids:
                    continue
                rt = f"{status.response_time_ms:.0f} ms" if status.response_time_ms is not None else "-"
                line = f"  {status.tool_id:18s} {status.status:12s} {rt:>8s}"
                if status.error_message:
                    line += f"  {status.error_message}"
                typer.echo(line)
            stats = engine.get_connection_stats()
            typer.echo(
                f"Connected {stats.connected_tools}/{stats.total_tools}, "
                f"healthy={stats.healthy_connections} warning={stats.warning_connections} "
                f"error={stats.error_connections} avg={stats.average_response_time_ms:.0f} ms"
            )
        finally:
            await engine.aclose()

    asyncio.run(_run())


def main() -> int:
    """Entry point for the ``omnisearch`` console script."""
    app()
    return 0
