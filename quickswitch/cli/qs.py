#!/usr/bin/env python3
"""
CLI host for the quick switcher.

Usage:
    qs search "query"          - Show ranked destinations
    qs go "query" [--pick N]   - Jump to the Nth result
    qs recents                 - Show recently visited destinations
    qs interactive             - Type to filter, arrows to move, Enter to go

Destinations are read from a YAML data file:

    spaces:
      - {id: "!abc:example.org", label: "General Chat", mention_count: 2}
    direct_messages:
      - {id: "!dm:example.org", counterpart_label: "Alice", unread_count: 1}
"""

import asyncio
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple
import click
import yaml
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from loguru import logger

from ..engine.bus import Event
from ..engine.config import LoggingConfig, SwitcherConfig
from ..engine.feeds import DirectMessageSummary, SpaceSummary
from ..engine.models import CandidateKind, ScoredItem
from ..engine.storage import JsonFileKeyValueStore
from ..engine.switcher import QuickSwitcher

console = Console()

KIND_LABELS = {
    CandidateKind.SPACE: "Server",
    CandidateKind.DIRECT_MESSAGE: "Direct Message",
}

# Raw sequences from click.getchar() mapped to switcher key names
KEY_NAMES = {
    "\x1b[A": "ArrowUp",
    "\x1b[B": "ArrowDown",
    "\xe0H": "ArrowUp",
    "\xe0P": "ArrowDown",
    "\r": "Enter",
    "\n": "Enter",
    "\x1b": "Escape",
}
BACKSPACE_KEYS = {"\x7f", "\x08"}


class ConsoleNavigator:
    """Navigator that reports the destination on the console."""

    def __init__(self):
        self.visited: List[str] = []

    def go(self, destination: str) -> None:
        self.visited.append(destination)
        console.print(f"[green]→[/green] {escape(destination)}")


def setup_logging(config: LoggingConfig, verbose: bool = False) -> None:
    """Configure loguru sinks."""
    logger.remove()
    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
        level="DEBUG" if verbose else config.level
    )

    if config.file:
        config.file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            config.file,
            rotation=config.rotation,
            retention=config.retention,
            level="DEBUG"
        )


def load_feed_data(path: Path) -> Tuple[List[SpaceSummary], List[DirectMessageSummary]]:
    """Read spaces and direct messages from a YAML data file."""
    try:
        with open(path, 'r') as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise click.ClickException(f"Cannot read data file {path}: {e}")

    if not isinstance(data, dict):
        raise click.ClickException(f"Data file {path} must contain a mapping")

    try:
        spaces = [SpaceSummary(**entry) for entry in data.get("spaces") or []]
        dms = [DirectMessageSummary(**entry) for entry in data.get("direct_messages") or []]
    except TypeError as e:
        raise click.ClickException(f"Invalid entry in {path}: {e}")

    return spaces, dms


def mention_badge(count: int) -> str:
    if count <= 0:
        return ""
    return "9+" if count > 9 else str(count)


def display_results(switcher: QuickSwitcher, limit: Optional[int] = None) -> None:
    """Display ranked results in a table, highlighting the selection."""
    query = switcher.get_query()

    if switcher.is_loading() and not switcher.get_results():
        console.print("[dim]Loading...[/dim]")
        return

    results = switcher.get_results()
    if not results:
        if query.strip():
            console.print(f"[yellow]No results for[/yellow] \"{escape(query)}\"")
        else:
            console.print("[yellow]No servers or direct messages available[/yellow]")
        return

    shown = results[:limit] if limit else results
    title = "Recent" if not query.strip() else f"Results for \"{escape(query)}\""
    table = Table(title=title)
    table.add_column("", width=1)
    table.add_column("Name", style="cyan", no_wrap=False)
    table.add_column("Type", style="magenta")
    table.add_column("Unread", justify="center")
    table.add_column("Score", justify="right")
    table.add_column("Destination", style="dim")

    selected = switcher.get_selected_index()
    for index, result in enumerate(shown):
        table.add_row(
            "›" if index == selected else "",
            escape(result.label),
            KIND_LABELS[result.kind],
            _unread_cell(result),
            f"{round(result.score * 100)}%" if result.score is not None else "",
            escape(result.destination),
        )

    console.print(table)
    count = len(results)
    console.print(f"[dim]{count} result{'s' if count != 1 else ''}[/dim]")


def _unread_cell(result: ScoredItem) -> str:
    badge = mention_badge(result.item.mention_count)
    if badge:
        return f"[red]{badge}[/red]"
    return "[red]●[/red]" if result.item.has_unread else ""


def build_switcher(ctx: click.Context, navigator: ConsoleNavigator) -> QuickSwitcher:
    """Create a switcher and populate its feeds from the data file."""
    config: SwitcherConfig = ctx.obj["config"]
    storage = JsonFileKeyValueStore(ctx.obj["recents_file"] or config.recents.path)
    switcher = QuickSwitcher.from_config(config, storage, navigator)

    data_path = ctx.obj["data"]
    if data_path is None:
        return switcher

    spaces, dms = load_feed_data(Path(data_path))
    switcher.space_feed.update(spaces)

    async def fetch_direct_messages():
        return dms

    asyncio.run(switcher.dm_feed.refresh(fetch_direct_messages))
    return switcher


@click.group()
@click.option("--config", "-c", "config_path", type=click.Path(exists=True, dir_okay=False), help="Config file path")
@click.option("--data", "-d", type=click.Path(exists=True, dir_okay=False), help="YAML file with spaces and direct messages")
@click.option("--recents-file", type=click.Path(dir_okay=False), help="Override where recents are stored")
@click.option("--verbose", "-v", is_flag=True, help="Debug logging")
@click.pass_context
def cli(ctx, config_path: Optional[str], data: Optional[str], recents_file: Optional[str], verbose: bool):
    """Quick switcher - jump to a server or direct message."""
    try:
        config = SwitcherConfig.load(Path(config_path) if config_path else None)
    except Exception as e:
        raise click.ClickException(f"Configuration error: {e}")

    setup_logging(config.logging, verbose)

    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["data"] = data
    ctx.obj["recents_file"] = Path(recents_file) if recents_file else None


@cli.command()
@click.argument("query", required=False, default="")
@click.option("--limit", "-l", default=10, help="Max results")
@click.pass_context
def search(ctx, query: str, limit: int):
    """Show ranked destinations for QUERY (recents first when empty)."""
    switcher = build_switcher(ctx, ConsoleNavigator())
    switcher.set_query(query)
    display_results(switcher, limit)


@cli.command()
@click.argument("query")
@click.option("--pick", "-p", default=0, help="Move the selection down N times before committing")
@click.pass_context
def go(ctx, query: str, pick: int):
    """Jump to the best match for QUERY."""
    switcher = build_switcher(ctx, ConsoleNavigator())
    switcher.set_query(query)

    for _ in range(pick):
        switcher.move_down()

    if switcher.commit() is None:
        console.print(f"[yellow]No results for[/yellow] \"{escape(query)}\"")
        ctx.exit(1)


@cli.command()
@click.pass_context
def recents(ctx):
    """Show recently visited destinations."""
    switcher = build_switcher(ctx, ConsoleNavigator())
    entries = switcher.recency_store.load()

    if not entries:
        console.print("[green]No recent destinations[/green]")
        return

    table = Table(title="Recent Destinations")
    table.add_column("#", justify="right")
    table.add_column("Type", style="magenta")
    table.add_column("ID", style="cyan")
    table.add_column("Destination")
    table.add_column("Visited", style="dim")

    for i, entry in enumerate(entries, 1):
        visited = datetime.fromtimestamp(entry.last_visited_at / 1000)
        table.add_row(
            str(i),
            KIND_LABELS[entry.kind],
            escape(entry.id),
            escape(entry.destination),
            visited.strftime("%Y-%m-%d %H:%M"),
        )

    console.print(table)


@cli.command()
@click.pass_context
def interactive(ctx):
    """Type to filter, arrows to move, Enter to go, Esc to close."""
    navigator = ConsoleNavigator()
    switcher = build_switcher(ctx, navigator)

    state = {"done": False}

    def on_dismiss(event: Event) -> None:
        state["done"] = True

    switcher.subscribe(on_dismiss, "switcher.dismissed")
    display_results(switcher)

    while not state["done"]:
        raw = click.getchar()

        if not raw:
            break
        if raw == "\x03":
            raise click.Abort()

        key = KEY_NAMES.get(raw)
        if key is not None:
            switcher.handle_key(key)
            if key == "Enter" and navigator.visited:
                break
        elif raw in BACKSPACE_KEYS:
            switcher.set_query(switcher.get_query()[:-1])
        elif raw.isprintable():
            switcher.set_query(switcher.get_query() + raw)
        else:
            continue

        if not state["done"]:
            console.clear()
            console.print(f"[bold]>[/bold] {escape(switcher.get_query())}")
            display_results(switcher)


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
