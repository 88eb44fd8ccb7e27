"""
CLI utility helpers: settings, adapters and output formatting.
"""

from __future__ import annotations

import json
from typing import Any

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from shard_dump.core.adapters import MongoAdapter, StoreAdapter
from shard_dump.core.errors import ConfigError, DumpError
from shard_dump.core.settings import DumpSettings, load_settings
from shard_dump.framework.logging import configure_logging

console = Console()
err_console = Console(stderr=True)


# ── Settings / adapter helpers ───────────────────────────────────────────


def build_settings(**overrides: Any) -> DumpSettings:
    """Load settings with CLI overrides and configure logging from them.

    Exits with code 1 on invalid configuration.
    """
    try:
        settings = load_settings(**overrides)
    except ConfigError as e:
        print_error(e)
        raise typer.Exit(code=1) from e
    configure_logging(level=settings.log_level, format=settings.log_format)
    return settings


def make_adapter(settings: DumpSettings) -> StoreAdapter:
    """Store adapter for the configured MongoDB deployment."""
    return MongoAdapter(
        settings.mongo_uri,
        settings.mongo_database,
        connect_timeout=settings.connect_timeout,
    )


# ── Output helpers ───────────────────────────────────────────────────────


def print_error(error: DumpError) -> None:
    """Render a ``DumpError`` as a red panel on stderr."""
    lines = [f"[bold]{error.message}[/bold]"]
    for key, value in error.context.to_dict().items():
        lines.append(f"[cyan]{key}[/cyan]: {value}")
    if error.cause is not None:
        lines.append(f"[dim]cause: {error.cause}[/dim]")
    err_console.print(
        Panel(
            "\n".join(lines),
            title=f"[bold red]{type(error).__name__}[/bold red] ({error.category.value})",
            border_style="red",
        )
    )


def print_json(payload: Any) -> None:
    console.print_json(json.dumps(payload, default=str))


def print_table(rows: list[dict[str, Any]], *, title: str = "") -> None:
    """Render a list of dicts as a Rich table."""
    if not rows:
        console.print("[dim]No items.[/dim]")
        return
    table = Table(title=title or None, show_lines=False, pad_edge=False)
    for col in rows[0]:
        table.add_column(col, overflow="fold")
    for row in rows:
        table.add_row(*(str(v) for v in row.values()))
    console.print(table)


def print_dict(data: dict[str, Any], *, title: str = "") -> None:
    """Render a single dict as key-value pairs."""
    if title:
        console.print(f"[bold]{title}[/bold]")
    for k, v in data.items():
        console.print(f"  [cyan]{k}[/cyan]: {v}")
