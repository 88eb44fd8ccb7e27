"""
CLI: ``shard-dump shards`` / ``shard-dump aggregate`` - read-only inspection.
"""

from __future__ import annotations

import typer

from shard_dump.cli import utils
from shard_dump.core.errors import DumpError
from shard_dump.pipeline import ShardCatalog, ShardRanker, WindowAggregator


def shards(
    limit: int | None = typer.Option(None, "--limit", "-n", help="How many shards to rank [env: MAX_COLLECTIONS]"),
    uri: str | None = typer.Option(None, "--uri", help="MongoDB URI [env: MONGO_URI]"),
    database: str | None = typer.Option(None, "--database", "-d", help="Database name [env: MONGO_DATABASE]"),
    json_out: bool = typer.Option(False, "--json", help="JSON output"),
) -> None:
    """Rank daily shards by their latest record, newest first."""
    settings = utils.build_settings(max_collections=limit, mongo_uri=uri, mongo_database=database)
    adapter = utils.make_adapter(settings)
    try:
        with adapter:
            adapter.ping()
            ranker = ShardRanker(ShardCatalog(adapter, timeout=settings.catalog_timeout))
            ranked = ranker.rank(settings.max_collections)
    except DumpError as e:
        utils.print_error(e)
        raise typer.Exit(code=1) from e

    rows = [{"shard": shard.name, "latest_timestamp": shard.latest_timestamp} for shard in ranked]
    if json_out:
        utils.print_json(rows)
        return
    utils.print_table(rows, title="Daily shards")


def aggregate(
    period: str = typer.Argument(..., help="Period id, the part after 'dailyEvents:'"),
    max_events: int | None = typer.Option(None, "--max-events", help="Daily records to join [env: MAX_EVENTS]"),
    max_repetitions: int | None = typer.Option(None, "--max-repetitions", help="Repetitions per daily record [env: MAX_REPETITIONS]"),
    uri: str | None = typer.Option(None, "--uri", help="MongoDB URI [env: MONGO_URI]"),
    database: str | None = typer.Option(None, "--database", "-d", help="Database name [env: MONGO_DATABASE]"),
    json_out: bool = typer.Option(False, "--json", help="JSON output"),
) -> None:
    """Join one period's daily window with its events and repetitions server-side."""
    settings = utils.build_settings(
        max_events=max_events,
        max_repetitions=max_repetitions,
        mongo_uri=uri,
        mongo_database=database,
    )
    adapter = utils.make_adapter(settings)
    try:
        with adapter:
            adapter.ping()
            windows = WindowAggregator(adapter, timeout=settings.aggregate_timeout).aggregate_window(
                period, settings.max_events, settings.max_repetitions
            )
    except DumpError as e:
        utils.print_error(e)
        raise typer.Exit(code=1) from e

    rows = [window.to_dict() for window in windows]
    if json_out:
        utils.print_json(rows)
        return
    utils.print_table(rows, title=f"dailyEvents:{period}")
