"""
CLI: ``shard-dump run`` - export the most recent shards.
"""

from __future__ import annotations

from pathlib import Path

import typer

from shard_dump.cli import utils
from shard_dump.core.result import Err
from shard_dump.pipeline import DumpRunner, RichProgress


def run(
    output_dir: Path | None = typer.Option(None, "--output-dir", "-o", help="Artifact directory [env: OUTPUT_DIR]"),
    max_collections: int | None = typer.Option(None, "--max-collections", help="Daily shards to export [env: MAX_COLLECTIONS]"),
    max_events: int | None = typer.Option(None, "--max-events", help="Records per daily window [env: MAX_EVENTS]"),
    max_repetitions: int | None = typer.Option(None, "--max-repetitions", help="Correlated records per group hash [env: MAX_REPETITIONS]"),
    uri: str | None = typer.Option(None, "--uri", help="MongoDB URI [env: MONGO_URI]"),
    database: str | None = typer.Option(None, "--database", "-d", help="Database name [env: MONGO_DATABASE]"),
    no_progress: bool = typer.Option(False, "--no-progress", help="Hide per-shard progress bars"),
) -> None:
    """Export daily windows and their correlated records as BSON artifacts."""
    settings = utils.build_settings(
        output_dir=output_dir,
        max_collections=max_collections,
        max_events=max_events,
        max_repetitions=max_repetitions,
        mongo_uri=uri,
        mongo_database=database,
    )
    runner = DumpRunner(
        utils.make_adapter(settings),
        settings,
        progress=None if no_progress else RichProgress(utils.err_console),
    )
    result = runner.run()
    if isinstance(result, Err):
        utils.print_error(result.error)
        raise typer.Exit(code=1)

    summary = result.unwrap()
    utils.print_table(
        [
            {
                "shard": shard.shard,
                "window": shard.window_records,
                "keys": shard.keys,
                "events": shard.events_records,
                "repetitions": shard.repetitions_records,
            }
            for shard in summary.shards
        ],
        title=f"Run {summary.run_id}",
    )
    utils.console.print(
        f"[green]✓[/green] Done: {len(summary.shards)} shards, "
        f"{summary.total_records} records → {summary.output_dir}"
    )
