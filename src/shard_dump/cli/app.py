"""
Root Typer application for the shard-dump CLI.
"""

from __future__ import annotations

import typer
from typer import Typer

app = Typer(
    name="shard-dump",
    help="shard-dump: bounded BSON snapshots of a time-sharded MongoDB store.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from shard_dump import __version__

        typer.echo(f"shard-dump {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """shard-dump CLI: export, inspect shards, show configuration."""


# ── Command registration ─────────────────────────────────────────────────

from shard_dump.cli.config import app as config_app  # noqa: E402
from shard_dump.cli.inspect import aggregate, shards  # noqa: E402
from shard_dump.cli.run import run  # noqa: E402

app.command("run")(run)
app.command("shards")(shards)
app.command("aggregate")(aggregate)
app.add_typer(config_app, name="config", help="Configuration inspection.")
