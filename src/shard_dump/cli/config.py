"""
CLI: ``shard-dump config`` - configuration inspection.
"""

from __future__ import annotations

import typer

from shard_dump.cli import utils

app = typer.Typer(no_args_is_help=True)


@app.command("show")
def show_config(
    format: str = typer.Option("table", "--format", "-f", help="Output format: table, json, env"),
) -> None:
    """Show the resolved configuration."""
    settings = utils.build_settings()

    if format == "json":
        utils.console.print_json(settings.model_dump_json())
        return

    if format == "env":
        for key, value in settings.model_dump().items():
            utils.console.print(f"{key.upper()}={value}", markup=False, highlight=False)
        return

    utils.print_dict(settings.model_dump(), title="Settings")


@app.command("validate")
def validate_config() -> None:
    """Validate configuration from the environment and .env file."""
    utils.build_settings()
    utils.console.print("[green]✓ Configuration is valid[/green]")
