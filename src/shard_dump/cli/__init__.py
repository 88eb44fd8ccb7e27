"""
CLI layer for shard-dump.

All export logic lives in ``shard_dump.pipeline``; this package handles
argument parsing, settings overrides and terminal output.

Entry point::

    shard-dump --help
"""

from shard_dump.cli.app import app

__all__ = ["app"]
