"""Scoped output sinks under the configured output directory."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO

from shard_dump.core.errors import SinkError

BSON_SUFFIX = ".bson"
METADATA_SUFFIX = ".metadata.json"


def bson_artifact(shard: str) -> str:
    """Artifact name of a shard's raw record stream."""
    return f"{shard}{BSON_SUFFIX}"


def metadata_artifact(shard: str) -> str:
    """Artifact name of a shard's index metadata."""
    return f"{shard}{METADATA_SUFFIX}"


class OutputSink:
    """Opens write-only artifact files under ``root``.

    Each artifact is truncated on open, so a run overwrites the previous
    run's file of the same name.
    """

    def __init__(self, root: Path | str):
        self.root = Path(root)

    def path_for(self, artifact: str) -> Path:
        return self.root / artifact

    def ensure_root(self) -> Path:
        """Create the output directory if needed."""
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise SinkError(
                f"Cannot create output directory {self.root}: {e}",
                cause=e,
            ).with_context(operation="ensure_root", path=str(self.root)) from e
        return self.root

    def remove(self, artifact: str) -> None:
        """Delete a previous run's copy of ``artifact`` if one exists."""
        path = self.path_for(artifact)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise SinkError(f"Cannot remove {path}: {e}", cause=e).with_context(
                operation="remove", path=str(path)
            ) from e

    @contextmanager
    def open(self, artifact: str) -> Iterator[BinaryIO]:
        """Open ``artifact`` for writing; the file is closed on every exit path.

        ``OSError`` raised while opening or writing becomes :class:`SinkError`.
        """
        path = self.path_for(artifact)
        self.ensure_root()
        try:
            handle = open(path, "wb")
        except OSError as e:
            raise SinkError(f"Cannot open {path}: {e}", cause=e).with_context(
                operation="open", path=str(path)
            ) from e
        try:
            yield handle
        except OSError as e:
            raise SinkError(f"Write to {path} failed: {e}", cause=e).with_context(
                operation="write", path=str(path)
            ) from e
        finally:
            handle.close()


__all__ = [
    "BSON_SUFFIX",
    "METADATA_SUFFIX",
    "OutputSink",
    "bson_artifact",
    "metadata_artifact",
]
