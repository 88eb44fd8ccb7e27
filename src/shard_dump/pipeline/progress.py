"""Progress reporting for per-key correlated fetches."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    TextColumn,
    TimeElapsedColumn,
)


@runtime_checkable
class ProgressReporter(Protocol):
    """Advances once per unit of work."""

    def start(self, total: int, description: str) -> None: ...

    def advance(self, step: int = 1) -> None: ...

    def finish(self) -> None: ...


class NullProgress:
    """Reporter that only counts; used by default and in tests."""

    def __init__(self) -> None:
        self.total = 0
        self.completed = 0
        self.description = ""

    def start(self, total: int, description: str) -> None:
        self.total = total
        self.completed = 0
        self.description = description

    def advance(self, step: int = 1) -> None:
        self.completed += step

    def finish(self) -> None:
        pass


class RichProgress:
    """rich progress bar, one bar per ``start()``/``finish()`` pair."""

    def __init__(self, console: Console | None = None):
        self._console = console or Console(stderr=True)
        self._progress: Progress | None = None
        self._task = None

    def start(self, total: int, description: str) -> None:
        self.finish()
        self._progress = Progress(
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=self._console,
            transient=False,
        )
        self._progress.start()
        self._task = self._progress.add_task(description, total=total)

    def advance(self, step: int = 1) -> None:
        if self._progress is not None and self._task is not None:
            self._progress.advance(self._task, step)

    def finish(self) -> None:
        if self._progress is not None:
            self._progress.stop()
        self._progress = None
        self._task = None


__all__ = [
    "ProgressReporter",
    "NullProgress",
    "RichProgress",
]
