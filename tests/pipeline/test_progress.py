"""Tests for progress reporters."""

import io

from rich.console import Console

from shard_dump.pipeline import NullProgress, ProgressReporter, RichProgress


def test_reporters_satisfy_protocol():
    assert isinstance(NullProgress(), ProgressReporter)
    assert isinstance(RichProgress(Console(file=io.StringIO())), ProgressReporter)


def test_null_progress_counts():
    progress = NullProgress()
    progress.start(3, "events:p1")
    progress.advance()
    progress.advance(2)
    progress.finish()
    assert (progress.total, progress.completed, progress.description) == (3, 3, "events:p1")


def test_null_progress_restart_resets():
    progress = NullProgress()
    progress.start(2, "a")
    progress.advance()
    progress.start(5, "b")
    assert progress.completed == 0


def test_rich_progress_renders_description():
    buffer = io.StringIO()
    progress = RichProgress(Console(file=buffer, force_terminal=True, width=100))
    progress.start(2, "repetitions:p1")
    progress.advance()
    progress.advance()
    progress.finish()
    assert "repetitions:p1" in buffer.getvalue()


def test_rich_progress_tolerates_calls_outside_start():
    progress = RichProgress(Console(file=io.StringIO()))
    progress.advance()
    progress.finish()
    progress.finish()
