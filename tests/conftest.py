"""
Shared pytest fixtures and configuration for shard-dump tests.

This module provides:
- An in-memory store adapter seeded per test
- Settings pointing the output directory at ``tmp_path``
- Environment isolation for settings-driven tests
- Log context cleanup between tests

Usage:
    def test_something(adapter, settings, sink):
        adapter.insert("dailyEvents:2024-01-01", {"groupHash": "a", "lastRepetitionTime": 1})
        ...
"""

from pathlib import Path

import pytest
import structlog

from shard_dump.core.settings import DumpSettings
from shard_dump.framework.logging import clear_context
from shard_dump.framework.logging import config as logging_config
from shard_dump.pipeline import OutputSink
from tests._support.memory_store import InMemoryAdapter

_SETTINGS_ENV = (
    "MONGO_URI",
    "MONGO_DATABASE",
    "OUTPUT_DIR",
    "MAX_COLLECTIONS",
    "MAX_EVENTS",
    "MAX_REPETITIONS",
    "LOG_LEVEL",
    "LOG_FORMAT",
    "CONNECT_TIMEOUT",
    "CATALOG_TIMEOUT",
    "METADATA_TIMEOUT",
    "WINDOW_TIMEOUT",
    "FETCH_TIMEOUT",
    "AGGREGATE_TIMEOUT",
)


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark tests without an explicit marker as unit tests."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Isolation Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    """Run every test in an empty directory with no settings env vars."""
    for name in _SETTINGS_ENV:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    clear_context()
    yield
    clear_context()
    structlog.reset_defaults()
    logging_config._configured = False


# =============================================================================
# Store / Output Fixtures
# =============================================================================


@pytest.fixture
def adapter() -> InMemoryAdapter:
    return InMemoryAdapter()


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    return tmp_path / "dump"


@pytest.fixture
def sink(output_dir: Path) -> OutputSink:
    return OutputSink(output_dir)


@pytest.fixture
def settings(output_dir: Path) -> DumpSettings:
    return DumpSettings(
        output_dir=output_dir,
        max_collections=100,
        max_events=1000,
        max_repetitions=1000,
    )
