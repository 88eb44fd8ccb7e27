"""
Dump run orchestrator.

Drives one run through its fixed sequence::

    Connect → Ping → SelectShards →
        for each shard: ExtractWindow → Fetch(events) → Fetch(repetitions)
    → Done

The first fatal error stops the run; artifacts already written stay on disk
and nothing is rolled back.  Fatal errors come back as ``Err`` instead of
ending the process, and the error is logged exactly once, here.

Usage:
    adapter = MongoAdapter(settings.mongo_uri, settings.mongo_database)
    result = DumpRunner(adapter, settings).run()
    match result:
        case Ok(summary):
            print(summary.total_records)
        case Err(error):
            print(error)
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from shard_dump.core.adapters import StoreAdapter
from shard_dump.core.errors import DumpError
from shard_dump.core.records import ShardKind, ShardName
from shard_dump.core.result import Err, Ok, Result
from shard_dump.core.settings import DumpSettings
from shard_dump.framework.logging import bind_context, get_logger, log_step, new_run_id, push_context

from .catalog import ShardCatalog
from .extractor import DailyWindowExtractor
from .fetcher import CorrelatedRecordFetcher
from .metadata import MetadataExporter
from .progress import NullProgress, ProgressReporter
from .ranker import ShardRanker
from .sink import OutputSink

log = get_logger(__name__)


@dataclass
class ShardSummary:
    """What one daily shard contributed to the run."""

    shard: str
    window_records: int = 0
    keys: int = 0
    keys_skipped: int = 0
    events_records: int = 0
    repetitions_records: int = 0
    events_metadata: bool = False
    repetitions_metadata: bool = False

    @property
    def total_records(self) -> int:
        return self.window_records + self.events_records + self.repetitions_records


@dataclass
class DumpSummary:
    """Outcome of a completed run."""

    run_id: str
    output_dir: Path
    shards: list[ShardSummary] = field(default_factory=list)

    @property
    def total_records(self) -> int:
        return sum(shard.total_records for shard in self.shards)

    def to_dict(self) -> dict[str, Any]:
        return {
            "run_id": self.run_id,
            "output_dir": str(self.output_dir),
            "shards": [asdict(shard) for shard in self.shards],
            "total_records": self.total_records,
        }


class DumpRunner:
    """Runs the selection-and-correlation pipeline against one store.

    The adapter and settings are injected; the runner opens and closes the
    adapter's connection itself.
    """

    def __init__(
        self,
        adapter: StoreAdapter,
        settings: DumpSettings,
        *,
        sink: OutputSink | None = None,
        progress: ProgressReporter | None = None,
        run_id: str | None = None,
    ):
        self.adapter = adapter
        self.settings = settings
        self.sink = sink or OutputSink(settings.output_dir)
        self.run_id = run_id or new_run_id()

        self.catalog = ShardCatalog(adapter, timeout=settings.catalog_timeout)
        self.ranker = ShardRanker(self.catalog)
        self.extractor = DailyWindowExtractor(adapter, self.sink, timeout=settings.window_timeout)
        self.fetcher = CorrelatedRecordFetcher(
            adapter,
            self.sink,
            MetadataExporter(adapter, self.sink, timeout=settings.metadata_timeout),
            timeout=settings.fetch_timeout,
            progress=progress or NullProgress(),
        )

    def run(self) -> Result[DumpSummary]:
        """Execute the run; fatal errors come back as ``Err``."""
        token = push_context(run_id=self.run_id)
        try:
            summary = self._run()
        except DumpError as e:
            log.error("run.failed", **e.to_dict())
            return Err(e)
        finally:
            self.adapter.disconnect()
            token.restore()
        log.info("run.done", shards=len(summary.shards), records=summary.total_records)
        return Ok(summary)

    def _run(self) -> DumpSummary:
        log.info(
            "run.start",
            database=self.adapter.database,
            output_dir=str(self.sink.root),
            max_collections=self.settings.max_collections,
            max_events=self.settings.max_events,
            max_repetitions=self.settings.max_repetitions,
        )
        with log_step("connect"):
            self.adapter.connect()
        with log_step("ping"):
            self.adapter.ping()

        self.sink.ensure_root()
        summary = DumpSummary(run_id=self.run_id, output_dir=self.sink.root)

        with log_step("select_shards") as timer:
            shards = self.ranker.select_top_shards(self.settings.max_collections)
            timer.add_metric("selected", len(shards))

        for shard in shards:
            shard_summary = self.process_shard(shard)
            if shard_summary is not None:
                summary.shards.append(shard_summary)
        return summary

    def process_shard(self, shard: str) -> ShardSummary | None:
        """Export one daily shard and its correlated shards.

        Names that do not follow ``<kind>:<period-id>`` are skipped.
        """
        try:
            name = ShardName.parse(shard)
        except ValueError as e:
            log.warning("shard.skipped", shard=shard, reason=str(e))
            return None

        token = push_context(shard=shard, period_id=name.period_id)
        try:
            log.info("shard.start")
            result = ShardSummary(shard=shard)

            with log_step("extract_window") as timer:
                window = self.extractor.extract(shard, self.settings.max_events)
                timer.add_metric("records", window.records_written)
                timer.add_metric("keys", len(window.keys))
            result.window_records = window.records_written
            result.keys = len(window.keys)
            result.keys_skipped = window.keys_skipped

            for kind in (ShardKind.EVENTS, ShardKind.REPETITIONS):
                target = str(name.sibling(kind))
                bind_context(shard=target)
                with log_step(f"fetch_{kind.value}"):
                    outcome = self.fetcher.fetch(target, window.keys, self.settings.max_repetitions)
                if kind is ShardKind.EVENTS:
                    result.events_records = outcome.records_written
                    result.events_metadata = outcome.metadata_exported
                else:
                    result.repetitions_records = outcome.records_written
                    result.repetitions_metadata = outcome.metadata_exported
            return result
        finally:
            token.restore()


__all__ = [
    "ShardSummary",
    "DumpSummary",
    "DumpRunner",
]
