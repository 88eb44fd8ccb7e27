"""Daily-window extractor.

Streams the newest ``max_records`` records of a daily shard into
``<shard>.bson`` and collects the distinct ``groupHash`` values seen.  Each
record is written before its key is parsed, so a record whose key cannot be
read still lands in the artifact; only the key is dropped.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from pymongo import DESCENDING

from shard_dump.core.adapters import StoreAdapter
from shard_dump.core.errors import ExtractionError, StoreError
from shard_dump.core.records import LAST_REPETITION_TIME_FIELD, RecordDecodeError
from shard_dump.framework.logging import get_logger

from .sink import OutputSink, bson_artifact

log = get_logger(__name__)


@dataclass
class WindowExtraction:
    """Outcome of one window extraction."""

    shard: str
    keys: set[str] = field(default_factory=set)
    records_written: int = 0
    keys_skipped: int = 0


class DailyWindowExtractor:
    def __init__(self, adapter: StoreAdapter, sink: OutputSink, *, timeout: float = 10.0):
        self.adapter = adapter
        self.sink = sink
        self.timeout = timeout

    def extract(self, shard: str, max_records: int) -> WindowExtraction:
        """Export the window and return keys plus counters.

        Raises:
            ExtractionError: if the query or cursor fails or times out
            SinkError: if the artifact cannot be written
        """
        result = WindowExtraction(shard=shard)
        with self.sink.open(bson_artifact(shard)) as out:
            if max_records <= 0:
                return result
            try:
                with self.adapter.deadline(self.timeout):
                    records = self.adapter.find_raw(
                        shard,
                        sort=[(LAST_REPETITION_TIME_FIELD, DESCENDING)],
                        limit=max_records,
                    )
                    for index, record in enumerate(records):
                        out.write(record.raw)
                        result.records_written += 1
                        try:
                            result.keys.add(record.group_hash)
                        except RecordDecodeError as e:
                            result.keys_skipped += 1
                            log.warning("extract.key_skipped", shard=shard, record_index=index, reason=str(e))
            except StoreError as e:
                raise ExtractionError(
                    f"Window query on {shard} failed: {e.message}",
                    cause=e,
                ).with_context(
                    shard=shard,
                    operation="extract_window",
                    records_written=result.records_written,
                ) from e
        return result

    def extract_window(self, shard: str, max_records: int) -> set[str]:
        """Distinct group hashes of the exported window."""
        return self.extract(shard, max_records).keys


__all__ = [
    "WindowExtraction",
    "DailyWindowExtractor",
]
