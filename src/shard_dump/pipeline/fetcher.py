"""Correlated record fetcher.

For one ``events`` or ``repetitions`` shard, exports index metadata and then
up to ``max_per_key`` records for every group hash of a daily window.

Keys are visited in lexicographic order so two runs over the same store
write identical artifacts.  A failed metadata export is logged and the
fetch carries on; a failed per-key query ends the run.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from shard_dump.core.adapters import StoreAdapter
from shard_dump.core.errors import FetchError, StoreError
from shard_dump.core.records import GROUP_HASH_FIELD
from shard_dump.core.result import Err
from shard_dump.framework.logging import get_logger

from .metadata import MetadataExporter
from .progress import NullProgress, ProgressReporter
from .sink import OutputSink, bson_artifact

log = get_logger(__name__)


@dataclass
class FetchOutcome:
    """Counters of one correlated fetch."""

    shard: str
    keys: int = 0
    records_written: int = 0
    metadata_exported: bool = False


class CorrelatedRecordFetcher:
    def __init__(
        self,
        adapter: StoreAdapter,
        sink: OutputSink,
        metadata: MetadataExporter,
        *,
        timeout: float = 30.0,
        progress: ProgressReporter | None = None,
    ):
        self.adapter = adapter
        self.sink = sink
        self.metadata = metadata
        self.timeout = timeout
        self.progress = progress or NullProgress()

    def fetch(self, shard: str, keys: Iterable[str], max_per_key: int) -> FetchOutcome:
        """Export metadata and correlated records of ``shard``.

        Raises:
            FetchError: if any per-key query fails or the shard's time bound elapses
            SinkError: if an artifact cannot be written
        """
        ordered = sorted(set(keys))
        outcome = FetchOutcome(shard=shard, keys=len(ordered))

        exported = self.metadata.export_index_metadata(shard)
        if isinstance(exported, Err):
            log.warning("fetch.metadata_unavailable", **exported.error.to_dict())
        else:
            outcome.metadata_exported = True

        with self.sink.open(bson_artifact(shard)) as out:
            self.progress.start(len(ordered), shard)
            current_key: str | None = None
            try:
                with self.adapter.deadline(self.timeout):
                    for current_key in ordered:
                        records = self.adapter.find_raw(
                            shard,
                            filter={GROUP_HASH_FIELD: current_key},
                            limit=max_per_key,
                        )
                        for record in records:
                            out.write(record.raw)
                            outcome.records_written += 1
                        self.progress.advance()
            except StoreError as e:
                raise FetchError(
                    f"Correlated query on {shard} failed: {e.message}",
                    cause=e,
                ).with_context(
                    shard=shard,
                    operation="fetch_by_keys",
                    group_hash=current_key,
                    records_written=outcome.records_written,
                ) from e
            finally:
                self.progress.finish()

        log.info(
            "fetch.done",
            shard=shard,
            keys=outcome.keys,
            records=outcome.records_written,
            metadata=outcome.metadata_exported,
        )
        return outcome

    def fetch_by_keys(self, shard: str, keys: Iterable[str], max_per_key: int) -> int:
        """Number of records written for ``shard``."""
        return self.fetch(shard, keys, max_per_key).records_written


__all__ = [
    "FetchOutcome",
    "CorrelatedRecordFetcher",
]
