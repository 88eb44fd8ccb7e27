"""Shard catalog: which daily shards exist and how recent each one is."""

from __future__ import annotations

from pymongo import DESCENDING

from shard_dump.core.adapters import StoreAdapter
from shard_dump.core.errors import CatalogUnavailable, StoreError
from shard_dump.core.records import LAST_REPETITION_TIME_FIELD, RecordDecodeError, ShardKind
from shard_dump.framework.logging import get_logger

log = get_logger(__name__)

#: Returned for empty shards and shards whose newest record has no usable timestamp.
NO_TIMESTAMP = 0


class ShardCatalog:
    """Lists shards and looks up their latest ``lastRepetitionTime``."""

    def __init__(self, adapter: StoreAdapter, *, timeout: float = 2.0):
        self.adapter = adapter
        self.timeout = timeout

    def list_shards(self, kind_prefix: str = ShardKind.DAILY.value) -> list[str]:
        """Collection names starting with ``kind_prefix``, in store order.

        Raises:
            CatalogUnavailable: if the listing fails or times out
        """
        try:
            with self.adapter.deadline(self.timeout):
                names = self.adapter.list_collection_names()
        except StoreError as e:
            raise CatalogUnavailable(
                f"Cannot list shards: {e.message}",
                cause=e,
            ).with_context(operation="list_shards", kind_prefix=kind_prefix) from e
        shards = [name for name in names if name.startswith(kind_prefix)]
        log.debug("catalog.listed", kind_prefix=kind_prefix, total=len(names), matched=len(shards))
        return shards

    def latest_timestamp(self, shard: str) -> int:
        """``lastRepetitionTime`` of the newest record, or :data:`NO_TIMESTAMP`.

        Raises:
            CatalogUnavailable: if the lookup fails or times out
        """
        try:
            with self.adapter.deadline(self.timeout):
                record = self.adapter.find_one_raw(
                    shard,
                    sort=[(LAST_REPETITION_TIME_FIELD, DESCENDING)],
                )
        except StoreError as e:
            raise CatalogUnavailable(
                f"Cannot read latest timestamp of {shard}: {e.message}",
                cause=e,
            ).with_context(shard=shard, operation="latest_timestamp") from e

        if record is None:
            return NO_TIMESTAMP
        try:
            return record.last_repetition_time
        except RecordDecodeError as e:
            log.debug("catalog.no_timestamp", shard=shard, reason=str(e))
            return NO_TIMESTAMP


__all__ = [
    "NO_TIMESTAMP",
    "ShardCatalog",
]
