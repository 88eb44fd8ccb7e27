"""Shard ranker: pick the most recent daily shards."""

from __future__ import annotations

from dataclasses import dataclass

from shard_dump.core.records import ShardKind
from shard_dump.framework.logging import get_logger

from .catalog import ShardCatalog

log = get_logger(__name__)


@dataclass(frozen=True)
class RankedShard:
    """A daily shard with the timestamp it was ranked by."""

    name: str
    latest_timestamp: int


class ShardRanker:
    """Orders daily shards by latest timestamp, newest first.

    Ties keep catalog order (``sorted`` is stable).  Nothing is cached: every
    call re-reads the store.
    """

    def __init__(self, catalog: ShardCatalog, *, kind_prefix: str = ShardKind.DAILY.value):
        self.catalog = catalog
        self.kind_prefix = kind_prefix

    def rank(self, max_count: int) -> list[RankedShard]:
        if max_count <= 0:
            return []
        ranked = [
            RankedShard(name=name, latest_timestamp=self.catalog.latest_timestamp(name))
            for name in self.catalog.list_shards(self.kind_prefix)
        ]
        ranked = sorted(ranked, key=lambda shard: shard.latest_timestamp, reverse=True)
        selected = ranked[:max_count]
        log.info("ranker.selected", candidates=len(ranked), selected=len(selected), max_count=max_count)
        return selected

    def select_top_shards(self, max_count: int) -> list[str]:
        """Names of the ``max_count`` most recent shards, newest first."""
        return [shard.name for shard in self.rank(max_count)]


__all__ = [
    "RankedShard",
    "ShardRanker",
]
