"""Server-side view of one period's correlated window.

Joins the newest daily records of a period with their events and a capped
number of repetitions in a single aggregation.  Read-only and not part of a
dump run; the ``aggregate`` CLI command uses it to inspect a period before
exporting it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from bson.raw_bson import RawBSONDocument

from shard_dump.core.adapters import StoreAdapter
from shard_dump.core.errors import ExtractionError, StoreError
from shard_dump.core.records import (
    GROUP_HASH_FIELD,
    LAST_REPETITION_TIME_FIELD,
    RawRecord,
    RecordDecodeError,
    ShardKind,
    ShardName,
)


@dataclass
class AggregatedWindow:
    """One daily record with its joined events and repetitions."""

    group_hash: str | None
    last_repetition_time: int | None
    count: int | None = None
    grouping_timestamp: int | None = None
    events: list[RawRecord] = field(default_factory=list)
    repetitions: list[RawRecord] = field(default_factory=list)

    @classmethod
    def from_record(cls, record: RawRecord) -> AggregatedWindow:
        return cls(
            group_hash=_optional(lambda: record.group_hash),
            last_repetition_time=_optional(lambda: record.last_repetition_time),
            count=_optional_int(record, "count"),
            grouping_timestamp=_optional_int(record, "groupingTimestamp"),
            events=_joined(record, "events"),
            repetitions=_joined(record, "repetitions"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "group_hash": self.group_hash,
            "last_repetition_time": self.last_repetition_time,
            "count": self.count,
            "grouping_timestamp": self.grouping_timestamp,
            "events": len(self.events),
            "repetitions": len(self.repetitions),
        }


def _optional(read):
    try:
        return read()
    except RecordDecodeError:
        return None


def _optional_int(record: RawRecord, name: str) -> int | None:
    value = _optional(lambda: record.get(name))
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    return int(value)


def _joined(record: RawRecord, name: str) -> list[RawRecord]:
    value = _optional(lambda: record.get(name))
    if not isinstance(value, list):
        return []
    return [RawRecord(item.raw) for item in value if isinstance(item, RawBSONDocument)]


def build_window_pipeline(period_id: str, max_events: int, max_repetitions: int) -> list[dict[str, Any]]:
    """Aggregation stages run against ``dailyEvents:<period_id>``."""
    daily = ShardName(ShardKind.DAILY.value, period_id)
    return [
        {"$sort": {LAST_REPETITION_TIME_FIELD: -1}},
        {"$limit": max_events},
        {
            "$lookup": {
                "from": str(daily.sibling(ShardKind.EVENTS)),
                "localField": GROUP_HASH_FIELD,
                "foreignField": GROUP_HASH_FIELD,
                "as": "events",
            }
        },
        {
            "$lookup": {
                "from": str(daily.sibling(ShardKind.REPETITIONS)),
                "let": {"groupHash": f"${GROUP_HASH_FIELD}"},
                "pipeline": [
                    {"$match": {"$expr": {"$eq": [f"${GROUP_HASH_FIELD}", "$$groupHash"]}}},
                    {"$limit": max_repetitions},
                ],
                "as": "repetitions",
            }
        },
    ]


class WindowAggregator:
    def __init__(self, adapter: StoreAdapter, *, timeout: float = 180.0):
        self.adapter = adapter
        self.timeout = timeout

    def aggregate_window(
        self,
        period_id: str,
        max_events: int,
        max_repetitions: int,
    ) -> list[AggregatedWindow]:
        """Join the newest ``max_events`` daily records with their correlated records.

        Raises:
            ExtractionError: if the aggregation fails or times out
        """
        if max_events <= 0:
            return []
        shard = str(ShardName(ShardKind.DAILY.value, period_id))
        # $limit must be positive, zero repetitions still needs a valid stage
        pipeline = build_window_pipeline(period_id, max_events, max(max_repetitions, 1))
        try:
            with self.adapter.deadline(self.timeout):
                windows = [
                    AggregatedWindow.from_record(record)
                    for record in self.adapter.aggregate_raw(shard, pipeline)
                ]
        except StoreError as e:
            raise ExtractionError(
                f"Window aggregation on {shard} failed: {e.message}",
                cause=e,
            ).with_context(shard=shard, operation="aggregate_window") from e
        if max_repetitions <= 0:
            for window in windows:
                window.repetitions = []
        return windows


__all__ = [
    "AggregatedWindow",
    "WindowAggregator",
    "build_window_pipeline",
]
