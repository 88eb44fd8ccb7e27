"""Tests for ShardRanker."""

import pytest

from shard_dump.core.errors import CatalogUnavailable
from shard_dump.pipeline import RankedShard, ShardCatalog, ShardRanker


@pytest.fixture
def ranker(adapter):
    return ShardRanker(ShardCatalog(adapter))


def seed(adapter, **latest):
    for period, ts in latest.items():
        adapter.insert(f"dailyEvents:{period}", {"groupHash": "x", "lastRepetitionTime": ts})


def test_picks_newest_first(adapter, ranker):
    seed(adapter, d1=100, d2=300, d3=200)
    assert ranker.select_top_shards(2) == ["dailyEvents:d2", "dailyEvents:d3"]


def test_rank_carries_timestamps(adapter, ranker):
    seed(adapter, d1=100, d2=300)
    assert ranker.rank(5) == [
        RankedShard("dailyEvents:d2", 300),
        RankedShard("dailyEvents:d1", 100),
    ]


def test_fewer_shards_than_requested(adapter, ranker):
    seed(adapter, d1=1)
    assert ranker.select_top_shards(10) == ["dailyEvents:d1"]


@pytest.mark.parametrize("max_count", [0, -3])
def test_non_positive_count_selects_nothing(adapter, ranker, max_count):
    seed(adapter, d1=1)
    assert ranker.select_top_shards(max_count) == []
    assert adapter.calls == []


def test_ties_keep_catalog_order(adapter, ranker):
    seed(adapter, b=5, a=5, c=5)
    assert ranker.select_top_shards(3) == ["dailyEvents:b", "dailyEvents:a", "dailyEvents:c"]


def test_empty_and_untimed_shards_rank_last(adapter, ranker):
    adapter.create("dailyEvents:empty")
    adapter.insert("dailyEvents:untimed", {"groupHash": "x"})
    seed(adapter, timed=1)
    assert ranker.select_top_shards(3)[0] == "dailyEvents:timed"


def test_ignores_other_kinds(adapter, ranker):
    adapter.insert("events:d9", {"groupHash": "x", "lastRepetitionTime": 999})
    seed(adapter, d1=1)
    assert ranker.select_top_shards(5) == ["dailyEvents:d1"]


def test_idempotent(adapter, ranker):
    seed(adapter, d1=100, d2=300, d3=200)
    assert ranker.select_top_shards(3) == ranker.select_top_shards(3)


def test_catalog_failure_propagates(adapter, ranker):
    seed(adapter, d1=100)
    adapter.install_fault("find_one", collection="dailyEvents:d1")
    with pytest.raises(CatalogUnavailable):
        ranker.select_top_shards(1)
