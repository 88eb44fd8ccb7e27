"""Tests for MongoAdapter against a mocked pymongo client."""

from unittest.mock import MagicMock, patch

import bson
import pytest
from bson.raw_bson import RawBSONDocument
from pymongo.errors import OperationFailure, ServerSelectionTimeoutError

from shard_dump.core.adapters import MongoAdapter, normalize_uri
from shard_dump.core.errors import StoreConnectionError, StoreQueryError


class TestNormalizeUri:
    def test_rewrites_connect_direct(self):
        assert normalize_uri("mongodb://127.0.0.1:27018/?connect=direct") == (
            "mongodb://127.0.0.1:27018/?directConnection=true"
        )

    def test_keeps_other_options(self):
        uri = normalize_uri("mongodb://h:1/db?appname=x&connect=direct&tls=false")
        assert uri == "mongodb://h:1/db?appname=x&directConnection=true&tls=false"

    def test_untouched_without_legacy_option(self):
        uri = "mongodb+srv://user:pw@cluster.example.net/?retryWrites=true"
        assert normalize_uri(uri) == uri


@pytest.fixture
def client():
    client = MagicMock(name="MongoClient()")
    with patch("pymongo.MongoClient", return_value=client) as factory:
        client.factory = factory
        yield client


def collection_of(client):
    return client.__getitem__.return_value.get_collection.return_value


def cursor_over(*documents):
    cursor = MagicMock(name="cursor")
    cursor.__enter__.return_value = cursor
    cursor.__iter__.return_value = iter(
        [RawBSONDocument(bson.encode(document)) for document in documents]
    )
    return cursor


class TestConnect:
    def test_connect_passes_timeouts_and_normalized_uri(self, client):
        adapter = MongoAdapter("mongodb://h:1/?connect=direct", "hawk_events", connect_timeout=3.0)
        adapter.connect()
        args, kwargs = client.factory.call_args
        assert args == ("mongodb://h:1/?directConnection=true",)
        assert kwargs["serverSelectionTimeoutMS"] == 3000
        assert kwargs["connectTimeoutMS"] == 3000
        client.admin.command.assert_called_with("hello")
        assert adapter.is_connected

    def test_unreachable_server(self, client):
        client.admin.command.side_effect = ServerSelectionTimeoutError("no servers")
        adapter = MongoAdapter("mongodb://h:1", "hawk_events")
        with pytest.raises(StoreConnectionError) as exc:
            adapter.connect()
        assert exc.value.context.operation == "connect"
        assert not adapter.is_connected
        client.close.assert_called_once()

    def test_ping_failure(self, client):
        adapter = MongoAdapter("mongodb://h:1", "hawk_events")
        adapter.connect()
        client.admin.command.side_effect = ServerSelectionTimeoutError("primary gone")
        with pytest.raises(StoreConnectionError) as exc:
            adapter.ping()
        assert exc.value.context.operation == "ping"

    def test_use_before_connect(self):
        with pytest.raises(StoreConnectionError):
            MongoAdapter("mongodb://h:1", "hawk_events").list_collection_names()

    def test_context_manager_disconnects(self, client):
        with MongoAdapter("mongodb://h:1", "hawk_events") as adapter:
            assert adapter.is_connected
        assert not adapter.is_connected
        client.close.assert_called_once()


class TestQueries:
    @pytest.fixture
    def adapter(self, client):
        adapter = MongoAdapter("mongodb://h:1", "hawk_events")
        adapter.connect()
        return adapter

    def test_find_raw_yields_server_bytes(self, adapter, client):
        cursor = cursor_over({"groupHash": "a", "lastRepetitionTime": 2})
        collection_of(client).find.return_value = cursor
        records = list(adapter.find_raw("dailyEvents:p1", sort=[("lastRepetitionTime", -1)], limit=5))
        assert [r.group_hash for r in records] == ["a"]
        assert records[0].raw == bson.encode({"groupHash": "a", "lastRepetitionTime": 2})
        _, kwargs = collection_of(client).find.call_args
        assert kwargs == {"sort": [("lastRepetitionTime", -1)], "limit": 5}

    def test_find_raw_non_positive_limit_skips_query(self, adapter, client):
        assert list(adapter.find_raw("events:p1", limit=0)) == []
        collection_of(client).find.assert_not_called()

    def test_find_raw_failure(self, adapter, client):
        collection_of(client).find.side_effect = OperationFailure("operation exceeded time limit")
        with pytest.raises(StoreQueryError) as exc:
            list(adapter.find_raw("events:p1", filter={"groupHash": "a"}))
        assert exc.value.context.shard == "events:p1"
        assert exc.value.context.operation == "find"

    def test_find_one_raw_empty(self, adapter, client):
        collection_of(client).find_one.return_value = None
        assert adapter.find_one_raw("dailyEvents:p1") is None

    def test_list_indexes_failure(self, adapter, client):
        client.__getitem__.return_value.get_collection.return_value.list_indexes.side_effect = (
            OperationFailure("ns does not exist")
        )
        with pytest.raises(StoreQueryError) as exc:
            adapter.list_indexes("events:p1")
        assert exc.value.context.operation == "list_indexes"
