"""MongoDB store adapter."""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from contextlib import AbstractContextManager
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import pymongo
from bson.codec_options import CodecOptions
from bson.raw_bson import RawBSONDocument
from pymongo.collection import Collection
from pymongo.errors import PyMongoError
from pymongo.read_preferences import ReadPreference

from shard_dump.core.errors import StoreConnectionError, StoreQueryError
from shard_dump.core.records import RawRecord

from .base import SortSpec, StoreAdapter

_RAW_CODEC: CodecOptions = CodecOptions(document_class=RawBSONDocument)


def normalize_uri(uri: str) -> str:
    """Rewrite the legacy ``connect=direct`` query option.

    Older drivers accepted ``?connect=direct``; pymongo spells it
    ``directConnection=true`` and rejects the old form.
    """
    parts = urlsplit(uri)
    query = parse_qsl(parts.query, keep_blank_values=True)
    if not any(key == "connect" and value == "direct" for key, value in query):
        return uri
    rewritten = [
        ("directConnection", "true") if (key, value) == ("connect", "direct") else (key, value)
        for key, value in query
    ]
    return urlunsplit(parts._replace(query=urlencode(rewritten)))


class MongoAdapter(StoreAdapter):
    """
    MongoDB adapter reading records as raw BSON.

    Every collection handle uses ``RawBSONDocument`` so records come back
    byte-for-byte as the server sent them.
    """

    def __init__(
        self,
        uri: str,
        database: str,
        *,
        connect_timeout: float = 3.0,
    ):
        super().__init__(database)
        self._uri = normalize_uri(uri)
        self._connect_timeout = connect_timeout
        self._client: pymongo.MongoClient | None = None

    def connect(self) -> None:
        """Create the client and complete the initial handshake."""
        timeout_ms = int(self._connect_timeout * 1000)
        try:
            self._client = pymongo.MongoClient(
                self._uri,
                serverSelectionTimeoutMS=timeout_ms,
                connectTimeoutMS=timeout_ms,
            )
            with pymongo.timeout(self._connect_timeout):
                self._client.admin.command("hello")
        except PyMongoError as e:
            self.disconnect()
            raise StoreConnectionError(
                f"Failed to connect to MongoDB: {e}",
                cause=e,
            ).with_context(operation="connect") from e
        self._connected = True

    def disconnect(self) -> None:
        """Close the client."""
        if self._client is not None:
            self._client.close()
            self._client = None
        self._connected = False

    def ping(self) -> None:
        try:
            with pymongo.timeout(self._connect_timeout):
                self._require_client().admin.command(
                    "ping", read_preference=ReadPreference.PRIMARY
                )
        except PyMongoError as e:
            raise StoreConnectionError(
                f"Ping failed: {e}",
                cause=e,
            ).with_context(operation="ping") from e

    def deadline(self, seconds: float) -> AbstractContextManager[None]:
        return pymongo.timeout(seconds)

    def list_collection_names(self) -> list[str]:
        try:
            return self._db().list_collection_names()
        except PyMongoError as e:
            raise StoreQueryError(
                f"Listing collections failed: {e}",
                cause=e,
            ).with_context(operation="list_collection_names") from e

    def find_raw(
        self,
        collection: str,
        *,
        filter: Mapping[str, Any] | None = None,
        sort: SortSpec | None = None,
        limit: int | None = None,
    ) -> Iterator[RawRecord]:
        if limit is not None and limit <= 0:
            return
        try:
            cursor = self._collection(collection).find(
                dict(filter or {}),
                sort=list(sort) if sort else None,
                limit=limit or 0,
            )
            with cursor:
                for document in cursor:
                    yield RawRecord(document.raw)
        except PyMongoError as e:
            raise StoreQueryError(
                f"Query on {collection} failed: {e}",
                cause=e,
            ).with_context(shard=collection, operation="find") from e

    def find_one_raw(
        self,
        collection: str,
        *,
        filter: Mapping[str, Any] | None = None,
        sort: SortSpec | None = None,
    ) -> RawRecord | None:
        try:
            document = self._collection(collection).find_one(
                dict(filter or {}),
                sort=list(sort) if sort else None,
            )
        except PyMongoError as e:
            raise StoreQueryError(
                f"find_one on {collection} failed: {e}",
                cause=e,
            ).with_context(shard=collection, operation="find_one") from e
        if document is None:
            return None
        return RawRecord(document.raw)

    def list_indexes(self, collection: str) -> list[dict[str, Any]]:
        try:
            with self._db().get_collection(collection).list_indexes() as cursor:
                return list(cursor)
        except PyMongoError as e:
            raise StoreQueryError(
                f"Listing indexes of {collection} failed: {e}",
                cause=e,
            ).with_context(shard=collection, operation="list_indexes") from e

    def aggregate_raw(
        self,
        collection: str,
        pipeline: Sequence[Mapping[str, Any]],
    ) -> Iterator[RawRecord]:
        try:
            with self._collection(collection).aggregate(list(pipeline)) as cursor:
                for document in cursor:
                    yield RawRecord(document.raw)
        except PyMongoError as e:
            raise StoreQueryError(
                f"Aggregation on {collection} failed: {e}",
                cause=e,
            ).with_context(shard=collection, operation="aggregate") from e

    # ── Private helpers ──────────────────────────────────────────────────

    def _require_client(self) -> pymongo.MongoClient:
        if self._client is None:
            raise StoreConnectionError("Adapter is not connected")
        return self._client

    def _db(self):
        return self._require_client()[self._database]

    def _collection(self, name: str) -> Collection:
        return self._db().get_collection(name, codec_options=_RAW_CODEC)


__all__ = [
    "MongoAdapter",
    "normalize_uri",
]
