"""Store adapter base class.

Manifesto:
    Pipeline stages only need a handful of read operations against the
    store: list collections, find with sort/limit/filter, list indexes and
    aggregate.  The abstract base class pins that contract so stages never
    touch a driver directly, and tests can swap in an in-memory adapter.

Features:
    - Abstract ``connect()``, ``disconnect()``, ``ping()``
    - Raw-record reads: ``find_raw()``, ``find_one_raw()``, ``aggregate_raw()``
    - ``deadline()`` scope bounding every store call made inside it
    - Context-manager protocol for connection lifecycle

All failures surface as :class:`~shard_dump.core.errors.StoreError`
subclasses; driver exceptions never leak past an adapter.

Tags:
    shard-dump, store, abstract-base, adapter-pattern

Doc-Types:
    api-reference
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator, Mapping, Sequence
from contextlib import AbstractContextManager
from typing import Any

from shard_dump.core.records import RawRecord

SortSpec = Sequence[tuple[str, int]]


class StoreAdapter(ABC):
    """
    Abstract base class for store adapters.

    Cursors returned by ``find_raw`` and ``aggregate_raw`` are lazy, finite
    and non-restartable: iterate them once, inside the ``deadline()`` scope
    that should bound them.
    """

    def __init__(self, database: str):
        self._database = database
        self._connected = False

    @property
    def database(self) -> str:
        """Name of the database holding the shards."""
        return self._database

    @property
    def is_connected(self) -> bool:
        """Whether adapter is connected."""
        return self._connected

    @abstractmethod
    def connect(self) -> None:
        """Establish the connection."""
        ...

    @abstractmethod
    def disconnect(self) -> None:
        """Close the connection."""
        ...

    @abstractmethod
    def ping(self) -> None:
        """Verify the connection round-trips to the primary."""
        ...

    @abstractmethod
    def deadline(self, seconds: float) -> AbstractContextManager[None]:
        """Bound every store call made inside the returned scope."""
        ...

    @abstractmethod
    def list_collection_names(self) -> list[str]:
        """All collection names in store order."""
        ...

    @abstractmethod
    def find_raw(
        self,
        collection: str,
        *,
        filter: Mapping[str, Any] | None = None,
        sort: SortSpec | None = None,
        limit: int | None = None,
    ) -> Iterator[RawRecord]:
        """Stream matching records.

        ``limit=None`` means unbounded; a positive value caps the row count.
        """
        ...

    @abstractmethod
    def find_one_raw(
        self,
        collection: str,
        *,
        filter: Mapping[str, Any] | None = None,
        sort: SortSpec | None = None,
    ) -> RawRecord | None:
        """First matching record, or ``None`` for an empty result."""
        ...

    @abstractmethod
    def list_indexes(self, collection: str) -> list[dict[str, Any]]:
        """Index definitions in server order, each an ordered mapping."""
        ...

    @abstractmethod
    def aggregate_raw(
        self,
        collection: str,
        pipeline: Sequence[Mapping[str, Any]],
    ) -> Iterator[RawRecord]:
        """Stream the output documents of an aggregation pipeline."""
        ...

    def __enter__(self) -> StoreAdapter:
        """Context manager entry."""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.disconnect()


__all__ = [
    "SortSpec",
    "StoreAdapter",
]
