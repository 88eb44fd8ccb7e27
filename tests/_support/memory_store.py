"""
In-memory store adapter for pipeline tests.

Records are kept as real BSON bytes (``bson.encode``) so the pipeline's
raw-copy path is exercised exactly as against MongoDB.  Faults can be
installed per operation, optionally restricted to one collection or one
filter, to drive the error paths deterministically.

Usage in test code::

    from tests._support.memory_store import InMemoryAdapter

    adapter = InMemoryAdapter()
    adapter.insert("dailyEvents:2024-01-01", {"groupHash": "a", "lastRepetitionTime": 5})
    adapter.install_fault("find", collection="events:2024-01-01", match={"groupHash": "a"})
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

import bson
from bson.codec_options import CodecOptions
from bson.son import SON

from shard_dump.core.adapters import SortSpec, StoreAdapter
from shard_dump.core.errors import StoreConnectionError, StoreError, StoreQueryError
from shard_dump.core.records import RawRecord


@dataclass
class Fault:
    """A failure to raise from one adapter operation."""

    operation: str
    collection: str | None = None
    match: dict[str, Any] | None = None
    after: int = 0
    message: str = "Injected test fault"
    hits: int = field(default=0, init=False)

    def applies(self, operation: str, collection: str | None, filter: Mapping[str, Any] | None) -> bool:
        if operation != self.operation:
            return False
        if self.collection is not None and collection != self.collection:
            return False
        if self.match is not None and dict(filter or {}) != self.match:
            return False
        return True


@dataclass
class Call:
    operation: str
    collection: str | None = None
    filter: dict[str, Any] | None = None
    limit: int | None = None


_LENIENT = CodecOptions(unicode_decode_error_handler="replace")


def _sort_key(field_name: str):
    def key(raw: bytes):
        value = bson.decode(raw, _LENIENT).get(field_name)
        if isinstance(value, bool) or not isinstance(value, int | float):
            return float("-inf")
        return value

    return key


class InMemoryAdapter(StoreAdapter):
    """``StoreAdapter`` backed by dicts of BSON byte strings."""

    def __init__(self, database: str = "hawk_events"):
        super().__init__(database)
        self.collections: dict[str, list[bytes]] = {}
        self.indexes: dict[str, list[SON]] = {}
        self.aggregations: dict[str, list[bytes]] = {}
        self.faults: list[Fault] = []
        self.calls: list[Call] = []
        self.deadlines: list[float] = []
        self.connect_count = 0
        self.disconnect_count = 0

    # ── Fixture helpers ──────────────────────────────────────────────────

    def create(self, collection: str) -> None:
        self.collections.setdefault(collection, [])

    def insert(self, collection: str, *documents: Mapping[str, Any]) -> list[bytes]:
        raws = [bson.encode(dict(document)) for document in documents]
        self.collections.setdefault(collection, []).extend(raws)
        return raws

    def set_indexes(self, collection: str, *indexes: SON) -> None:
        self.indexes[collection] = list(indexes)

    def install_fault(
        self,
        operation: str,
        *,
        collection: str | None = None,
        match: dict[str, Any] | None = None,
        after: int = 0,
        message: str = "Injected test fault",
    ) -> Fault:
        """Fail ``operation``; for cursors, after ``after`` records were yielded."""
        fault = Fault(operation=operation, collection=collection, match=match, after=after, message=message)
        self.faults.append(fault)
        return fault

    def _fault_for(self, operation, collection=None, filter=None) -> Fault | None:
        for fault in self.faults:
            if fault.applies(operation, collection, filter):
                fault.hits += 1
                return fault
        return None

    def _error(self, fault: Fault, collection: str | None) -> StoreError:
        if fault.operation in ("connect", "ping"):
            return StoreConnectionError(fault.message).with_context(operation=fault.operation)
        return StoreQueryError(fault.message).with_context(shard=collection, operation=fault.operation)

    # ── StoreAdapter ─────────────────────────────────────────────────────

    def connect(self) -> None:
        self.calls.append(Call("connect"))
        if fault := self._fault_for("connect"):
            raise self._error(fault, None)
        self.connect_count += 1
        self._connected = True

    def disconnect(self) -> None:
        self.disconnect_count += 1
        self._connected = False

    def ping(self) -> None:
        self.calls.append(Call("ping"))
        if fault := self._fault_for("ping"):
            raise self._error(fault, None)

    @contextmanager
    def deadline(self, seconds: float) -> Iterator[None]:
        self.deadlines.append(seconds)
        yield

    def list_collection_names(self) -> list[str]:
        self.calls.append(Call("list_collection_names"))
        if fault := self._fault_for("list_collection_names"):
            raise self._error(fault, None)
        return list(self.collections)

    def _select(
        self,
        collection: str,
        filter: Mapping[str, Any] | None,
        sort: SortSpec | None,
    ) -> list[bytes]:
        raws = list(self.collections.get(collection, []))
        if filter:
            raws = [
                raw for raw in raws
                if all(bson.decode(raw, _LENIENT).get(k) == v for k, v in filter.items())
            ]
        for field_name, direction in reversed(list(sort or [])):
            raws = sorted(raws, key=_sort_key(field_name), reverse=direction < 0)
        return raws

    def find_raw(
        self,
        collection: str,
        *,
        filter: Mapping[str, Any] | None = None,
        sort: SortSpec | None = None,
        limit: int | None = None,
    ) -> Iterator[RawRecord]:
        self.calls.append(Call("find", collection, dict(filter) if filter else None, limit))
        if limit is not None and limit <= 0:
            return
        fault = self._fault_for("find", collection, filter)
        raws = self._select(collection, filter, sort)
        if limit:
            raws = raws[:limit]
        for index, raw in enumerate(raws):
            if fault is not None and index >= fault.after:
                raise self._error(fault, collection)
            yield RawRecord(raw)
        if fault is not None:
            raise self._error(fault, collection)

    def find_one_raw(
        self,
        collection: str,
        *,
        filter: Mapping[str, Any] | None = None,
        sort: SortSpec | None = None,
    ) -> RawRecord | None:
        self.calls.append(Call("find_one", collection, dict(filter) if filter else None))
        if fault := self._fault_for("find_one", collection, filter):
            raise self._error(fault, collection)
        raws = self._select(collection, filter, sort)
        return RawRecord(raws[0]) if raws else None

    def list_indexes(self, collection: str) -> list[dict[str, Any]]:
        self.calls.append(Call("list_indexes", collection))
        if fault := self._fault_for("list_indexes", collection):
            raise self._error(fault, collection)
        return list(self.indexes.get(collection, []))

    def aggregate_raw(
        self,
        collection: str,
        pipeline: Sequence[Mapping[str, Any]],
    ) -> Iterator[RawRecord]:
        self.calls.append(Call("aggregate", collection, {"pipeline": list(pipeline)}))
        if fault := self._fault_for("aggregate", collection):
            raise self._error(fault, collection)
        for raw in self.aggregations.get(collection, []):
            yield RawRecord(raw)

    # ── Assertions helpers ───────────────────────────────────────────────

    def calls_for(self, operation: str, collection: str | None = None) -> list[Call]:
        return [
            call for call in self.calls
            if call.operation == operation and (collection is None or call.collection == collection)
        ]
