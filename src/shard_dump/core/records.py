"""
Shard names and raw records.

A shard is a collection named ``<kind>:<period-id>``.  The three kinds that
belong together for one period are ``dailyEvents``, ``events`` and
``repetitions``; the period id is everything after the first colon and is
never interpreted.

Records travel through the pipeline as :class:`RawRecord`: the exact BSON
bytes the store returned, with the handful of fields the pipeline needs
(``groupHash``, ``lastRepetitionTime``) decoded on demand.  Artifacts are
written from ``raw`` so nothing is re-encoded in transit.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from functools import cached_property
from typing import Any

from bson.codec_options import CodecOptions
from bson.errors import InvalidBSON
from bson.raw_bson import RawBSONDocument

GROUP_HASH_FIELD = "groupHash"
LAST_REPETITION_TIME_FIELD = "lastRepetitionTime"

# Bad UTF-8 in one string survives inflation and is rejected only when read.
_RAW_OPTIONS = CodecOptions(
    document_class=RawBSONDocument,
    unicode_decode_error_handler="surrogateescape",
)


class ShardKind(str, Enum):
    """Collection kinds sharing one period id."""

    DAILY = "dailyEvents"
    EVENTS = "events"
    REPETITIONS = "repetitions"


@dataclass(frozen=True)
class ShardName:
    """Parsed ``<kind>:<period-id>`` collection name."""

    kind: str
    period_id: str

    @classmethod
    def parse(cls, name: str) -> ShardName:
        """Split a collection name on its first colon.

        Raises:
            ValueError: if the name has no colon
        """
        kind, sep, period_id = name.partition(":")
        if not sep:
            raise ValueError(f"Not a sharded collection name: {name!r}")
        return cls(kind=kind, period_id=period_id)

    def sibling(self, kind: ShardKind | str) -> ShardName:
        """Same period, different kind."""
        value = kind.value if isinstance(kind, ShardKind) else kind
        return ShardName(kind=value, period_id=self.period_id)

    def __str__(self) -> str:
        return f"{self.kind}:{self.period_id}"


class RecordDecodeError(ValueError):
    """A field needed by the pipeline is missing, mistyped or undecodable."""


@dataclass(frozen=True)
class RawRecord:
    """One store record as raw BSON bytes.

    Fields are decoded lazily and at most once per record.

    Examples:
        >>> import bson
        >>> record = RawRecord(bson.encode({"groupHash": "a", "lastRepetitionTime": 5}))
        >>> record.group_hash
        'a'
        >>> record.last_repetition_time
        5
    """

    raw: bytes

    @cached_property
    def _document(self) -> RawBSONDocument:
        try:
            return RawBSONDocument(self.raw, _RAW_OPTIONS)
        except InvalidBSON as e:
            raise RecordDecodeError(f"Invalid BSON record: {e}") from e

    def get(self, field: str) -> Any:
        """Decode one top-level field.

        Undecodable bytes elsewhere in the record do not affect the result.

        Raises:
            RecordDecodeError: if the record is malformed or lacks ``field``
        """
        try:
            value = self._document[field]
        except KeyError:
            raise RecordDecodeError(f"Record has no {field!r} field") from None
        except InvalidBSON as e:
            raise RecordDecodeError(f"Cannot decode {field!r}: {e}") from e
        if isinstance(value, str):
            try:
                value.encode("utf-8")
            except UnicodeEncodeError as e:
                raise RecordDecodeError(f"{field!r} is not valid UTF-8") from e
        return value

    @property
    def group_hash(self) -> str:
        value = self.get(GROUP_HASH_FIELD)
        if not isinstance(value, str):
            raise RecordDecodeError(
                f"{GROUP_HASH_FIELD!r} is {type(value).__name__}, expected str"
            )
        return value

    @property
    def last_repetition_time(self) -> int:
        value = self.get(LAST_REPETITION_TIME_FIELD)
        if isinstance(value, bool) or not isinstance(value, int | float):
            raise RecordDecodeError(
                f"{LAST_REPETITION_TIME_FIELD!r} is {type(value).__name__}, expected a number"
            )
        return int(value)

    def decode(self) -> dict[str, Any]:
        """Fully decode the record into a plain dict."""
        try:
            return dict(self._document.items())
        except InvalidBSON as e:
            raise RecordDecodeError(f"Cannot decode record: {e}") from e

    def __len__(self) -> int:
        return len(self.raw)


__all__ = [
    "GROUP_HASH_FIELD",
    "LAST_REPETITION_TIME_FIELD",
    "ShardKind",
    "ShardName",
    "RecordDecodeError",
    "RawRecord",
]
