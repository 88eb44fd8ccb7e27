"""
shard-dump core primitives: errors, results, settings, records, adapters.
"""

from shard_dump.core.errors import (
    CatalogUnavailable,
    ConfigError,
    DumpError,
    ErrorCategory,
    ErrorContext,
    ExtractionError,
    FetchError,
    MetadataUnavailable,
    SinkError,
    StoreConnectionError,
    StoreError,
    StoreQueryError,
)
from shard_dump.core.records import RawRecord, RecordDecodeError, ShardKind, ShardName
from shard_dump.core.result import Err, Ok, Result

__all__ = [
    "CatalogUnavailable",
    "ConfigError",
    "DumpError",
    "ErrorCategory",
    "ErrorContext",
    "ExtractionError",
    "FetchError",
    "MetadataUnavailable",
    "SinkError",
    "StoreConnectionError",
    "StoreError",
    "StoreQueryError",
    "RawRecord",
    "RecordDecodeError",
    "ShardKind",
    "ShardName",
    "Ok",
    "Err",
    "Result",
]
