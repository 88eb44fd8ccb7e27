"""
Structured error types for shard-dump.

Every failure the export pipeline can hit is expressed as a subclass of
:class:`DumpError`.  Each error carries:

- **Category:** what kind of failure (network, database, storage, config)
- **Fatal:** whether the run must stop when this error surfaces
- **Context:** shard name, operation and free-form metadata for logging
- **Cause:** the chained underlying exception (usually a ``PyMongoError``
  or ``OSError``)

Manifesto:
    - **Typed Error Hierarchy:** one class per failure point in the run
    - **Explicit Fatality:** each error knows whether the run may continue
    - **Rich Context:** errors carry the shard and operation they hit
    - **Error Chaining:** the driver exception is kept as ``cause``

Architecture:
    ::

        ┌──────────────────────────────────────────────────────────────┐
        │                        DumpError                              │
        │             (category, fatal, context, cause)                 │
        ├──────────────────────────────────────────────────────────────┤
        │                                                               │
        │  StoreError            PipelineStageError     SinkError       │
        │  (DATABASE)            (DATABASE)             (STORAGE)       │
        │     │                      │                                  │
        │  StoreConnectionError   CatalogUnavailable    ConfigError     │
        │  StoreQueryError        ExtractionError       (CONFIG)        │
        │                         FetchError                            │
        │                         MetadataUnavailable (fatal=False)     │
        └──────────────────────────────────────────────────────────────┘

Guardrails:
    ❌ DON'T: Raise a bare ``Exception`` from a pipeline component
    ✅ DO: Raise the stage-specific error with ``cause=`` set

    ❌ DON'T: Swallow a fatal error to keep exporting other shards
    ✅ DO: Let it propagate to the runner, which turns it into ``Err``

Tags:
    error-handling, exception-hierarchy, error-context, shard-dump

Usage:
    from shard_dump.core.errors import FetchError

    try:
        records = adapter.find_raw(shard, filter={"groupHash": key})
    except StoreQueryError as e:
        raise FetchError(f"query failed for key {key!r}", cause=e).with_context(
            shard=shard, operation="fetch_by_keys"
        ) from e
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """
    Standard error categories for classification.

    Attributes:
        NETWORK: Connection, server selection, ping
        DATABASE: Query, cursor and listing failures
        STORAGE: Output directory and file failures
        CONFIG: Invalid settings
        INTERNAL: Bugs, unexpected state
    """

    NETWORK = "NETWORK"
    DATABASE = "DATABASE"
    STORAGE = "STORAGE"
    CONFIG = "CONFIG"
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    ``shard`` and ``operation`` cover almost every failure in a dump run;
    anything else goes into ``metadata``.

    Examples:
        >>> ctx = ErrorContext(shard="events:2024-01-01", operation="fetch_by_keys")
        >>> ctx.to_dict()
        {'shard': 'events:2024-01-01', 'operation': 'fetch_by_keys'}
    """

    shard: str | None = None
    operation: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result: dict[str, Any] = {}
        for key in ["shard", "operation"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class DumpError(Exception):
    """
    Base exception for all shard-dump errors.

    Subclasses set ``default_category`` and ``default_fatal``; both can be
    overridden per instance.

    Examples:
        >>> error = DumpError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.fatal
        True

        >>> error = DumpError("listing failed").with_context(shard="dailyEvents:1")
        >>> error.context.shard
        'dailyEvents:1'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_fatal: bool = True

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        fatal: bool | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.fatal = fatal if fatal is not None else self.default_fatal
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> DumpError:
        """
        Add context to this error (fluent API).

        Usage:
            raise SinkError("write failed").with_context(
                shard="events:2024-01-01",
                path="/dump/events:2024-01-01.bson",
            )
        """
        for key, value in kwargs.items():
            if key != "metadata" and hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "fatal": self.fatal,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# STORE ERRORS (raised by adapters)
# =============================================================================


class StoreError(DumpError):
    """Base class for errors raised by a store adapter."""

    default_category = ErrorCategory.DATABASE


class StoreConnectionError(StoreError):
    """Cannot establish or verify the store connection."""

    default_category = ErrorCategory.NETWORK


class StoreQueryError(StoreError):
    """A listing, query or cursor iteration failed or timed out."""


# =============================================================================
# PIPELINE STAGE ERRORS
# =============================================================================


class PipelineStageError(DumpError):
    """Base class for errors raised by a pipeline stage."""

    default_category = ErrorCategory.DATABASE


class CatalogUnavailable(PipelineStageError):
    """Shard listing or latest-timestamp lookup failed."""


class ExtractionError(PipelineStageError):
    """Daily-window query or raw record iteration failed."""


class FetchError(PipelineStageError):
    """A per-key correlated query failed."""


class MetadataUnavailable(PipelineStageError):
    """Index listing or metadata serialization failed.

    Not fatal: the fetcher logs it and keeps exporting records.
    """

    default_fatal = False


# =============================================================================
# STORAGE / CONFIG ERRORS
# =============================================================================


class SinkError(DumpError):
    """Output directory or artifact file cannot be created or written."""

    default_category = ErrorCategory.STORAGE


class ConfigError(DumpError):
    """Settings failed validation."""

    default_category = ErrorCategory.CONFIG


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "DumpError",
    "StoreError",
    "StoreConnectionError",
    "StoreQueryError",
    "PipelineStageError",
    "CatalogUnavailable",
    "ExtractionError",
    "FetchError",
    "MetadataUnavailable",
    "SinkError",
    "ConfigError",
]
