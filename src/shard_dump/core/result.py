"""
Result envelope returned at the run boundary.

Stages raise typed :class:`~shard_dump.core.errors.DumpError` exceptions.
``DumpRunner.run()`` and ``MetadataExporter`` hand back ``Ok``/``Err`` so the
caller decides what a failure means.

Examples:
    >>> from shard_dump.core.result import Ok, Err
    >>> match Ok(3):
    ...     case Ok(value):
    ...         print(value)
    ...     case Err(error):
    ...         print(error)
    3
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful result containing a value."""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True, slots=True)
class Err(Generic[T]):
    """Failed result containing an error."""

    error: Exception

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> T:
        """Raise the error."""
        raise self.error


Result = Ok[T] | Err[T]


__all__ = [
    "Ok",
    "Err",
    "Result",
]
