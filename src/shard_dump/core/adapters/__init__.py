"""
Store adapters.

Stages depend on :class:`StoreAdapter` only; :class:`MongoAdapter` is the
production implementation.

Usage:
    from shard_dump.core.adapters import MongoAdapter

    with MongoAdapter(settings.mongo_uri, settings.mongo_database) as adapter:
        adapter.ping()
        names = adapter.list_collection_names()
"""

from .base import SortSpec, StoreAdapter
from .mongo import MongoAdapter, normalize_uri

__all__ = [
    "SortSpec",
    "StoreAdapter",
    "MongoAdapter",
    "normalize_uri",
]
