"""
shard-dump - bounded BSON snapshots of a time-sharded MongoDB store.

- shard_dump.core: errors, results, settings, records, store adapters
- shard_dump.framework: structured logging
- shard_dump.pipeline: catalog, ranker, extractor, fetcher, metadata, runner
- shard_dump.cli: the ``shard-dump`` command
"""

__version__ = "0.1.0"
