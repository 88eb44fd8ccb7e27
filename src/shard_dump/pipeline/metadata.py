"""Index metadata exporter.

Writes ``<shard>.metadata.json`` in the layout ``mongorestore`` reads: an
empty ``options`` object followed by an ``indexes`` array holding each index
definition verbatim, serialized as canonical Extended JSON.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from bson import json_util
from bson.errors import BSONError

from shard_dump.core.adapters import StoreAdapter
from shard_dump.core.errors import MetadataUnavailable, StoreError
from shard_dump.core.result import Err, Ok, Result
from shard_dump.framework.logging import get_logger

from .sink import OutputSink, metadata_artifact

log = get_logger(__name__)


def render_metadata(indexes: list[Any]) -> str:
    """Serialize index definitions into the metadata document text."""
    document = {"options": {}, "indexes": list(indexes)}
    return json_util.dumps(document, json_options=json_util.CANONICAL_JSON_OPTIONS)


class MetadataExporter:
    def __init__(self, adapter: StoreAdapter, sink: OutputSink, *, timeout: float = 3.0):
        self.adapter = adapter
        self.sink = sink
        self.timeout = timeout

    def export_index_metadata(self, shard: str) -> Result[Path]:
        """Write the shard's index metadata.

        Listing or serialization failures come back as
        ``Err(MetadataUnavailable)``.  Any metadata file left by an earlier
        run is removed first so it cannot pass for this run's.  A failing
        sink raises :class:`~shard_dump.core.errors.SinkError`.
        """
        artifact = metadata_artifact(shard)
        try:
            with self.adapter.deadline(self.timeout):
                indexes = self.adapter.list_indexes(shard)
        except StoreError as e:
            self.sink.remove(artifact)
            return Err(
                MetadataUnavailable(
                    f"Cannot list indexes of {shard}: {e.message}",
                    cause=e,
                ).with_context(shard=shard, operation="list_indexes")
            )

        try:
            text = render_metadata(indexes)
        except (BSONError, TypeError, ValueError) as e:
            self.sink.remove(artifact)
            return Err(
                MetadataUnavailable(
                    f"Cannot serialize index metadata of {shard}: {e}",
                    cause=e,
                ).with_context(shard=shard, operation="render_metadata")
            )

        with self.sink.open(artifact) as out:
            out.write(text.encode("utf-8"))
        log.debug("metadata.exported", shard=shard, indexes=len(indexes))
        return Ok(self.sink.path_for(artifact))


__all__ = [
    "MetadataExporter",
    "render_metadata",
]
