"""
Test support utilities for shard-dump tests.

Helpers that are not fixtures: the in-memory store adapter and artifact
readers shared by several test modules.
"""

from __future__ import annotations

from pathlib import Path

import bson


def read_bson_artifact(path: Path) -> list[dict]:
    """Decode every record of a concatenated ``.bson`` artifact."""
    return bson.decode_all(path.read_bytes())


def split_bson_artifact(path: Path) -> list[bytes]:
    """Split a concatenated ``.bson`` artifact into per-record byte strings."""
    data = path.read_bytes()
    records = []
    offset = 0
    while offset < len(data):
        size = int.from_bytes(data[offset:offset + 4], "little")
        records.append(data[offset:offset + size])
        offset += size
    return records
