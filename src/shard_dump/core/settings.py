"""
Centralized settings for shard-dump.

Manifesto:
    One validated settings object is built at startup and passed explicitly
    into every component.  Nothing reads the environment after that point,
    so tests can construct ``DumpSettings(...)`` directly with any values.

Fields map to plain environment variables (``MONGO_URI``, ``OUTPUT_DIR``,
``MAX_COLLECTIONS`` ...) and may also come from a ``.env`` file in the
working directory.  Real environment variables always win over the file.

Tags:
    shard-dump, configuration, settings, pydantic, validation

Doc-Types:
    api-reference
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from shard_dump.core.errors import ConfigError


class DumpSettings(BaseSettings):
    """shard-dump configuration.

    Fields
    ──────
    mongo_uri        : Store connection URI
    mongo_database   : Database holding the sharded collections
    output_dir       : Directory receiving ``.bson`` / ``.metadata.json`` artifacts
    max_collections  : How many daily shards to export (most recent first)
    max_events       : Row limit of each daily-window extraction
    max_repetitions  : Row limit per group hash in correlated fetches
    *_timeout        : Per-operation bounds in seconds
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Store ────────────────────────────────────────────────────
    mongo_uri: str = Field(default="mongodb://127.0.0.1:27018/?connect=direct")
    mongo_database: str = Field(default="hawk_events")

    # ── Output ───────────────────────────────────────────────────
    output_dir: Path = Field(default=Path("./dump"))

    # ── Limits ───────────────────────────────────────────────────
    max_collections: int = Field(default=100, ge=0)
    max_events: int = Field(default=1000, ge=0)
    max_repetitions: int = Field(default=1000, ge=0)

    # ── Timeouts (seconds) ───────────────────────────────────────
    connect_timeout: float = Field(default=3.0, gt=0)
    catalog_timeout: float = Field(default=2.0, gt=0)
    metadata_timeout: float = Field(default=3.0, gt=0)
    window_timeout: float = Field(default=10.0, gt=0)
    fetch_timeout: float = Field(default=30.0, gt=0)
    aggregate_timeout: float = Field(default=180.0, gt=0)

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="console")


def load_settings(**overrides: object) -> DumpSettings:
    """Build settings from the environment, applying explicit overrides.

    ``None`` overrides are ignored so CLI options that were not given fall
    back to the environment.

    Raises:
        ConfigError: if any value fails validation
    """
    values = {key: value for key, value in overrides.items() if value is not None}
    try:
        return DumpSettings(**values)
    except ValidationError as e:
        fields = sorted({".".join(str(p) for p in err["loc"]) for err in e.errors()})
        raise ConfigError(
            f"Invalid settings: {', '.join(fields)}",
            cause=e,
        ).with_context(operation="load_settings", fields=fields) from e


__all__ = [
    "DumpSettings",
    "load_settings",
]
