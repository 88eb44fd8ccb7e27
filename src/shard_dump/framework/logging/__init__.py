"""
shard-dump logging - structured, run-aware logging.

This module provides:
- Structured logging with structlog
- Run/shard context propagation via contextvars
- Timing utilities for step durations
- Environment-based configuration

Usage:
    from shard_dump.framework.logging import get_logger, configure_logging, log_step, bind_context

    configure_logging()
    log = get_logger(__name__)

    bind_context(shard="dailyEvents:2024-01-01")
    with log_step("extract_window"):
        extract()
"""

from shard_dump.framework.logging.config import configure_logging, is_configured, is_debug_enabled
from shard_dump.framework.logging.context import (
    LogContext,
    bind_context,
    clear_context,
    get_context,
    get_logger,
    new_run_id,
    push_context,
)
from shard_dump.framework.logging.timing import TimingResult, log_step

__all__ = [
    # Configuration
    "configure_logging",
    "is_configured",
    "is_debug_enabled",
    # Context
    "get_logger",
    "clear_context",
    "get_context",
    "bind_context",
    "push_context",
    "new_run_id",
    "LogContext",
    # Timing
    "TimingResult",
    "log_step",
]
