"""
Observability module: Structured logging.
"""

from inflight.observability.logging import (
    ContextFormatter,
    JsonFormatter,
    LogLevel,
    current_log_context,
    log_context,
    setup_logging,
)

__all__ = [
    "ContextFormatter",
    "JsonFormatter",
    "LogLevel",
    "current_log_context",
    "log_context",
    "setup_logging",
]
