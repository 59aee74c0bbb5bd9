"""
Structured Logging for Transfers

Every put/get runs inside a ``log_context`` carrying operation, container
and key, so each line (retry notices, failures, SDK warnings) can be tied
back to the object it concerns.

Two output modes:
- JSON lines, one object per record, for log aggregation
- Plain text with the transfer fields appended as ``name=value`` pairs

Errors logged with ``extra={"error": err.to_dict()}`` are flattened into
``error_code``, ``error_id`` and ``retryable`` fields.
"""

from __future__ import annotations

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from enum import IntEnum
from typing import Any, Optional, TextIO, Union


class LogLevel(IntEnum):
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL


_transfer_fields: ContextVar[dict[str, Any]] = ContextVar("transfer_fields", default={})

# Attributes every LogRecord has; anything else came in through ``extra``.
_STANDARD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))
) | {"message", "asctime", "taskName"}

_SDK_LOGGERS = ("botocore", "boto3", "urllib3", "s3transfer")


def _extras(record: logging.LogRecord) -> dict[str, Any]:
    return {k: v for k, v in vars(record).items() if k not in _STANDARD_ATTRS}


def _flatten_error(fields: dict[str, Any]) -> None:
    error = fields.get("error")
    if isinstance(error, dict) and "code" in error:
        fields["error_code"] = error["code"]
        fields["error_id"] = error.get("error_id")
        fields["retryable"] = error.get("retryable")


class JsonFormatter(logging.Formatter):
    """One JSON object per record: base fields, transfer context, extras."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "@timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(_transfer_fields.get())
        entry.update(_extras(record))
        _flatten_error(entry)

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class ContextFormatter(logging.Formatter):
    """Human-readable lines with the transfer context appended."""

    def __init__(self) -> None:
        super().__init__("%(asctime)s %(levelname)-8s %(name)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields = _transfer_fields.get()
        if fields:
            line += " " + " ".join(f"{k}={v}" for k, v in fields.items())
        return line


class log_context:
    """
    Bind transfer fields for every record logged inside the block.

    Nested blocks add to (and may override) the enclosing fields.

    Usage:
        with log_context(operation="put", container="bucket", key="objects/abc"):
            logger.debug("Uploading")
    """

    __slots__ = ("_fields", "_token")

    def __init__(self, **fields: Any) -> None:
        self._fields = fields
        self._token = None

    def __enter__(self) -> log_context:
        merged = {**_transfer_fields.get(), **self._fields}
        self._token = _transfer_fields.set(merged)
        return self

    def __exit__(self, *exc: Any) -> None:
        if self._token is not None:
            _transfer_fields.reset(self._token)
        self._token = None


def current_log_context() -> dict[str, Any]:
    """Copy of the fields bound by enclosing ``log_context`` blocks."""
    return dict(_transfer_fields.get())


def setup_logging(
    level: Union[LogLevel, str] = LogLevel.INFO,
    json_output: bool = True,
    stream: Optional[TextIO] = None,
) -> logging.Handler:
    """
    Route all logging to a single stream handler on the root logger.

    Replaces any handlers already installed on the root logger. SDK
    loggers are held at WARNING so request-level chatter stays out.

    Returns:
        The installed handler
    """
    if isinstance(level, str):
        level = LogLevel[level.upper()]

    handler = logging.StreamHandler(sys.stderr if stream is None else stream)
    handler.setLevel(level)
    handler.setFormatter(JsonFormatter() if json_output else ContextFormatter())

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)

    for name in _SDK_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return handler
