"""
Error Hierarchy for the Inflight Blob Facade

Design Principles:
- Storage failures are returned as Err values, not raised
- Every error carries the original cause unchanged
- The retryable/permanent classification is visible on the error itself

Each error type includes:
- Unique error code for programmatic handling
- Human-readable message for logging
- Optional cause for root cause analysis
- Timestamp for correlation with logs

Usage:
    result = inflight.read("missing-object")
    match result:
        case Ok(data):
            process(data)
        case Err(PermanentTransportError() as error):
            handle_missing(error.cause)
        case Err(ExhaustedRetriesError() as error):
            alert(error.context["attempts"])
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional
from uuid import uuid4


# =============================================================================
# ERROR CODE ENUMERATION
# =============================================================================
class ErrorCode(Enum):
    """
    Unique error codes for programmatic error handling.

    Codes are grouped by subsystem:
    - 1xxx: Naming errors
    - 2xxx: Transport errors
    - 6xxx: Reliability errors
    """

    # Naming errors (1xxx)
    NAMING_FAILED = 1001
    NAMING_INVALID_NAME = 1002
    NAMING_GENERATION_FAILED = 1003

    # Transport errors (2xxx)
    TRANSPORT_RETRYABLE = 2001
    TRANSPORT_PERMANENT = 2002
    TRANSPORT_BODY_READ_FAILED = 2003

    # Reliability errors (6xxx)
    RELIABILITY_RETRY_EXHAUSTED = 6002


# =============================================================================
# BASE ERROR CLASS
# =============================================================================
@dataclass(eq=False)
class InflightError(Exception):
    """
    Base class for all facade errors.

    Provides:
    - Unique error ID for log correlation
    - Error code for programmatic handling
    - Cause chain for root cause analysis
    """

    code: ErrorCode
    message: str
    error_id: str = field(default_factory=lambda: str(uuid4()))
    timestamp_ns: int = field(default_factory=time.time_ns)
    cause: Optional[BaseException] = None
    context: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        super().__init__(self.message)
        if self.cause is not None:
            self.__cause__ = self.cause

    @property
    def retryable(self) -> bool:
        """Whether the failure was classified as transient."""
        return False

    def to_dict(self) -> dict[str, Any]:
        """
        Serialize error to dictionary for structured logs.

        The cause is rendered by repr only.
        """
        return {
            "error_id": self.error_id,
            "type": type(self).__name__,
            "code": self.code.name,
            "code_value": self.code.value,
            "message": self.message,
            "timestamp_nanos": self.timestamp_ns,
            "retryable": self.retryable,
            "cause": repr(self.cause) if self.cause is not None else None,
            "context": self.context,
        }

    def __str__(self) -> str:
        return f"[{self.code.name}] {self.message} (id={self.error_id[:8]})"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"code={self.code.name}, "
            f"message={self.message!r}, "
            f"error_id={self.error_id!r})"
        )


def _describe(cause: BaseException) -> str:
    text = str(cause)
    return f"{type(cause).__name__}: {text}" if text else type(cause).__name__


# =============================================================================
# NAMING ERRORS
# =============================================================================
@dataclass(eq=False)
class NamingError(InflightError):
    """
    The naming strategy could not produce an object name.

    Always permanent: retrying a hash or an exhausted entropy source
    does not change the outcome.
    """

    @classmethod
    def strategy_failed(
        cls,
        strategy: str,
        cause: BaseException,
    ) -> NamingError:
        """Strategy raised or returned an error."""
        return cls(
            code=ErrorCode.NAMING_FAILED,
            message=f"Naming strategy '{strategy}' failed: {_describe(cause)}",
            cause=cause,
            context={"strategy": strategy},
        )

    @classmethod
    def invalid_name(
        cls,
        strategy: str,
        name: Any,
    ) -> NamingError:
        """Strategy returned something that cannot be used as a name."""
        return cls(
            code=ErrorCode.NAMING_INVALID_NAME,
            message=f"Naming strategy '{strategy}' returned an unusable name: {name!r}",
            context={"strategy": strategy, "name": repr(name)[:100]},
        )


@dataclass(eq=False)
class NameGenerationError(NamingError):
    """Random identifier source failed (e.g. entropy exhaustion)."""

    @classmethod
    def source_failed(
        cls,
        source: str,
        cause: BaseException,
    ) -> NameGenerationError:
        return cls(
            code=ErrorCode.NAMING_GENERATION_FAILED,
            message=f"Random identifier source '{source}' failed: {_describe(cause)}",
            cause=cause,
            context={"source": source},
        )


# =============================================================================
# TRANSPORT ERRORS
# =============================================================================
@dataclass(eq=False)
class TransportError(InflightError):
    """Failure reported by the storage client for a put or get."""


@dataclass(eq=False)
class RetryableTransportError(TransportError):
    """Backend signaled a transient condition (timeout, throttling, 5xx)."""

    @property
    def retryable(self) -> bool:
        return True

    @classmethod
    def from_cause(
        cls,
        operation: str,
        key: Optional[str],
        cause: BaseException,
    ) -> RetryableTransportError:
        return cls(
            code=ErrorCode.TRANSPORT_RETRYABLE,
            message=f"Transient failure during {operation} of '{key}': {_describe(cause)}",
            cause=cause,
            context={"operation": operation, "key": key},
        )


@dataclass(eq=False)
class ExhaustedRetriesError(RetryableTransportError):
    """
    Backoff budget ran out while the backend kept failing transiently.

    The cause is the last retryable failure, unchanged.
    """

    @classmethod
    def after(
        cls,
        operation: str,
        key: Optional[str],
        attempts: int,
        elapsed_ms: float,
        cause: BaseException,
    ) -> ExhaustedRetriesError:
        return cls(
            code=ErrorCode.RELIABILITY_RETRY_EXHAUSTED,
            message=(
                f"Retry exhausted for {operation} of '{key}' after {attempts} attempts "
                f"({elapsed_ms:.0f}ms): {_describe(cause)}"
            ),
            cause=cause,
            context={
                "operation": operation,
                "key": key,
                "attempts": attempts,
                "elapsed_ms": round(elapsed_ms, 3),
            },
        )


@dataclass(eq=False)
class PermanentTransportError(TransportError):
    """Backend signaled a non-transient condition (auth, not-found, bad request)."""

    @classmethod
    def from_cause(
        cls,
        operation: str,
        key: Optional[str],
        cause: BaseException,
    ) -> PermanentTransportError:
        return cls(
            code=ErrorCode.TRANSPORT_PERMANENT,
            message=f"Permanent failure during {operation} of '{key}': {_describe(cause)}",
            cause=cause,
            context={"operation": operation, "key": key},
        )


@dataclass(eq=False)
class BodyReadError(PermanentTransportError):
    """
    Response body could not be drained after a successful request.

    Not retried: the request already succeeded at the transport level.
    """

    @classmethod
    def drain_failed(
        cls,
        key: str,
        cause: BaseException,
    ) -> BodyReadError:
        return cls(
            code=ErrorCode.TRANSPORT_BODY_READ_FAILED,
            message=f"Failed to read response body for '{key}': {_describe(cause)}",
            cause=cause,
            context={"operation": "get", "key": key},
        )
