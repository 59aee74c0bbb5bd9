"""
Retry Policy: Classified Retry with Exponential Backoff

Implements the transfer policy shared by puts and gets:
- Classification: the storage client decides retryable vs permanent
- Exponential backoff: base × factor^n, capped at max delay
- Full jitter: random(0, backoff) to prevent thundering herd
- Exhaustion: max retry count and/or max elapsed time

State machine:
    IDLE -> ATTEMPTING -> SUCCEEDED
                       -> WAITING -> ATTEMPTING
                       -> FAILED (permanent or exhausted)

The loop is synchronous; backoff sleeps the calling thread.
"""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, TypeVar

from inflight.core.types import Result, Ok, Err
from inflight.core.errors import (
    InflightError,
    RetryableTransportError,
    ExhaustedRetriesError,
    PermanentTransportError,
)
from inflight.core import constants as C

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Permanent(Exception):
    """
    Raised inside a retried operation to stop retrying immediately.

    The wrapped error is surfaced unchanged as the operation's Err.
    """

    def __init__(self, error: BaseException) -> None:
        super().__init__(str(error))
        self.error = error


@dataclass
class RetryPolicy:
    """Backoff configuration."""

    base_delay_ms: int = C.RETRY_BASE_MS
    max_delay_ms: int = C.RETRY_MAX_DELAY_MS
    exponential_base: float = C.RETRY_EXPONENTIAL_BASE
    jitter: bool = True  # Full jitter
    max_retries: Optional[int] = C.RETRY_MAX_RETRIES
    max_elapsed_ms: Optional[int] = C.RETRY_MAX_ELAPSED_MS

    @classmethod
    def default(cls) -> RetryPolicy:
        return cls()

    @classmethod
    def no_retry(cls) -> RetryPolicy:
        """Single attempt; retryable failures surface as exhausted."""
        return cls(max_retries=0)

    @classmethod
    def aggressive(cls) -> RetryPolicy:
        """Longer budget for critical writes."""
        return cls(
            base_delay_ms=50,
            max_delay_ms=30 * C.SECOND_MS,
            max_retries=None,
            max_elapsed_ms=15 * C.MINUTE_MS,
        )

    def next_delay_ms(self, retry_index: int) -> float:
        """Delay before retry number ``retry_index + 1``."""
        return calculate_backoff(
            attempt=retry_index,
            base_delay_ms=self.base_delay_ms,
            max_delay_ms=self.max_delay_ms,
            exponential_base=self.exponential_base,
            jitter=self.jitter,
        )

    def is_exhausted(self, retries_done: int, elapsed_ms: float) -> bool:
        """
        Whether another retry is out of budget.

        ``elapsed_ms`` should include the delay about to be slept.
        """
        if self.max_retries is not None and retries_done >= self.max_retries:
            return True
        if self.max_elapsed_ms is not None and elapsed_ms > self.max_elapsed_ms:
            return True
        return False


def calculate_backoff(
    attempt: int,
    base_delay_ms: int,
    max_delay_ms: int,
    exponential_base: float,
    jitter: bool,
) -> float:
    """
    Calculate backoff delay with optional jitter.

    Full jitter: random(0, min(cap, base * factor^attempt))
    """
    delay = min(max_delay_ms, base_delay_ms * (exponential_base ** attempt))

    if jitter:
        delay = random.uniform(0, delay)

    return delay


class TransferState(Enum):
    """Lifecycle of one retried operation."""

    IDLE = "idle"
    ATTEMPTING = "attempting"
    WAITING = "waiting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class TransferStats:
    """Per-operation retry statistics."""

    state: TransferState = TransferState.IDLE
    total_attempts: int = 0
    retries: int = 0
    total_delay_ms: float = 0.0
    last_error: Optional[InflightError] = None


def retry_with_backoff(
    func: Callable[[], T],
    is_retryable: Callable[[BaseException], bool],
    policy: Optional[RetryPolicy] = None,
    operation: str = "operation",
    key: Optional[str] = None,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
    stats: Optional[TransferStats] = None,
) -> Result[T, InflightError]:
    """
    Execute ``func`` until it succeeds, fails permanently, or the
    backoff budget is spent.

    Args:
        func: Operation to run; failures are raised
        is_retryable: Storage client's classifier for raised errors
        policy: Backoff configuration (default if None)
        operation: Label for errors and logs ("put", "get")
        key: Object key for errors and logs
        sleep: Blocking sleep, in seconds
        clock: Monotonic clock, in seconds
        stats: Filled in place when given

    Returns:
        Ok with func's value, or Err with a PermanentTransportError,
        ExhaustedRetriesError, or the error carried by Permanent
    """
    if policy is None:
        policy = RetryPolicy.default()
    if stats is None:
        stats = TransferStats()

    started = clock()

    while True:
        stats.state = TransferState.ATTEMPTING
        stats.total_attempts += 1

        try:
            value = func()
        except Permanent as marker:
            error = marker.error
            if not isinstance(error, InflightError):
                error = PermanentTransportError.from_cause(operation, key, error)
            return _failed(stats, error)
        except Exception as e:
            if not _classify(is_retryable, e):
                return _failed(stats, PermanentTransportError.from_cause(operation, key, e))

            stats.last_error = RetryableTransportError.from_cause(operation, key, e)
            delay_ms = policy.next_delay_ms(stats.retries)
            elapsed_ms = (clock() - started) * 1000

            if policy.is_exhausted(stats.retries, elapsed_ms + delay_ms):
                return _failed(stats, ExhaustedRetriesError.after(
                    operation=operation,
                    key=key,
                    attempts=stats.total_attempts,
                    elapsed_ms=elapsed_ms,
                    cause=e,
                ))

            stats.state = TransferState.WAITING
            stats.retries += 1
            stats.total_delay_ms += delay_ms
            logger.debug(
                "%s of %r failed transiently (%s), retrying in %.1fms (attempt %d)",
                operation, key, e, delay_ms, stats.total_attempts + 1,
            )
            sleep(delay_ms / 1000)
            continue

        stats.state = TransferState.SUCCEEDED
        if stats.retries:
            logger.debug("%s of %r succeeded after %d retries", operation, key, stats.retries)
        return Ok(value)


def _classify(is_retryable: Callable[[BaseException], bool], error: Exception) -> bool:
    # A classifier that fails leaves the error permanent.
    try:
        return bool(is_retryable(error))
    except Exception:
        logger.warning("Retry classifier failed on %r; treating as permanent", error, exc_info=True)
        return False


def _failed(stats: TransferStats, error: InflightError) -> Err[InflightError]:
    stats.state = TransferState.FAILED
    stats.last_error = error
    logger.warning("%s", error, extra={"error": error.to_dict()})
    return Err(error)
