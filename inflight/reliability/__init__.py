"""
Reliability module: Classified retry with exponential backoff.
"""

from inflight.reliability.retry import (
    Permanent,
    RetryPolicy,
    TransferState,
    TransferStats,
    calculate_backoff,
    retry_with_backoff,
)

__all__ = [
    "Permanent",
    "RetryPolicy",
    "TransferState",
    "TransferStats",
    "calculate_backoff",
    "retry_with_backoff",
]
