"""
Core module: Type definitions, error hierarchy, and configuration.

This module provides the foundational abstractions for the facade:
- Result values for exception-free storage control flow
- Immutable object references
- Error hierarchy split into retryable and permanent failures
- Configuration management with validation
"""

from inflight.core.types import (
    Result,
    Ok,
    Err,
    ContentHash,
    Reference,
    join_key,
)
from inflight.core.errors import (
    ErrorCode,
    InflightError,
    NamingError,
    NameGenerationError,
    TransportError,
    RetryableTransportError,
    ExhaustedRetriesError,
    PermanentTransportError,
    BodyReadError,
)
from inflight.core.config import InflightConfig

__all__ = [
    "Result",
    "Ok",
    "Err",
    "ContentHash",
    "Reference",
    "join_key",
    "ErrorCode",
    "InflightError",
    "NamingError",
    "NameGenerationError",
    "TransportError",
    "RetryableTransportError",
    "ExhaustedRetriesError",
    "PermanentTransportError",
    "BodyReadError",
    "InflightConfig",
]
