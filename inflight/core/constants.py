"""
Package-Wide Constants for the Inflight Blob Facade

All defaults centralized here.
"""

from typing import Final

# =============================================================================
# TIME UNITS
# =============================================================================
SECOND_MS: Final[int] = 1000
MINUTE_MS: Final[int] = 60 * SECOND_MS

# =============================================================================
# OBJECTS
# =============================================================================
DEFAULT_CONTENT_TYPE: Final[str] = "binary/octet-stream"
DEFAULT_HASH_ALGORITHM: Final[str] = "sha256"
NAMING_CONTENT: Final[str] = "content"
NAMING_RANDOM: Final[str] = "random"

BACKEND_S3: Final[str] = "s3"
BACKEND_FILESYSTEM: Final[str] = "filesystem"
BACKEND_MEMORY: Final[str] = "memory"

# =============================================================================
# RELIABILITY
# =============================================================================
RETRY_BASE_MS: Final[int] = 100
RETRY_MAX_DELAY_MS: Final[int] = 10 * SECOND_MS
RETRY_EXPONENTIAL_BASE: Final[float] = 2.0
RETRY_MAX_RETRIES: Final[int] = 10
RETRY_MAX_ELAPSED_MS: Final[int] = 2 * MINUTE_MS

# =============================================================================
# S3 CLIENT
# =============================================================================
S3_DEFAULT_REGION: Final[str] = "us-east-1"
S3_CONNECT_TIMEOUT_S: Final[int] = 5
S3_READ_TIMEOUT_S: Final[int] = 60
# The SDK makes a single attempt; retrying belongs to the transfer policy.
S3_SDK_MAX_ATTEMPTS: Final[int] = 1
