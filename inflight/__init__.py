"""
Inflight: Content-Addressed Blob Facade over Object Storage

Hand it bytes, get back a reference; hand it a name, get back the bytes.
- Naming: content hash (default) or random identifier, or any callable
- Layout: {container}/{path}/{name}
- Reliability: transient failures retried with exponential backoff,
  permanent failures surfaced immediately

License: MIT
"""

__version__ = "1.0.0"

# =============================================================================
# PUBLIC API EXPORTS
# =============================================================================
from inflight.core.types import (
    Result,
    Ok,
    Err,
    Reference,
)
from inflight.core.errors import (
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
from inflight.reliability import RetryPolicy, Permanent
from inflight.storage import (
    Inflight,
    StorageClient,
    S3StorageClient,
    FileSystemStorageClient,
    InMemoryStorageClient,
    content_hash_naming,
    random_naming,
)

__all__ = [
    "__version__",
    # Result values
    "Result",
    "Ok",
    "Err",
    "Reference",
    # Errors
    "InflightError",
    "NamingError",
    "NameGenerationError",
    "TransportError",
    "RetryableTransportError",
    "ExhaustedRetriesError",
    "PermanentTransportError",
    "BodyReadError",
    # Config
    "InflightConfig",
    # Reliability
    "RetryPolicy",
    "Permanent",
    # Facade
    "Inflight",
    "StorageClient",
    "S3StorageClient",
    "FileSystemStorageClient",
    "InMemoryStorageClient",
    "content_hash_naming",
    "random_naming",
]
