"""
Storage module: the write/read facade, naming strategies, and storage clients.

Clients:
- S3StorageClient: boto3, any S3-compatible endpoint
- FileSystemStorageClient: local directory tree
- InMemoryStorageClient: process memory, with fault injection
"""

from inflight.storage.protocols import ObjectBody, StorageClient
from inflight.storage.naming import (
    NamingStrategy,
    content_hash_naming,
    random_naming,
    naming_strategy,
    resolve_name,
)
from inflight.storage.backends import (
    FileSystemStorageClient,
    InMemoryStorageClient,
    ObjectNotFoundError,
)
from inflight.storage.s3_client import S3StorageClient
from inflight.storage.inflight import Inflight

__all__ = [
    "ObjectBody",
    "StorageClient",
    "NamingStrategy",
    "content_hash_naming",
    "random_naming",
    "naming_strategy",
    "resolve_name",
    "FileSystemStorageClient",
    "InMemoryStorageClient",
    "ObjectNotFoundError",
    "S3StorageClient",
    "Inflight",
]
