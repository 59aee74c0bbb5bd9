"""
Inflight: Content-Addressed Write/Read Facade over Object Storage

Callers hand over bytes and get back a Reference; hand over a name and
get back the bytes. In between:
- a naming strategy turns the payload into an object name
- the object lives at {container}/{path}/{name}
- transient backend failures are retried with exponential backoff,
  permanent ones surface immediately

Usage:
    inflight = Inflight("my-bucket", "some/path", S3StorageClient(boto3.client("s3")))

    ref = inflight.write(b"hello world").unwrap()
    data = inflight.read(ref.name).unwrap_or(b"")
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from inflight.core.types import Result, Ok, Reference, join_key
from inflight.core.errors import InflightError, BodyReadError
from inflight.core.config import InflightConfig, ReliabilityConfig
from inflight.core import constants as C
from inflight.observability.logging import log_context
from inflight.reliability.retry import (
    Permanent,
    RetryPolicy,
    TransferStats,
    retry_with_backoff,
)
from inflight.storage.naming import (
    NamingStrategy,
    content_hash_naming,
    naming_strategy,
    resolve_name,
)
from inflight.storage.protocols import ObjectBody, StorageClient
from inflight.storage.backends import FileSystemStorageClient, InMemoryStorageClient
from inflight.storage.s3_client import S3StorageClient

logger = logging.getLogger(__name__)


class Inflight:
    """
    Write/read facade over a storage client.

    Configuration is fixed at construction except ``naming``, which is a
    plain attribute. Reassigning it is not thread-safe: do it before the
    first call, guard it with your own lock, or use ``with_naming`` to get
    a separate instance. Each call reads the strategy once.

    Concurrent ``write``/``read`` calls are otherwise safe as long as the
    storage client is.
    """

    __slots__ = (
        "_container",
        "_path",
        "_client",
        "_policy",
        "_content_type",
        "_sleep",
        "naming",
    )

    def __init__(
        self,
        container: str,
        path: str,
        client: StorageClient,
        naming: Optional[NamingStrategy] = None,
        policy: Optional[RetryPolicy] = None,
        content_type: str = C.DEFAULT_CONTENT_TYPE,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """
        Args:
            container: Bucket (or volume) holding the objects
            path: Namespace prefix for every object of this instance
            client: Storage capability (put, get, retryability)
            naming: Naming strategy; content hash (SHA-256) if None
            policy: Backoff configuration; RetryPolicy.default() if None
            content_type: Content type recorded on every put
            sleep: Blocking sleep used between retries

        Raises:
            ValueError: If container or path is empty
        """
        if not container:
            raise ValueError("container must not be empty")
        if not path:
            raise ValueError("path must not be empty")

        self._container = container
        self._path = path
        self._client = client
        self._policy = policy or RetryPolicy.default()
        self._content_type = content_type
        self._sleep = sleep
        self.naming: NamingStrategy = naming or content_hash_naming()

    @classmethod
    def from_config(
        cls,
        config: InflightConfig,
        client: Optional[StorageClient] = None,
    ) -> Inflight:
        """Build a facade, and its storage client unless one is given."""
        store = config.object_store
        return cls(
            container=store.container,
            path=store.path,
            client=client if client is not None else _create_client(config),
            naming=naming_strategy(store.naming, store.hash_algorithm),
            policy=_retry_policy(config.reliability),
            content_type=store.content_type,
        )

    @property
    def container(self) -> str:
        return self._container

    @property
    def path(self) -> str:
        return self._path

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    def with_naming(self, naming: NamingStrategy) -> Inflight:
        """Same configuration, different naming strategy."""
        return Inflight(
            container=self._container,
            path=self._path,
            client=self._client,
            naming=naming,
            policy=self._policy,
            content_type=self._content_type,
            sleep=self._sleep,
        )

    def key_for(self, name: str) -> str:
        """Physical key of ``name`` under this instance's path."""
        return join_key(self._path, name)

    # -------------------------------------------------------------------------
    # WRITE
    # -------------------------------------------------------------------------

    def write(
        self,
        payload: bytes,
        stats: Optional[TransferStats] = None,
    ) -> Result[Reference, InflightError]:
        """
        Store ``payload`` and return its reference.

        The name is generated once, before any attempt, so retries
        overwrite the same key. A naming failure is returned without
        contacting the backend.

        Args:
            payload: Bytes to store; may be empty
            stats: Filled with retry statistics when given

        Returns:
            Ok(Reference) on success, Err otherwise; never a partial reference

        Raises:
            TypeError: If payload is not bytes-like
        """
        if not isinstance(payload, (bytes, bytearray, memoryview)):
            raise TypeError(f"payload must be bytes-like, got {type(payload).__name__}")
        data = bytes(payload)

        named = resolve_name(self.naming, data)
        if named.is_err():
            logger.warning("%s", named.error, extra={"error": named.error.to_dict()})
            return named

        ref = Reference(container=self._container, path=self._path, name=named.unwrap())
        key = ref.key

        with log_context(operation="put", container=self._container, key=key):
            result = retry_with_backoff(
                lambda: self._client.put_object(self._container, key, data, self._content_type),
                is_retryable=self._client.is_retryable,
                policy=self._policy,
                operation="put",
                key=key,
                sleep=self._sleep,
                stats=stats,
            )
            if result.is_err():
                return result

            logger.debug("Stored %d bytes at %s", len(data), ref.uri)
        return Ok(ref)

    # -------------------------------------------------------------------------
    # READ
    # -------------------------------------------------------------------------

    def read(
        self,
        name: str,
        stats: Optional[TransferStats] = None,
    ) -> Result[bytes, InflightError]:
        """
        Retrieve the object ``name`` under this instance's container/path.

        A body that fails to drain after a successful request is not
        retried (BodyReadError).

        Returns:
            Ok(bytes) on success. On failure Err; use ``unwrap_or(b"")``
            to get an empty byte string alongside the error.
        """
        key = self.key_for(name)

        with log_context(operation="get", container=self._container, key=key):
            result = retry_with_backoff(
                lambda: self._fetch(key),
                is_retryable=self._client.is_retryable,
                policy=self._policy,
                operation="get",
                key=key,
                sleep=self._sleep,
                stats=stats,
            )
            if result.is_ok():
                logger.debug("Read %d bytes from %s/%s", len(result.value), self._container, key)
        return result

    def _fetch(self, key: str) -> bytes:
        body = self._client.get_object(self._container, key)
        try:
            return body.read()
        except Exception as e:
            raise Permanent(BodyReadError.drain_failed(key, e)) from e
        finally:
            _release(body, key)


def _release(body: ObjectBody, key: str) -> None:
    # Close failures are logged only; the read outcome is already decided.
    try:
        body.close()
    except Exception:
        logger.warning("Failed to close response body for %s", key, exc_info=True)


def _retry_policy(config: ReliabilityConfig) -> RetryPolicy:
    return RetryPolicy(
        base_delay_ms=config.retry_base_ms,
        max_delay_ms=config.retry_max_delay_ms,
        exponential_base=config.retry_exponential_base,
        jitter=config.retry_jitter,
        max_retries=config.retry_max_retries,
        max_elapsed_ms=config.retry_max_elapsed_ms,
    )


def _create_client(config: InflightConfig) -> StorageClient:
    """Create the storage client named by config.object_store.backend."""
    backend = config.object_store.backend
    if backend == C.BACKEND_S3:
        return S3StorageClient.from_config(config.s3)
    if backend == C.BACKEND_FILESYSTEM:
        return FileSystemStorageClient(config.object_store.data_dir)
    if backend == C.BACKEND_MEMORY:
        return InMemoryStorageClient()
    raise ValueError(f"Unknown backend {backend!r}")
