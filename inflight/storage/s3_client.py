"""
S3-Compatible Storage Client
============================

boto3-backed StorageClient for AWS S3, MinIO, Cloudflare R2 and other
S3-compatible services.

Retry Classification:
---------------------
``is_retryable`` asks botocore's standard retry mode checkers:
- transient error codes (RequestTimeout, PriorRequestNotComplete, ...)
- throttling error codes (SlowDown, Throttling, ...)
- 500/502/503/504 responses
- connection and HTTP client exceptions (timeouts, resets)

The SDK itself makes a single attempt by default, so the facade's
transfer policy is the only retry loop.

Thread Safety:
--------------
boto3 clients are thread-safe; this wrapper holds no mutable state.
"""

from __future__ import annotations

import logging
from types import SimpleNamespace
from typing import Any, Dict

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError
from botocore.response import StreamingBody
from botocore.retries.standard import (
    OrRetryChecker,
    RetryContext,
    ThrottledRetryableChecker,
    TransientRetryableChecker,
)

from inflight.core.config import S3Config

logger = logging.getLogger(__name__)

_RETRY_CHECKER = OrRetryChecker([
    TransientRetryableChecker(),
    ThrottledRetryableChecker(),
])


class S3StorageClient:
    """
    StorageClient over a boto3 S3 client.

    Example:
        >>> client = S3StorageClient.from_config(S3Config(endpoint_url="http://localhost:9000"))
        >>> client.put_object("bucket", "path/name", b"data", "binary/octet-stream")
        >>> client.get_object("bucket", "path/name").read()
        b'data'
    """

    __slots__ = ("_client",)

    def __init__(self, client: Any) -> None:
        """
        Args:
            client: A boto3 S3 client (``boto3.client("s3")``).
        """
        self._client = client

    @classmethod
    def from_config(cls, config: S3Config) -> S3StorageClient:
        """Create the boto3 client from configuration."""
        session = boto3.session.Session(
            aws_access_key_id=config.access_key_id,
            aws_secret_access_key=config.secret_access_key,
            aws_session_token=config.session_token,
            region_name=config.region,
        )

        client_config = Config(
            connect_timeout=config.connect_timeout_seconds,
            read_timeout=config.read_timeout_seconds,
            retries={"max_attempts": config.sdk_max_attempts, "mode": "standard"},
        )

        client_kwargs: Dict[str, Any] = {
            "config": client_config,
            "use_ssl": config.use_ssl,
        }
        if config.endpoint_url:
            client_kwargs["endpoint_url"] = config.endpoint_url
        if not config.verify_ssl:
            client_kwargs["verify"] = False

        logger.debug(
            "Creating S3 client (region=%s, endpoint=%s)",
            config.region, config.endpoint_url or "default",
        )
        return cls(session.client("s3", **client_kwargs))

    @property
    def client(self) -> Any:
        """The wrapped boto3 client."""
        return self._client

    def put_object(
        self,
        container: str,
        key: str,
        body: bytes,
        content_type: str,
    ) -> None:
        self._client.put_object(
            Bucket=container,
            Key=key,
            Body=body,
            ContentType=content_type,
        )

    def get_object(self, container: str, key: str) -> StreamingBody:
        response = self._client.get_object(Bucket=container, Key=key)
        return response["Body"]

    def is_retryable(self, error: BaseException) -> bool:
        return _RETRY_CHECKER.is_retryable(_retry_context(error))


def _retry_context(error: BaseException) -> RetryContext:
    """Describe a raised error the way botocore's retry handler sees it."""
    if isinstance(error, ClientError):
        status = error.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
        return RetryContext(
            attempt_number=1,
            parsed_response=error.response,
            http_response=SimpleNamespace(status_code=status) if status else None,
        )
    return RetryContext(attempt_number=1, caught_exception=error)
