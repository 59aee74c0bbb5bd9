"""
Configuration Management for the Inflight Blob Facade

Provides validated configuration with sensible defaults.
Supports environment variable overrides (INFLIGHT_ prefix).

Design:
- Immutable after construction
- Fail-fast on invalid configuration
- Type-safe with dataclasses
"""

from __future__ import annotations

import hashlib
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from inflight.core.types import Result, Ok, Err
from inflight.core import constants as C

_BACKENDS = (C.BACKEND_S3, C.BACKEND_FILESYSTEM, C.BACKEND_MEMORY)
_NAMINGS = (C.NAMING_CONTENT, C.NAMING_RANDOM)
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class ObjectStoreConfig:
    """Where objects go and how they are named."""

    backend: str = C.BACKEND_S3  # "s3", "filesystem" or "memory"
    container: str = "inflight"
    path: str = "objects"
    content_type: str = C.DEFAULT_CONTENT_TYPE
    naming: str = C.NAMING_CONTENT  # "content" or "random"
    hash_algorithm: str = C.DEFAULT_HASH_ALGORITHM
    data_dir: Path = field(default_factory=lambda: Path("./data/objects"))


@dataclass(frozen=True)
class S3Config:
    """
    S3-compatible client configuration.

    Supports AWS S3, MinIO, Cloudflare R2 and other S3-compatible stores.
    Credentials left as None fall through to the SDK's default chain.
    """

    region: str = C.S3_DEFAULT_REGION
    endpoint_url: Optional[str] = None
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None
    session_token: Optional[str] = None
    connect_timeout_seconds: int = C.S3_CONNECT_TIMEOUT_S
    read_timeout_seconds: int = C.S3_READ_TIMEOUT_S
    sdk_max_attempts: int = C.S3_SDK_MAX_ATTEMPTS
    use_ssl: bool = True
    verify_ssl: bool = True


@dataclass(frozen=True)
class ReliabilityConfig:
    """Backoff bounds for the transfer policy."""

    retry_base_ms: int = C.RETRY_BASE_MS
    retry_max_delay_ms: int = C.RETRY_MAX_DELAY_MS
    retry_exponential_base: float = C.RETRY_EXPONENTIAL_BASE
    retry_jitter: bool = True
    retry_max_retries: Optional[int] = C.RETRY_MAX_RETRIES
    retry_max_elapsed_ms: Optional[int] = C.RETRY_MAX_ELAPSED_MS


@dataclass(frozen=True)
class ObservabilityConfig:
    """Logging configuration."""

    log_level: str = "INFO"
    log_json: bool = True


@dataclass(frozen=True)
class InflightConfig:
    """Root configuration."""

    object_store: ObjectStoreConfig = field(default_factory=ObjectStoreConfig)
    s3: S3Config = field(default_factory=S3Config)
    reliability: ReliabilityConfig = field(default_factory=ReliabilityConfig)
    observability: ObservabilityConfig = field(default_factory=ObservabilityConfig)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> Result[InflightConfig, str]:
        """
        Load configuration from environment variables.

        Environment variables are prefixed with INFLIGHT_.
        Example: INFLIGHT_CONTAINER, INFLIGHT_S3_ENDPOINT_URL,
        INFLIGHT_RETRY_MAX_RETRIES ("none" disables the bound).
        """
        env = os.environ if environ is None else environ

        def get(name: str, default: str) -> str:
            return env.get(f"INFLIGHT_{name}", default)

        def get_opt(name: str) -> Optional[str]:
            value = env.get(f"INFLIGHT_{name}")
            return value or None

        try:
            object_store = ObjectStoreConfig(
                backend=get("BACKEND", C.BACKEND_S3).lower(),
                container=get("CONTAINER", "inflight"),
                path=get("PATH", "objects"),
                content_type=get("CONTENT_TYPE", C.DEFAULT_CONTENT_TYPE),
                naming=get("NAMING", C.NAMING_CONTENT).lower(),
                hash_algorithm=get("HASH_ALGORITHM", C.DEFAULT_HASH_ALGORITHM).lower(),
                data_dir=Path(get("DATA_DIR", "./data/objects")),
            )

            s3 = S3Config(
                region=get("S3_REGION", C.S3_DEFAULT_REGION),
                endpoint_url=get_opt("S3_ENDPOINT_URL"),
                access_key_id=get_opt("S3_ACCESS_KEY_ID"),
                secret_access_key=get_opt("S3_SECRET_ACCESS_KEY"),
                session_token=get_opt("S3_SESSION_TOKEN"),
                connect_timeout_seconds=int(get("S3_CONNECT_TIMEOUT", str(C.S3_CONNECT_TIMEOUT_S))),
                read_timeout_seconds=int(get("S3_READ_TIMEOUT", str(C.S3_READ_TIMEOUT_S))),
                sdk_max_attempts=int(get("S3_SDK_MAX_ATTEMPTS", str(C.S3_SDK_MAX_ATTEMPTS))),
                use_ssl=_parse_bool(get("S3_USE_SSL", "true")),
                verify_ssl=_parse_bool(get("S3_VERIFY_SSL", "true")),
            )

            reliability = ReliabilityConfig(
                retry_base_ms=int(get("RETRY_BASE_MS", str(C.RETRY_BASE_MS))),
                retry_max_delay_ms=int(get("RETRY_MAX_DELAY_MS", str(C.RETRY_MAX_DELAY_MS))),
                retry_exponential_base=float(
                    get("RETRY_EXPONENTIAL_BASE", str(C.RETRY_EXPONENTIAL_BASE))
                ),
                retry_jitter=_parse_bool(get("RETRY_JITTER", "true")),
                retry_max_retries=_parse_optional_int(
                    get("RETRY_MAX_RETRIES", str(C.RETRY_MAX_RETRIES))
                ),
                retry_max_elapsed_ms=_parse_optional_int(
                    get("RETRY_MAX_ELAPSED_MS", str(C.RETRY_MAX_ELAPSED_MS))
                ),
            )

            observability = ObservabilityConfig(
                log_level=get("LOG_LEVEL", "INFO").upper(),
                log_json=_parse_bool(get("LOG_JSON", "true")),
            )

            return Ok(cls(
                object_store=object_store,
                s3=s3,
                reliability=reliability,
                observability=observability,
            ))
        except (ValueError, TypeError) as e:
            return Err(f"Configuration error: {e}")

    def validate(self) -> Result[None, str]:
        """Validate configuration invariants."""
        store = self.object_store
        if store.backend not in _BACKENDS:
            return Err(f"Unknown backend {store.backend!r}, expected one of {_BACKENDS}")
        if not store.container:
            return Err("Container must not be empty")
        if not store.path:
            return Err("Path must not be empty")
        if store.naming not in _NAMINGS:
            return Err(f"Unknown naming {store.naming!r}, expected one of {_NAMINGS}")
        if store.hash_algorithm not in hashlib.algorithms_available:
            return Err(f"Unsupported hash algorithm {store.hash_algorithm!r}")

        rel = self.reliability
        if rel.retry_base_ms < 0:
            return Err("retry_base_ms must be >= 0")
        if rel.retry_max_delay_ms < rel.retry_base_ms:
            return Err("retry_max_delay_ms cannot be below retry_base_ms")
        if rel.retry_exponential_base < 1.0:
            return Err("retry_exponential_base must be >= 1.0")
        if rel.retry_max_retries is not None and rel.retry_max_retries < 0:
            return Err("retry_max_retries must be >= 0")
        if rel.retry_max_elapsed_ms is not None and rel.retry_max_elapsed_ms < 0:
            return Err("retry_max_elapsed_ms must be >= 0")

        if self.s3.sdk_max_attempts < 1:
            return Err("sdk_max_attempts must be >= 1")
        if self.observability.log_level not in _LOG_LEVELS:
            return Err(f"Unknown log level {self.observability.log_level!r}")
        return Ok(None)


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"Invalid boolean: {value!r}")


def _parse_optional_int(value: str) -> Optional[int]:
    if value.strip().lower() in ("", "none"):
        return None
    return int(value)
