"""
Naming Strategies: Payload Bytes to Object Name

Two standard strategies:
- Content-derived: hex digest of the payload. Identical payloads get
  identical names, so rewriting the same bytes is a harmless overwrite.
- Random: a fresh UUID4 per call, uncorrelated with the payload.

Any callable ``(bytes) -> Result[str, NamingError]`` can be used instead.
"""

from __future__ import annotations

import hashlib
import logging
import uuid
from typing import Any, Callable

from inflight.core.types import Result, Ok, Err, ContentHash
from inflight.core.errors import NamingError, NameGenerationError
from inflight.core import constants as C

logger = logging.getLogger(__name__)

NamingStrategy = Callable[[bytes], Result[str, NamingError]]


def content_hash_naming(algorithm: str = C.DEFAULT_HASH_ALGORITHM) -> NamingStrategy:
    """
    Name objects by the lowercase hex digest of their bytes.

    Raises:
        ValueError: If hashlib does not support ``algorithm``
    """
    hashlib.new(algorithm)  # fail at construction, not on first write

    def name_for(payload: bytes) -> Result[str, NamingError]:
        try:
            return Ok(ContentHash.compute(payload, algorithm).to_hex())
        except (TypeError, ValueError) as e:
            return Err(NamingError.strategy_failed(f"content-{algorithm}", e))

    name_for.__name__ = f"content_{algorithm}"
    return name_for


def random_naming(factory: Callable[[], uuid.UUID] = uuid.uuid4) -> NamingStrategy:
    """
    Name objects with a freshly generated 128-bit identifier.

    Every write produces a distinct object, even for identical bytes.
    A failing identifier source yields NameGenerationError.
    """

    def name_for(payload: bytes) -> Result[str, NamingError]:
        try:
            return Ok(str(factory()))
        except Exception as e:
            return Err(NameGenerationError.source_failed(_label(factory), e))

    name_for.__name__ = "random_uuid"
    return name_for


def naming_strategy(kind: str, algorithm: str = C.DEFAULT_HASH_ALGORITHM) -> NamingStrategy:
    """Build a strategy from its configuration name ("content" or "random")."""
    if kind == C.NAMING_CONTENT:
        return content_hash_naming(algorithm)
    if kind == C.NAMING_RANDOM:
        return random_naming()
    raise ValueError(f"Unknown naming strategy {kind!r}")


def resolve_name(strategy: Callable[[bytes], Any], payload: bytes) -> Result[str, NamingError]:
    """
    Ask ``strategy`` for a name and check the answer.

    Strategies returning a bare ``str`` are treated as Ok; strategies
    that raise are wrapped in NamingError. An empty or non-string name
    is a NamingError too.
    """
    label = _label(strategy)
    try:
        result = strategy(payload)
    except Exception as e:
        return Err(NamingError.strategy_failed(label, e))

    if isinstance(result, str):
        result = Ok(result)
    elif isinstance(result, Err):
        error = result.error
        if isinstance(error, NamingError):
            return result
        if isinstance(error, BaseException):
            return Err(NamingError.strategy_failed(label, error))
        return Err(NamingError.strategy_failed(label, RuntimeError(str(error))))
    elif not isinstance(result, Ok):
        return Err(NamingError.invalid_name(label, result))

    name = result.value
    if not isinstance(name, str) or not name:
        return Err(NamingError.invalid_name(label, name))
    return result


def _label(fn: Any) -> str:
    return getattr(fn, "__name__", type(fn).__name__)
