"""
Core Type Definitions for the Inflight Blob Facade

Implements Result/Either values for exception-free storage control flow,
plus the immutable value types that cross the facade boundary.

Design Principles:
- Never use None for absence of a result (use Result)
- Value types are frozen and validated on construction
- Object keys use forward-slash semantics on every host platform
"""

from __future__ import annotations

import hashlib
import json
import posixpath
from dataclasses import dataclass
from typing import (
    Any,
    Callable,
    Generic,
    Literal,
    Mapping,
    TypeVar,
    Union,
)

# =============================================================================
# TYPE VARIABLES FOR GENERIC CONTAINERS
# =============================================================================
T = TypeVar("T")  # Success type
E = TypeVar("E")  # Error type
U = TypeVar("U")  # Transform result type


# =============================================================================
# RESULT MONAD
# =============================================================================
@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """
    Success variant of Result.

    Immutable container for a successful storage operation's value.
    """

    value: T

    def is_ok(self) -> Literal[True]:
        return True

    def is_err(self) -> Literal[False]:
        return False

    def unwrap(self) -> T:
        """Extract value. Safe to call after is_ok() check."""
        return self.value

    def unwrap_or(self, default: T) -> T:
        """Return value, ignoring default."""
        return self.value

    def map(self, fn: Callable[[T], U]) -> Ok[U]:
        """Apply transformation to success value."""
        return Ok(fn(self.value))

    def flat_map(self, fn: Callable[[T], Result[U, E]]) -> Result[U, E]:
        """Monadic bind for chaining fallible operations."""
        return fn(self.value)

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """
    Failure variant of Result.

    Carries the error unchanged so callers can inspect its cause.
    """

    error: E

    def is_ok(self) -> Literal[False]:
        return False

    def is_err(self) -> Literal[True]:
        return True

    def unwrap(self) -> Any:
        """
        Attempting to unwrap an error is a programming error.

        Raises:
            RuntimeError: Always, chained to the carried error
        """
        cause = self.error if isinstance(self.error, BaseException) else None
        raise RuntimeError(f"Called unwrap() on Err: {self.error}") from cause

    def unwrap_or(self, default: T) -> T:
        """
        Return default value on error.

        Failed reads use ``unwrap_or(b"")`` to get an empty byte string
        rather than None.
        """
        return default

    def map(self, fn: Callable[[Any], U]) -> Err[E]:
        """No-op on error variant - propagates error unchanged."""
        return self

    def flat_map(self, fn: Callable[[Any], Result[U, E]]) -> Err[E]:
        """Propagate error through monadic chain."""
        return self

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


# Union type for pattern matching
Result = Union[Ok[T], Err[E]]


# =============================================================================
# OBJECT KEYS
# =============================================================================
def join_key(*parts: str) -> str:
    """
    Join key segments with forward slashes.

    Empty segments are dropped and the result is normalized, so
    ``join_key("a/b/", "c")`` and ``join_key("a//b", "c")`` both give
    ``"a/b/c"``. A leading slash on a later segment does not discard the
    earlier ones.
    """
    joined = "/".join(part for part in parts if part)
    if not joined:
        return ""
    return posixpath.normpath(joined)


# =============================================================================
# CONTENT-ADDRESSABLE HASH
# =============================================================================
@dataclass(frozen=True, slots=True)
class ContentHash:
    """
    Content digest used to derive object names.

    Defaults to SHA-256; any hashlib algorithm name is accepted.
    """

    digest: bytes
    algorithm: str = "sha256"

    def __post_init__(self) -> None:
        if not self.digest:
            raise ValueError("digest must not be empty")

    @classmethod
    def compute(cls, data: bytes, algorithm: str = "sha256") -> ContentHash:
        """
        Hash the whole payload.

        Complexity: O(n) where n is len(data)
        """
        return cls(digest=hashlib.new(algorithm, data).digest(), algorithm=algorithm)

    @classmethod
    def from_hex(cls, hex_str: str, algorithm: str = "sha256") -> Result[ContentHash, str]:
        """Parse from hexadecimal string representation."""
        try:
            return Ok(cls(digest=bytes.fromhex(hex_str), algorithm=algorithm))
        except ValueError as e:
            return Err(f"Invalid hex string: {e}")

    def to_hex(self) -> str:
        """Lowercase hexadecimal form."""
        return self.digest.hex()

    def __str__(self) -> str:
        return self.to_hex()


# =============================================================================
# OBJECT REFERENCE
# =============================================================================
@dataclass(frozen=True, slots=True)
class Reference:
    """
    Location of a stored object, broken down by container, path and name.

    For container "my-bucket", path "some/path/within" and name
    "an-object.json" the object lives at
    ``s3://my-bucket/some/path/within/an-object.json``.

    Invariant: all three fields are non-empty strings.
    """

    container: str
    path: str
    name: str

    def __post_init__(self) -> None:
        for field_name in ("container", "path", "name"):
            value = getattr(self, field_name)
            if not isinstance(value, str) or not value:
                raise ValueError(f"Reference.{field_name} must be a non-empty string, got {value!r}")

    @property
    def key(self) -> str:
        """Physical object key within the container."""
        return join_key(self.path, self.name)

    @property
    def uri(self) -> str:
        return f"s3://{self.container}/{self.key}"

    def to_dict(self) -> dict[str, str]:
        """Serialize to the three-field record used on the wire."""
        return {
            "bucket": self.container,
            "path": self.path,
            "object": self.name,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Result[Reference, str]:
        """
        Parse a serialized reference.

        Accepts either the wire names (bucket/path/object) or the
        attribute names (container/path/name).
        """
        container = data.get("bucket", data.get("container"))
        name = data.get("object", data.get("name"))
        try:
            return Ok(cls(container=container, path=data.get("path"), name=name))
        except ValueError as e:
            return Err(f"Invalid reference: {e}")

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, text: str) -> Result[Reference, str]:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            return Err(f"Invalid reference JSON: {e}")
        if not isinstance(data, dict):
            return Err(f"Reference JSON must be an object, got {type(data).__name__}")
        return cls.from_dict(data)

    def __str__(self) -> str:
        return self.uri
