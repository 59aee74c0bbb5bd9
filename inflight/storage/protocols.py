"""
Storage Client Protocols: the Narrow Capability the Facade Depends On

Structural subtyping protocols (PEP 544) for pluggable storage clients.
The facade needs exactly three things from a backend SDK:
- put an object
- get an object body
- say whether a raised failure is worth retrying

Design Principles:
    - Clients raise on failure; the transfer policy turns raised errors
      into Result values
    - Retryability is the client's call, never a fixed allow-list
    - Bodies are released by the caller, exactly once
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class ObjectBody(Protocol):
    """Response stream returned by ``get_object``."""

    def read(self) -> bytes:
        """Drain the remaining bytes."""
        ...

    def close(self) -> None:
        """Release the underlying connection or file handle."""
        ...


@runtime_checkable
class StorageClient(Protocol):
    """
    Object storage capability.

    Example:
        class MyClient:
            def put_object(self, container, key, body, content_type): ...
            def get_object(self, container, key): ...
            def is_retryable(self, error): ...

        assert isinstance(MyClient(), StorageClient)
    """

    def put_object(
        self,
        container: str,
        key: str,
        body: bytes,
        content_type: str,
    ) -> None:
        """Store ``body`` at ``container/key``, overwriting any existing object."""
        ...

    def get_object(self, container: str, key: str) -> ObjectBody:
        """Open the object at ``container/key`` for reading."""
        ...

    def is_retryable(self, error: BaseException) -> bool:
        """Whether ``error`` raised by this client is transient."""
        ...
