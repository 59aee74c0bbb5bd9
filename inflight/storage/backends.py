"""
Storage Backends: In-Memory and FileSystem Storage Clients

Both implement the StorageClient protocol without network access:
- InMemoryStorageClient: dict-backed, with fault injection for
  exercising the transfer policy
- FileSystemStorageClient: objects stored at {root}/{container}/{key}
"""

from __future__ import annotations

import errno
import io
import logging
import os
import tempfile
import threading
from collections import defaultdict, deque
from pathlib import Path
from typing import BinaryIO, Deque, Dict, List, Optional, Tuple

from inflight.core.types import join_key

logger = logging.getLogger(__name__)


class ObjectNotFoundError(LookupError):
    """No object stored at container/key."""

    def __init__(self, container: str, key: str) -> None:
        super().__init__(f"No such object: {container}/{key}")
        self.container = container
        self.key = key


# =============================================================================
# IN-MEMORY CLIENT
# =============================================================================
class InMemoryStorageClient:
    """
    In-memory object store.

    Thread-safe. TimeoutError and ConnectionError are treated as
    retryable; everything else, including ObjectNotFoundError, is
    permanent.

    Example:
        client = InMemoryStorageClient()
        client.inject_failure("put", TimeoutError("request timeout"))
        client.put_object("bucket", "a/b", b"data", "binary/octet-stream")  # raises
        client.put_object("bucket", "a/b", b"data", "binary/octet-stream")  # stores
    """

    __slots__ = ("_objects", "_content_types", "_faults", "_lock", "calls")

    def __init__(self) -> None:
        self._objects: Dict[Tuple[str, str], bytes] = {}
        self._content_types: Dict[Tuple[str, str], str] = {}
        self._faults: Dict[str, Deque[BaseException]] = defaultdict(deque)
        self._lock = threading.Lock()
        self.calls: Dict[str, int] = {"put": 0, "get": 0}

    def inject_failure(self, operation: str, error: BaseException, times: int = 1) -> None:
        """Make the next ``times`` calls of ``operation`` ("put"/"get") raise ``error``."""
        if operation not in self.calls:
            raise ValueError(f"Unknown operation {operation!r}")
        with self._lock:
            self._faults[operation].extend([error] * times)

    def put_object(
        self,
        container: str,
        key: str,
        body: bytes,
        content_type: str,
    ) -> None:
        with self._lock:
            self.calls["put"] += 1
            self._raise_fault("put")
            self._objects[(container, key)] = bytes(body)
            self._content_types[(container, key)] = content_type

    def get_object(self, container: str, key: str) -> BinaryIO:
        with self._lock:
            self.calls["get"] += 1
            self._raise_fault("get")
            try:
                data = self._objects[(container, key)]
            except KeyError:
                raise ObjectNotFoundError(container, key) from None
        return io.BytesIO(data)

    def is_retryable(self, error: BaseException) -> bool:
        return isinstance(error, (TimeoutError, ConnectionError))

    def content_type(self, container: str, key: str) -> Optional[str]:
        with self._lock:
            return self._content_types.get((container, key))

    def keys(self, container: str) -> List[str]:
        with self._lock:
            return sorted(k for c, k in self._objects if c == container)

    def _raise_fault(self, operation: str) -> None:
        faults = self._faults[operation]
        if faults:
            raise faults.popleft()


# =============================================================================
# FILESYSTEM CLIENT
# =============================================================================
_TRANSIENT_ERRNOS = frozenset({
    errno.EAGAIN,
    errno.EINTR,
    errno.EBUSY,
    errno.ETIMEDOUT,
})


class FileSystemStorageClient:
    """
    Local filesystem storage client.

    Objects stored at: {root}/{container}/{key}
    Writes go to a temporary file in the target directory and are
    renamed into place, so readers never see a partial object.
    """

    __slots__ = ("_root",)

    def __init__(self, root: Path) -> None:
        self._root = Path(root)
        self._root.mkdir(parents=True, exist_ok=True)

    @property
    def root(self) -> Path:
        return self._root

    def _key_to_path(self, container: str, key: str) -> Path:
        """
        Map container/key to a file under the container's directory.

        Raises:
            ValueError: If the container is not a single path segment or
                the key resolves outside its container
        """
        if not container or container in (".", "..") or "/" in container or "\\" in container:
            raise ValueError(f"Invalid container name: {container!r}")

        normalized = join_key(key)
        if (
            not normalized
            or normalized == "."
            or normalized == ".."
            or normalized.startswith(("/", "../"))
        ):
            raise ValueError(f"Key escapes container {container!r}: {key!r}")
        return self._root / container / normalized

    def put_object(
        self,
        container: str,
        key: str,
        body: bytes,
        content_type: str,
    ) -> None:
        path = self._key_to_path(container, key)
        path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".inflight-")
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(body)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def get_object(self, container: str, key: str) -> BinaryIO:
        return open(self._key_to_path(container, key), "rb")

    def is_retryable(self, error: BaseException) -> bool:
        return isinstance(error, OSError) and error.errno in _TRANSIENT_ERRNOS
