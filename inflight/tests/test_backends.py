"""
Unit Tests: Local Storage Clients

Tests:
    - In-memory put/get, fault injection, classification
    - Filesystem put/get, atomic replace, container confinement
"""

import errno

import pytest

from inflight.core.errors import PermanentTransportError
from inflight.storage.backends import (
    FileSystemStorageClient,
    InMemoryStorageClient,
    ObjectNotFoundError,
)
from inflight.storage.inflight import Inflight
from inflight.storage.protocols import StorageClient


class TestInMemoryStorageClient:
    """Tests for InMemoryStorageClient."""

    def test_put_get(self):
        """Test stored bytes and content type come back."""
        client = InMemoryStorageClient()
        client.put_object("bucket", "a/b", b"data", "text/plain")

        body = client.get_object("bucket", "a/b")
        assert body.read() == b"data"
        assert client.content_type("bucket", "a/b") == "text/plain"

    def test_containers_are_separate(self):
        """Test objects are scoped to their container."""
        client = InMemoryStorageClient()
        client.put_object("one", "k", b"1", "binary/octet-stream")

        with pytest.raises(ObjectNotFoundError):
            client.get_object("two", "k")
        assert client.keys("two") == []

    def test_missing_object(self):
        """Test missing objects raise a permanent ObjectNotFoundError."""
        client = InMemoryStorageClient()
        with pytest.raises(ObjectNotFoundError) as exc_info:
            client.get_object("bucket", "nope")
        assert exc_info.value.key == "nope"
        assert not client.is_retryable(exc_info.value)

    def test_injected_failures_consumed_in_order(self):
        """Test queued faults fire once each, then calls succeed."""
        client = InMemoryStorageClient()
        client.inject_failure("put", TimeoutError("slow"), times=2)

        for _ in range(2):
            with pytest.raises(TimeoutError):
                client.put_object("bucket", "k", b"x", "binary/octet-stream")
        client.put_object("bucket", "k", b"x", "binary/octet-stream")

        assert client.calls["put"] == 3
        assert client.keys("bucket") == ["k"]

    def test_inject_unknown_operation(self):
        """Test fault injection rejects unknown operations."""
        with pytest.raises(ValueError):
            InMemoryStorageClient().inject_failure("delete", TimeoutError())

    def test_classification(self):
        """Test timeouts and connection errors are the only retryable ones."""
        client = InMemoryStorageClient()
        assert client.is_retryable(TimeoutError())
        assert client.is_retryable(ConnectionResetError())
        assert not client.is_retryable(PermissionError())
        assert not client.is_retryable(ValueError())

    def test_satisfies_protocol(self):
        """Test structural conformance to StorageClient."""
        assert isinstance(InMemoryStorageClient(), StorageClient)


class TestFileSystemStorageClient:
    """Tests for FileSystemStorageClient."""

    def test_put_get(self, tmp_path):
        """Test objects land at root/container/key."""
        client = FileSystemStorageClient(tmp_path)
        client.put_object("bucket", "key/path/obj", b"payload", "binary/octet-stream")

        assert (tmp_path / "bucket" / "key" / "path" / "obj").read_bytes() == b"payload"
        with client.get_object("bucket", "key/path/obj") as body:
            assert body.read() == b"payload"

    def test_overwrite(self, tmp_path):
        """Test rewriting a key replaces it without leftover temp files."""
        client = FileSystemStorageClient(tmp_path)
        client.put_object("bucket", "obj", b"old", "binary/octet-stream")
        client.put_object("bucket", "obj", b"new", "binary/octet-stream")

        with client.get_object("bucket", "obj") as body:
            assert body.read() == b"new"
        assert [p.name for p in (tmp_path / "bucket").iterdir()] == ["obj"]

    def test_creates_root(self, tmp_path):
        """Test the root directory is created on construction."""
        root = tmp_path / "nested" / "root"
        FileSystemStorageClient(root)
        assert root.is_dir()

    def test_missing_object_not_retryable(self, tmp_path):
        """Test a missing file is a permanent failure."""
        client = FileSystemStorageClient(tmp_path)
        with pytest.raises(FileNotFoundError) as exc_info:
            client.get_object("bucket", "missing")
        assert not client.is_retryable(exc_info.value)

    @pytest.mark.parametrize("code", [errno.EAGAIN, errno.EINTR, errno.EBUSY, errno.ETIMEDOUT])
    def test_transient_errnos_retryable(self, tmp_path, code):
        """Test transient errnos are retryable."""
        client = FileSystemStorageClient(tmp_path)
        assert client.is_retryable(OSError(code, "transient"))

    def test_non_os_errors_not_retryable(self, tmp_path):
        """Test non-OSError failures are permanent."""
        assert not FileSystemStorageClient(tmp_path).is_retryable(ValueError("x"))

    def test_dot_segments_inside_container_allowed(self, tmp_path):
        """Test keys normalizing to a path inside the container still work."""
        client = FileSystemStorageClient(tmp_path)
        client.put_object("bucket", "a/../b//obj", b"x", "binary/octet-stream")
        assert (tmp_path / "bucket" / "b" / "obj").read_bytes() == b"x"


class TestContainerConfinement:
    """Tests that filesystem keys cannot leave their container."""

    def test_get_cannot_reach_sibling_container(self, tmp_path):
        """Test a dot-dot key does not read another container's object."""
        client = FileSystemStorageClient(tmp_path)
        client.put_object("other", "secret", b"other-container-data", "binary/octet-stream")

        with pytest.raises(ValueError):
            client.get_object("mine", "../other/secret")

    def test_put_cannot_reach_sibling_container(self, tmp_path):
        """Test a dot-dot key does not overwrite another container's object."""
        client = FileSystemStorageClient(tmp_path)
        client.put_object("other", "secret", b"original", "binary/octet-stream")

        with pytest.raises(ValueError):
            client.put_object("mine", "../other/secret", b"clobbered", "binary/octet-stream")
        assert (tmp_path / "other" / "secret").read_bytes() == b"original"

    @pytest.mark.parametrize("key", ["..", "../outside", "a/../../outside", "/abs/path", "", "."])
    def test_escaping_keys_rejected(self, tmp_path, key):
        """Test keys resolving outside the container are rejected."""
        client = FileSystemStorageClient(tmp_path / "root")
        with pytest.raises(ValueError):
            client.put_object("bucket", key, b"x", "binary/octet-stream")

    @pytest.mark.parametrize("container", ["", ".", "..", "a/b", "..\\up"])
    def test_invalid_containers_rejected(self, tmp_path, container):
        """Test containers must be a single path segment."""
        client = FileSystemStorageClient(tmp_path / "root")
        with pytest.raises(ValueError):
            client.put_object(container, "obj", b"x", "binary/octet-stream")

    def test_facade_read_stays_in_container(self, tmp_path):
        """Test a facade read with a dot-dot name fails permanently."""
        client = FileSystemStorageClient(tmp_path)
        client.put_object("other", "secret", b"other-container-data", "binary/octet-stream")
        sleeps = []

        result = Inflight("mine", "p", client, sleep=sleeps.append).read("../../other/secret")

        assert isinstance(result.error, PermanentTransportError)
        assert isinstance(result.error.cause, ValueError)
        assert result.unwrap_or(b"") == b""
        assert sleeps == []
