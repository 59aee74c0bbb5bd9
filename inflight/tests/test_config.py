"""
Unit Tests: Configuration

Tests:
    - Defaults
    - INFLIGHT_* environment loading
    - Validation failures
"""

from dataclasses import replace
from pathlib import Path

import pytest

from inflight.core.config import (
    InflightConfig,
    ObjectStoreConfig,
    ObservabilityConfig,
    ReliabilityConfig,
    S3Config,
)


class TestDefaults:
    """Tests for default configuration."""

    def test_defaults_validate(self):
        """Test default configuration passes validation."""
        config = InflightConfig()
        assert config.validate().is_ok()
        assert config.object_store.content_type == "binary/octet-stream"
        assert config.object_store.hash_algorithm == "sha256"
        assert config.s3.sdk_max_attempts == 1

    def test_empty_environment_gives_defaults(self):
        """Test an empty environment yields the defaults."""
        assert InflightConfig.from_env({}).unwrap() == InflightConfig()

    def test_frozen(self):
        """Test configuration is immutable."""
        with pytest.raises(AttributeError):
            InflightConfig().object_store.container = "other"


class TestFromEnv:
    """Tests for environment loading."""

    def test_object_store(self):
        """Test object store variables, lower-casing enum values."""
        config = InflightConfig.from_env({
            "INFLIGHT_BACKEND": "FileSystem",
            "INFLIGHT_CONTAINER": "my-bucket",
            "INFLIGHT_PATH": "jobs/inputs",
            "INFLIGHT_NAMING": "random",
            "INFLIGHT_HASH_ALGORITHM": "MD5",
            "INFLIGHT_DATA_DIR": "/var/lib/inflight",
        }).unwrap()

        store = config.object_store
        assert store.backend == "filesystem"
        assert (store.container, store.path) == ("my-bucket", "jobs/inputs")
        assert store.naming == "random"
        assert store.hash_algorithm == "md5"
        assert store.data_dir == Path("/var/lib/inflight")

    def test_s3(self):
        """Test S3 variables; empty strings become None."""
        config = InflightConfig.from_env({
            "INFLIGHT_S3_ENDPOINT_URL": "http://localhost:9000",
            "INFLIGHT_S3_ACCESS_KEY_ID": "minio",
            "INFLIGHT_S3_SECRET_ACCESS_KEY": "minio123",
            "INFLIGHT_S3_SESSION_TOKEN": "",
            "INFLIGHT_S3_READ_TIMEOUT": "30",
            "INFLIGHT_S3_VERIFY_SSL": "no",
        }).unwrap()

        assert config.s3.endpoint_url == "http://localhost:9000"
        assert config.s3.access_key_id == "minio"
        assert config.s3.session_token is None
        assert config.s3.read_timeout_seconds == 30
        assert config.s3.verify_ssl is False

    def test_reliability(self):
        """Test retry variables, including "none" bounds."""
        rel = InflightConfig.from_env({
            "INFLIGHT_RETRY_BASE_MS": "250",
            "INFLIGHT_RETRY_EXPONENTIAL_BASE": "1.5",
            "INFLIGHT_RETRY_JITTER": "off",
            "INFLIGHT_RETRY_MAX_RETRIES": "none",
            "INFLIGHT_RETRY_MAX_ELAPSED_MS": "None",
        }).unwrap().reliability

        assert rel.retry_base_ms == 250
        assert rel.retry_exponential_base == 1.5
        assert rel.retry_jitter is False
        assert rel.retry_max_retries is None
        assert rel.retry_max_elapsed_ms is None

    def test_log_level_upper_cased(self):
        """Test log level names are upper-cased."""
        config = InflightConfig.from_env({"INFLIGHT_LOG_LEVEL": "debug"}).unwrap()
        assert config.observability.log_level == "DEBUG"

    def test_reads_process_environment(self, monkeypatch):
        """Test os.environ is used when no mapping is given."""
        monkeypatch.setenv("INFLIGHT_CONTAINER", "from-env")
        assert InflightConfig.from_env().unwrap().object_store.container == "from-env"

    @pytest.mark.parametrize("name,value", [
        ("INFLIGHT_RETRY_MAX_RETRIES", "many"),
        ("INFLIGHT_RETRY_BASE_MS", "1.5"),
        ("INFLIGHT_RETRY_JITTER", "maybe"),
        ("INFLIGHT_S3_CONNECT_TIMEOUT", ""),
    ])
    def test_malformed_values(self, name, value):
        """Test unparsable values return Err."""
        result = InflightConfig.from_env({name: value})
        assert result.is_err()
        assert result.error.startswith("Configuration error")


class TestValidate:
    """Tests for InflightConfig.validate."""

    @pytest.mark.parametrize("config", [
        InflightConfig(object_store=ObjectStoreConfig(backend="ftp")),
        InflightConfig(object_store=ObjectStoreConfig(container="")),
        InflightConfig(object_store=ObjectStoreConfig(path="")),
        InflightConfig(object_store=ObjectStoreConfig(naming="sequential")),
        InflightConfig(object_store=ObjectStoreConfig(hash_algorithm="crc-nothing")),
        InflightConfig(reliability=ReliabilityConfig(retry_base_ms=-1)),
        InflightConfig(reliability=ReliabilityConfig(retry_base_ms=500, retry_max_delay_ms=100)),
        InflightConfig(reliability=ReliabilityConfig(retry_exponential_base=0.5)),
        InflightConfig(reliability=ReliabilityConfig(retry_max_retries=-1)),
        InflightConfig(reliability=ReliabilityConfig(retry_max_elapsed_ms=-1)),
        InflightConfig(s3=S3Config(sdk_max_attempts=0)),
        InflightConfig(observability=ObservabilityConfig(log_level="VERBOSE")),
    ])
    def test_invalid(self, config):
        """Test each invariant violation fails validation."""
        assert config.validate().is_err()

    def test_unbounded_retries_valid(self):
        """Test disabling both retry bounds is allowed."""
        config = replace(
            InflightConfig(),
            reliability=ReliabilityConfig(retry_max_retries=None, retry_max_elapsed_ms=None),
        )
        assert config.validate().is_ok()
