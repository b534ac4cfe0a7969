"""Unit tests for configuration Pydantic models."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from mailwright.config.models import (
    InjectionConfig,
    LoggingConfig,
    MergeConfig,
    MetricsConfig,
    ObservabilityConfig,
    ReconciliationConfig,
    SchemaConfig,
    StorageConfig,
)


class TestMergeConfig:
    """Tests for MergeConfig model."""

    def test_defaults(self) -> None:
        config = MergeConfig()
        assert config.max_tone_descriptors == 4
        assert config.max_override_examples == 3
        assert config.max_follow_up_phrases == 6
        assert config.default_min_confidence == 0.75
        assert config.fallback_category == "default"

    def test_caps_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            MergeConfig(max_tone_descriptors=0)
        with pytest.raises(ValidationError):
            MergeConfig(max_override_examples=0)

    def test_follow_up_cap_can_be_zero(self) -> None:
        assert MergeConfig(max_follow_up_phrases=0).max_follow_up_phrases == 0

    def test_confidence_bounds(self) -> None:
        with pytest.raises(ValidationError):
            MergeConfig(default_min_confidence=1.5)


class TestSchemaConfig:
    def test_schema_dir_coerced_to_path(self) -> None:
        config = SchemaConfig(schema_dir="/srv/schemas")
        assert config.schema_dir == Path("/srv/schemas")


class TestReconciliationConfig:
    """Tests for ReconciliationConfig model."""

    def test_defaults(self) -> None:
        config = ReconciliationConfig()
        assert config.max_attempts == 4
        assert config.backoff_base_seconds == 0.5
        assert config.backoff_max_seconds == 8.0
        assert config.max_concurrency == 3
        assert config.lock_timeout == 300
        assert config.default_timeout_seconds == 120.0

    def test_max_attempts_bounds(self) -> None:
        with pytest.raises(ValidationError):
            ReconciliationConfig(max_attempts=0)
        with pytest.raises(ValidationError):
            ReconciliationConfig(max_attempts=11)

    def test_concurrency_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            ReconciliationConfig(max_concurrency=0)

    def test_timeout_can_be_unbounded(self) -> None:
        assert ReconciliationConfig(default_timeout_seconds=None).default_timeout_seconds is None

    def test_timeout_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            ReconciliationConfig(default_timeout_seconds=0)


class TestInjectionConfig:
    def test_defaults(self) -> None:
        config = InjectionConfig()
        assert config.empty_marker == "__UNSET__"
        assert config.escape == "json"

    def test_invalid_escape_rejected(self) -> None:
        with pytest.raises(ValidationError):
            InjectionConfig(escape="xml")


class TestStorageConfig:
    """Tests for StorageConfig model."""

    def test_defaults(self) -> None:
        config = StorageConfig()
        assert config.backend == "inmemory"
        assert config.connection_url is None
        assert config.key_prefix == "mailwright"

    def test_valid_backends(self) -> None:
        for backend in ["inmemory", "redis"]:
            assert StorageConfig(backend=backend).backend == backend

    def test_invalid_backend_rejected(self) -> None:
        with pytest.raises(ValidationError):
            StorageConfig(backend="postgres")


class TestObservabilityConfig:
    """Tests for observability models."""

    def test_logging_defaults(self) -> None:
        config = LoggingConfig()
        assert config.level == "INFO"
        assert config.format == "json"
        assert config.redact_pii is True

    def test_invalid_log_level_rejected(self) -> None:
        with pytest.raises(ValidationError):
            LoggingConfig(level="TRACE")

    def test_metrics_port_range(self) -> None:
        with pytest.raises(ValidationError):
            MetricsConfig(port=0)
        with pytest.raises(ValidationError):
            MetricsConfig(port=65536)

    def test_nested_from_dict(self) -> None:
        config = ObservabilityConfig(logging={"format": "console"}, metrics={"enabled": False})
        assert config.logging.format == "console"
        assert config.metrics.enabled is False
