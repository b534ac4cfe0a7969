"""Tests for Prometheus metrics."""

import pytest
from prometheus_client import REGISTRY

from mailwright.errors import IntentTargetMissingError
from mailwright.injection.injector import PlaceholderInjector
from mailwright.merging.pipeline import ConfigurationMerger
from mailwright.observability.metrics import (
    MERGE_FAILURES,
    MERGE_LATENCY,
    PLACEHOLDERS_MISSING,
    PROVIDER_CALLS,
    PROVIDER_RETRIES,
    RECONCILED_NODES,
    RECONCILIATION_LATENCY,
    RECONCILIATION_TIMEOUTS,
)
from mailwright.schemas.repository import SchemaRepository
from tests.factories import SchemaDocFactory


def sample(name: str, labels: dict[str, str] | None = None) -> float:
    return REGISTRY.get_sample_value(name, labels or {}) or 0.0


class TestDefinitions:
    @pytest.mark.parametrize(
        "metric",
        [
            MERGE_FAILURES,
            MERGE_LATENCY,
            PLACEHOLDERS_MISSING,
            PROVIDER_CALLS,
            PROVIDER_RETRIES,
            RECONCILED_NODES,
            RECONCILIATION_LATENCY,
            RECONCILIATION_TIMEOUTS,
        ],
    )
    def test_registered(self, metric) -> None:
        assert metric._name.startswith("mailwright_")


class TestRecording:
    """Metrics move when the instrumented code runs."""

    def test_merge_failure_counted(self) -> None:
        repository = SchemaRepository.from_documents(
            SchemaDocFactory.business_type(
                "Electrician", nodes=[{"name": "Urgent"}], intent_map={"x": "Missing"}
            )
        )
        labels = {"reason": "intent_target_missing"}
        before = sample("mailwright_merge_failures_total", labels)

        with pytest.raises(IntentTargetMissingError):
            ConfigurationMerger(repository).merge(["Electrician"])

        assert sample("mailwright_merge_failures_total", labels) == before + 1

    def test_merge_latency_observed(self, trade_repository) -> None:
        labels = {"business_type_count": "2"}
        before = sample("mailwright_merge_latency_seconds_count", labels)

        ConfigurationMerger(trade_repository).merge(["Electrician", "Plumber"])

        assert sample("mailwright_merge_latency_seconds_count", labels) == before + 1

    def test_missing_placeholder_counted(self) -> None:
        before = sample("mailwright_placeholders_missing_total")

        PlaceholderInjector().inject("<<<A>>> <<<B>>> <<<A>>>", {})

        assert sample("mailwright_placeholders_missing_total") == before + 2
