"""Prometheus metrics for mailwright.

Covers merge latency, reconciliation outcomes, provider traffic, and
placeholder injection gaps.
"""

from prometheus_client import Counter, Histogram, start_http_server

# Merge metrics
MERGE_LATENCY = Histogram(
    "mailwright_merge_latency_seconds",
    "Time to load, merge, and validate a configuration",
    labelnames=["business_type_count"],
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0),
)

MERGE_FAILURES = Counter(
    "mailwright_merge_failures_total",
    "Merges rejected by cross-layer validation",
    labelnames=["reason"],
)

# Reconciliation metrics
RECONCILED_NODES = Counter(
    "mailwright_reconciled_nodes_total",
    "Taxonomy nodes by terminal reconciliation state",
    labelnames=["provider", "state"],
)

RECONCILIATION_LATENCY = Histogram(
    "mailwright_reconciliation_latency_seconds",
    "Duration of a reconciliation run",
    labelnames=["provider"],
    buckets=(0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0),
)

RECONCILIATION_TIMEOUTS = Counter(
    "mailwright_reconciliation_timeouts_total",
    "Reconciliation runs stopped by their deadline",
    labelnames=["provider"],
)

# Provider metrics
PROVIDER_CALLS = Counter(
    "mailwright_provider_calls_total",
    "Remote taxonomy provider calls",
    labelnames=["provider", "operation", "status"],
)

PROVIDER_RETRIES = Counter(
    "mailwright_provider_retries_total",
    "Retries after retriable provider errors",
    labelnames=["provider", "operation"],
)

# Injection metrics
PLACEHOLDERS_MISSING = Counter(
    "mailwright_placeholders_missing_total",
    "Placeholders substituted with the empty marker",
)


def setup_metrics(port: int = 9090) -> None:
    """Expose the default registry over HTTP."""
    start_http_server(port)
