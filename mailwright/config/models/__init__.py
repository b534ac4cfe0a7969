"""Configuration model exports.

    from mailwright.config.models import MergeConfig, ReconciliationConfig
"""

from mailwright.config.models.merge import MergeConfig, SchemaConfig
from mailwright.config.models.observability import (
    LoggingConfig,
    MetricsConfig,
    ObservabilityConfig,
)
from mailwright.config.models.reconciliation import InjectionConfig, ReconciliationConfig
from mailwright.config.models.storage import StorageConfig

__all__ = [
    # Merge
    "MergeConfig",
    "SchemaConfig",
    # Reconciliation
    "ReconciliationConfig",
    "InjectionConfig",
    # Storage
    "StorageConfig",
    # Observability
    "LoggingConfig",
    "MetricsConfig",
    "ObservabilityConfig",
]
