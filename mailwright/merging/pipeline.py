"""Merge pipeline: load, merge the three layers, validate.

The pipeline fails closed. A configuration with an intent routed to a missing
category is never returned, so reconciliation cannot run against it.
"""

from collections.abc import Iterable

from mailwright.config.models import MergeConfig
from mailwright.errors import IntentTargetMissingError
from mailwright.merging.behavior import BehaviorMerger
from mailwright.merging.classification import ClassificationMerger
from mailwright.merging.models import MergedConfiguration, TenantProfile
from mailwright.merging.taxonomy import TaxonomyMerger
from mailwright.merging.validator import ConsistencyValidator
from mailwright.observability.logging import get_logger
from mailwright.observability.metrics import MERGE_FAILURES, MERGE_LATENCY
from mailwright.schemas.repository import SchemaRepository

logger = get_logger(__name__)


class ConfigurationMerger:
    """Produces a validated MergedConfiguration for a business type selection."""

    def __init__(
        self,
        repository: SchemaRepository,
        config: MergeConfig | None = None,
    ) -> None:
        self._repository = repository
        self._config = config or MergeConfig()
        self._classification = ClassificationMerger()
        self._behavior = BehaviorMerger(self._config)
        self._taxonomy = TaxonomyMerger()
        self._validator = ConsistencyValidator(self._config.fallback_category)

    def merge(
        self,
        business_types: Iterable[str],
        tenant: TenantProfile | None = None,
    ) -> MergedConfiguration:
        """Merge and validate the selection.

        Raises:
            SchemaNotFoundError: A business type has no document for a layer
            SchemaValidationError: A document is malformed
            IntentTargetMissingError: An intent targets a missing category
        """
        selection = self._repository.load_selection(business_types)

        with MERGE_LATENCY.labels(business_type_count=str(len(selection.business_types))).time():
            classification, intent_warnings = self._classification.merge(
                selection.classification, tenant
            )
            behavior = self._behavior.merge(selection.behavior)
            taxonomy, color_warnings = self._taxonomy.merge(selection.taxonomy, tenant)
            report = self._validator.validate(classification, behavior, taxonomy)

        try:
            report.raise_for_violations()
        except IntentTargetMissingError:
            MERGE_FAILURES.labels(reason="intent_target_missing").inc()
            logger.error(
                "configuration_rejected",
                business_types=selection.business_types,
                violations=len(report.violations),
            )
            raise

        warnings = [*intent_warnings, *color_warnings, *report.warnings]
        configuration = MergedConfiguration(
            business_types=selection.business_types,
            classification=classification,
            behavior=behavior,
            taxonomy=taxonomy,
            warnings=warnings,
        )

        logger.info(
            "configuration_merged",
            business_types=selection.business_types,
            node_count=taxonomy.node_count(),
            warnings=len(warnings),
            checksum=configuration.checksum(),
        )
        return configuration
