"""End-to-end onboarding deployment.

merge (fail closed) -> reconcile -> read persisted id map -> build values
-> inject. Partial reconciliation failures do not block injection: paths
without an id receive the empty marker, and the report tells the caller
which categories to retry.
"""

from collections.abc import Iterable

import redis.asyncio as redis
from pydantic import BaseModel, Field

from mailwright.config import Settings, get_settings
from mailwright.injection.injector import InjectionResult, PlaceholderInjector
from mailwright.injection.values import build_placeholder_values
from mailwright.merging.models import (
    AmbiguousIntentWarning,
    BehaviorEntryMissingWarning,
    ColorConflictWarning,
    TenantProfile,
)
from mailwright.merging.pipeline import ConfigurationMerger
from mailwright.observability.logging import bind_tenant, clear_tenant, get_logger, setup_logging
from mailwright.observability.metrics import setup_metrics
from mailwright.reconciliation.factory import build_id_map_store, build_tenant_lock
from mailwright.reconciliation.models import ReconciliationResult
from mailwright.reconciliation.provider import TaxonomyProvider
from mailwright.reconciliation.reconciler import RemoteTaxonomyReconciler
from mailwright.schemas.repository import SchemaRepository

logger = get_logger(__name__)


class CategoryStatus(BaseModel):
    path: str
    status: str = Field(..., description="created, reused, failed or skipped")
    remote_id: str | None = None
    reason: str | None = None
    retry_suggested: bool = False


class DeploymentReport(BaseModel):
    tenant_id: str
    business_types: list[str]
    document: str
    configuration_checksum: str
    reconciliation: ReconciliationResult
    injection: InjectionResult
    warnings: list[
        AmbiguousIntentWarning | ColorConflictWarning | BehaviorEntryMissingWarning
    ] = Field(default_factory=list)

    def category_report(self) -> list[CategoryStatus]:
        """Per-category outcome: created, reused from remote state, or failed."""
        result = self.reconciliation
        statuses = [
            CategoryStatus(path=o.name, status="created", remote_id=o.id) for o in result.created
        ]
        statuses.extend(
            CategoryStatus(path=o.name, status="reused", remote_id=o.id) for o in result.matched
        )
        statuses.extend(
            CategoryStatus(
                path=f.name, status="failed", reason=f.reason, retry_suggested=f.retriable
            )
            for f in result.failed
        )
        statuses.extend(
            CategoryStatus(
                path=f.name, status="skipped", reason=f.reason, retry_suggested=f.retriable
            )
            for f in result.skipped
        )
        return sorted(statuses, key=lambda s: s.path)

    @property
    def retry_suggested(self) -> bool:
        return any(s.retry_suggested for s in self.category_report())


class OnboardingDeployer:
    """Runs the full onboarding pipeline for one tenant."""

    def __init__(
        self,
        merger: ConfigurationMerger,
        reconciler: RemoteTaxonomyReconciler,
        injector: PlaceholderInjector,
    ) -> None:
        self._merger = merger
        self._reconciler = reconciler
        self._injector = injector

    async def deploy(
        self,
        tenant_id: str,
        business_types: Iterable[str],
        template: str,
        tenant: TenantProfile | None = None,
        timeout: float | None = None,
    ) -> DeploymentReport:
        """Produce the resolved template for a tenant.

        Raises:
            SchemaNotFoundError: Unknown business type
            IntentTargetMissingError: Merged layers are inconsistent; nothing
                is sent to the remote provider
            ReconciliationInProgressError: Another run holds the tenant lock
            RemoteProviderError: The remote snapshot could not be fetched
            UnresolvedPlaceholderError: The template has malformed placeholders
        """
        bind_tenant(tenant_id)
        try:
            configuration = self._merger.merge(business_types, tenant)
            reconciliation = await self._reconciler.reconcile(
                tenant_id, configuration.taxonomy, timeout=timeout
            )
            id_map = await self._reconciler.store.get_id_map(tenant_id)
            values = build_placeholder_values(configuration, id_map, tenant)
            injection = self._injector.inject(template, values)

            report = DeploymentReport(
                tenant_id=tenant_id,
                business_types=configuration.business_types,
                document=injection.document,
                configuration_checksum=configuration.checksum(),
                reconciliation=reconciliation,
                injection=injection,
                warnings=configuration.warnings,
            )
            logger.info(
                "deployment_completed",
                business_types=configuration.business_types,
                checksum=report.configuration_checksum,
                missing_placeholders=len(injection.missing),
                retry_suggested=report.retry_suggested,
                **reconciliation.summary(),
            )
            return report
        finally:
            clear_tenant()


def create_deployer(
    provider: TaxonomyProvider,
    settings: Settings | None = None,
    redis_client: redis.Redis | None = None,
    start_metrics_server: bool = False,
) -> OnboardingDeployer:
    """Wire an OnboardingDeployer from configuration.

    Args:
        provider: Remote taxonomy provider for the tenant's mailbox
        settings: Settings to use (defaults to get_settings())
        redis_client: Shared redis client for the redis storage backend
        start_metrics_server: Expose Prometheus metrics if enabled in settings
    """
    settings = settings or get_settings()

    log_config = settings.observability.logging
    setup_logging(
        level=log_config.level,
        format=log_config.format,
        redact_pii=log_config.redact_pii,
    )
    if start_metrics_server and settings.observability.metrics.enabled:
        setup_metrics(settings.observability.metrics.port)

    repository = SchemaRepository(settings.schemas.schema_dir)
    reconciler = RemoteTaxonomyReconciler(
        provider,
        build_id_map_store(settings.storage, redis_client),
        build_tenant_lock(settings.storage, settings.reconciliation, redis_client),
        settings.reconciliation,
    )
    injector = PlaceholderInjector(
        empty_marker=settings.injection.empty_marker,
        escape=settings.injection.escape,
    )
    logger.debug(
        "deployer_created",
        provider=provider.provider_name,
        storage_backend=settings.storage.backend,
    )
    return OnboardingDeployer(ConfigurationMerger(repository, settings.merge), reconciler, injector)
