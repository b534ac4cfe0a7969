"""Reconciliation of merged taxonomies against remote mailboxes."""

from mailwright.reconciliation.factory import build_id_map_store, build_tenant_lock
from mailwright.reconciliation.locks import InMemoryTenantLock, RedisTenantLock, TenantLock
from mailwright.reconciliation.models import (
    NodeFailure,
    NodeOutcome,
    NodeState,
    ReconciliationResult,
    RemoteNode,
)
from mailwright.reconciliation.provider import (
    CredentialSupplier,
    StaticCredentialSupplier,
    TaxonomyProvider,
)
from mailwright.reconciliation.reconciler import RemoteTaxonomyReconciler

__all__ = [
    "CredentialSupplier",
    "InMemoryTenantLock",
    "NodeFailure",
    "NodeOutcome",
    "NodeState",
    "ReconciliationResult",
    "RedisTenantLock",
    "RemoteNode",
    "RemoteTaxonomyReconciler",
    "StaticCredentialSupplier",
    "TaxonomyProvider",
    "TenantLock",
    "build_id_map_store",
    "build_tenant_lock",
]
