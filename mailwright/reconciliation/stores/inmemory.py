"""In-memory implementation of IdMapStore."""

from collections.abc import Mapping

from mailwright.reconciliation.models import ReconciliationResult
from mailwright.reconciliation.stores.base import IdMapStore


class InMemoryIdMapStore(IdMapStore):
    """In-memory implementation of IdMapStore for testing and development.

    Uses simple dict storage. Not suitable for production use.
    """

    def __init__(self) -> None:
        self._id_maps: dict[str, dict[str, str]] = {}
        self._results: dict[str, ReconciliationResult] = {}

    async def get_id_map(self, tenant_id: str) -> dict[str, str]:
        return dict(self._id_maps.get(tenant_id, {}))

    async def merge_id_map(self, tenant_id: str, mapping: Mapping[str, str]) -> dict[str, str]:
        merged = self._id_maps.setdefault(tenant_id, {})
        merged.update(mapping)
        return dict(merged)

    async def save_result(self, result: ReconciliationResult) -> None:
        self._results[result.tenant_id] = result.model_copy(deep=True)

    async def get_last_result(self, tenant_id: str) -> ReconciliationResult | None:
        result = self._results.get(tenant_id)
        return result.model_copy(deep=True) if result else None
