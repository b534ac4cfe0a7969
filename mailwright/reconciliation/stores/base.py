"""IdMapStore abstract interface."""

from abc import ABC, abstractmethod
from collections.abc import Mapping

from mailwright.reconciliation.models import ReconciliationResult


class IdMapStore(ABC):
    """Abstract interface for per-tenant taxonomy id persistence.

    Stores the path -> remote id map built by reconciliation runs and the
    result of the most recent run. Maps are extended, never replaced, so a
    run that reconciles only part of the taxonomy cannot drop earlier ids.
    """

    @abstractmethod
    async def get_id_map(self, tenant_id: str) -> dict[str, str]:
        """Get the persisted path -> id map (empty if none)."""
        pass

    @abstractmethod
    async def merge_id_map(self, tenant_id: str, mapping: Mapping[str, str]) -> dict[str, str]:
        """Merge entries into the persisted map and return the merged map.

        Entries in `mapping` overwrite existing entries for the same path.
        """
        pass

    @abstractmethod
    async def save_result(self, result: ReconciliationResult) -> None:
        """Persist a run result as the tenant's most recent result."""
        pass

    @abstractmethod
    async def get_last_result(self, tenant_id: str) -> ReconciliationResult | None:
        pass
