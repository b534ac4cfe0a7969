"""Redis implementation of IdMapStore.

Key structure:
- {prefix}:idmap:{tenant_id} - hash of taxonomy path -> remote id
- {prefix}:result:{tenant_id} - JSON of the most recent ReconciliationResult
"""

from collections.abc import Mapping

import redis.asyncio as redis

from mailwright.observability.logging import get_logger
from mailwright.reconciliation.models import ReconciliationResult
from mailwright.reconciliation.stores.base import IdMapStore

logger = get_logger(__name__)


def _text(value: bytes | str) -> str:
    return value.decode() if isinstance(value, bytes) else value


class RedisIdMapStore(IdMapStore):
    """Redis-backed id map store.

    HSET merges field by field, so concurrent writers for different tenants
    never interfere and a partial map only ever adds or updates paths.
    """

    def __init__(self, client: redis.Redis, key_prefix: str = "mailwright") -> None:
        """Initialize Redis id map store.

        Args:
            client: Redis client instance
            key_prefix: Prefix for all keys
        """
        self._client = client
        self._prefix = key_prefix

    def _map_key(self, tenant_id: str) -> str:
        return f"{self._prefix}:idmap:{tenant_id}"

    def _result_key(self, tenant_id: str) -> str:
        return f"{self._prefix}:result:{tenant_id}"

    async def get_id_map(self, tenant_id: str) -> dict[str, str]:
        raw = await self._client.hgetall(self._map_key(tenant_id))
        return {_text(k): _text(v) for k, v in raw.items()}

    async def merge_id_map(self, tenant_id: str, mapping: Mapping[str, str]) -> dict[str, str]:
        if mapping:
            await self._client.hset(self._map_key(tenant_id), mapping=dict(mapping))
        merged = await self.get_id_map(tenant_id)
        logger.debug(
            "id_map_merged",
            tenant_id=tenant_id,
            updated=len(mapping),
            total=len(merged),
        )
        return merged

    async def save_result(self, result: ReconciliationResult) -> None:
        await self._client.set(self._result_key(result.tenant_id), result.model_dump_json())

    async def get_last_result(self, tenant_id: str) -> ReconciliationResult | None:
        data = await self._client.get(self._result_key(tenant_id))
        if not data:
            return None
        return ReconciliationResult.model_validate_json(data)
