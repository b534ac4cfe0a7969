"""Factories for reconciliation persistence backends.

Configuration comes from TOML (backend, key prefix). The redis connection
string comes from `storage.connection_url` or the REDIS_URL environment
variable.
"""

import os

import redis.asyncio as redis

from mailwright.config.models import ReconciliationConfig, StorageConfig
from mailwright.observability.logging import get_logger
from mailwright.reconciliation.locks import InMemoryTenantLock, RedisTenantLock, TenantLock
from mailwright.reconciliation.stores.base import IdMapStore
from mailwright.reconciliation.stores.inmemory import InMemoryIdMapStore
from mailwright.reconciliation.stores.redis import RedisIdMapStore

logger = get_logger(__name__)

DEFAULT_REDIS_URL = "redis://localhost:6379/0"


def create_redis_client(config: StorageConfig) -> redis.Redis:
    url = config.connection_url or os.environ.get("REDIS_URL", DEFAULT_REDIS_URL)
    return redis.from_url(url)


def build_id_map_store(
    config: StorageConfig,
    redis_client: redis.Redis | None = None,
) -> IdMapStore:
    """Create an IdMapStore for the configured backend.

    Raises:
        ValueError: If backend type is not supported
    """
    if config.backend == "inmemory":
        logger.info("creating_id_map_store", backend="inmemory")
        return InMemoryIdMapStore()

    if config.backend == "redis":
        logger.info("creating_id_map_store", backend="redis", prefix=config.key_prefix)
        return RedisIdMapStore(
            redis_client or create_redis_client(config),
            key_prefix=config.key_prefix,
        )

    raise ValueError(f"Unsupported id map store backend: {config.backend}")


def build_tenant_lock(
    config: StorageConfig,
    reconciliation: ReconciliationConfig | None = None,
    redis_client: redis.Redis | None = None,
) -> TenantLock:
    """Create a TenantLock for the configured backend.

    Raises:
        ValueError: If backend type is not supported
    """
    reconciliation = reconciliation or ReconciliationConfig()

    if config.backend == "inmemory":
        logger.info("creating_tenant_lock", backend="inmemory")
        return InMemoryTenantLock(blocking_timeout=reconciliation.lock_blocking_timeout)

    if config.backend == "redis":
        logger.info("creating_tenant_lock", backend="redis", prefix=config.key_prefix)
        return RedisTenantLock(
            redis_client or create_redis_client(config),
            lock_timeout=reconciliation.lock_timeout,
            blocking_timeout=reconciliation.lock_blocking_timeout,
            key_prefix=config.key_prefix,
        )

    raise ValueError(f"Unsupported tenant lock backend: {config.backend}")
