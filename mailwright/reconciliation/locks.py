"""Per-tenant mutual exclusion for reconciliation runs.

Two concurrent runs for one tenant would both see a node as missing and
create it twice, so a run holds the tenant lock for its whole duration.
"""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager, asynccontextmanager

from redis.asyncio import Redis
from redis.exceptions import LockError

from mailwright.errors import ReconciliationInProgressError
from mailwright.observability.logging import get_logger

logger = get_logger(__name__)


class TenantLock(ABC):
    """Abstract per-tenant lock."""

    def __init__(self, blocking_timeout: float = 5.0) -> None:
        self._blocking_timeout = blocking_timeout

    @abstractmethod
    def acquire(
        self,
        tenant_id: str,
        blocking_timeout: float | None = None,
    ) -> AbstractAsyncContextManager[None]:
        """Hold the tenant lock for the duration of the context.

        Raises:
            ReconciliationInProgressError: Lock not acquired within the timeout
        """
        pass

    @abstractmethod
    async def is_locked(self, tenant_id: str) -> bool:
        pass


class InMemoryTenantLock(TenantLock):
    """Process-local lock, one asyncio.Lock per tenant.

    Only suitable when a single process performs reconciliation.
    """

    def __init__(self, blocking_timeout: float = 5.0) -> None:
        super().__init__(blocking_timeout)
        self._locks: dict[str, asyncio.Lock] = {}

    @asynccontextmanager
    async def acquire(
        self,
        tenant_id: str,
        blocking_timeout: float | None = None,
    ) -> AsyncIterator[None]:
        lock = self._locks.setdefault(tenant_id, asyncio.Lock())
        timeout = blocking_timeout if blocking_timeout is not None else self._blocking_timeout
        try:
            await asyncio.wait_for(lock.acquire(), timeout=timeout)
        except TimeoutError as e:
            raise ReconciliationInProgressError(tenant_id) from e
        try:
            yield
        finally:
            lock.release()

    async def is_locked(self, tenant_id: str) -> bool:
        lock = self._locks.get(tenant_id)
        return lock is not None and lock.locked()


class RedisTenantLock(TenantLock):
    """Redis-backed distributed lock shared by every worker process.

    Lock key format: {prefix}:tenantlock:{tenant_id}
    """

    def __init__(
        self,
        redis: Redis,
        lock_timeout: int = 300,
        blocking_timeout: float = 5.0,
        key_prefix: str = "mailwright",
    ):
        """Initialize tenant lock.

        Args:
            redis: Redis client instance
            lock_timeout: How long the lock is held before auto-release (seconds)
            blocking_timeout: How long to wait when trying to acquire (seconds)
            key_prefix: Prefix for the lock key
        """
        super().__init__(blocking_timeout)
        self._redis = redis
        self._lock_timeout = lock_timeout
        self._prefix = key_prefix

    def _key(self, tenant_id: str) -> str:
        return f"{self._prefix}:tenantlock:{tenant_id}"

    @asynccontextmanager
    async def acquire(
        self,
        tenant_id: str,
        blocking_timeout: float | None = None,
    ) -> AsyncIterator[None]:
        timeout = blocking_timeout if blocking_timeout is not None else self._blocking_timeout
        lock = self._redis.lock(
            self._key(tenant_id),
            timeout=self._lock_timeout,
            blocking_timeout=timeout,
        )

        acquired = await lock.acquire()
        if not acquired:
            raise ReconciliationInProgressError(tenant_id)
        try:
            yield
        finally:
            try:
                await lock.release()
            except LockError:
                # Lock expired before the run finished
                logger.warning("tenant_lock_expired", tenant_id=tenant_id)

    async def is_locked(self, tenant_id: str) -> bool:
        return await self._redis.exists(self._key(tenant_id)) > 0
