"""Tests for per-tenant reconciliation locks."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import LockError

from mailwright.errors import ReconciliationInProgressError
from mailwright.reconciliation.locks import InMemoryTenantLock, RedisTenantLock

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def mock_lock():
    lock = AsyncMock()
    lock.acquire = AsyncMock(return_value=True)
    lock.release = AsyncMock()
    return lock


@pytest.fixture
def mock_redis(mock_lock):
    """Create mock Redis client."""
    redis = AsyncMock()
    redis.lock = MagicMock(return_value=mock_lock)
    redis.exists = AsyncMock(return_value=0)
    return redis


# =============================================================================
# Tests: InMemoryTenantLock
# =============================================================================


class TestInMemoryTenantLock:
    @pytest.mark.asyncio
    async def test_held_inside_context(self) -> None:
        lock = InMemoryTenantLock()

        async with lock.acquire("t1"):
            assert await lock.is_locked("t1")

        assert not await lock.is_locked("t1")

    @pytest.mark.asyncio
    async def test_contention_raises(self) -> None:
        lock = InMemoryTenantLock(blocking_timeout=0.01)

        async with lock.acquire("t1"):
            with pytest.raises(ReconciliationInProgressError):
                async with lock.acquire("t1"):
                    pass

    @pytest.mark.asyncio
    async def test_waiter_gets_lock_after_release(self) -> None:
        lock = InMemoryTenantLock(blocking_timeout=1.0)
        order: list[str] = []

        async def holder() -> None:
            async with lock.acquire("t1"):
                order.append("first")
                await asyncio.sleep(0.01)

        async def waiter() -> None:
            await asyncio.sleep(0.001)
            async with lock.acquire("t1"):
                order.append("second")

        await asyncio.gather(holder(), waiter())

        assert order == ["first", "second"]

    @pytest.mark.asyncio
    async def test_released_on_error(self) -> None:
        lock = InMemoryTenantLock()

        with pytest.raises(RuntimeError):
            async with lock.acquire("t1"):
                raise RuntimeError("boom")

        assert not await lock.is_locked("t1")


# =============================================================================
# Tests: RedisTenantLock
# =============================================================================


class TestRedisTenantLock:
    def test_key(self, mock_redis) -> None:
        lock = RedisTenantLock(mock_redis, key_prefix="test")

        assert lock._key("t1") == "test:tenantlock:t1"

    @pytest.mark.asyncio
    async def test_acquire_and_release(self, mock_redis, mock_lock) -> None:
        lock = RedisTenantLock(mock_redis, lock_timeout=60, blocking_timeout=2.0)

        async with lock.acquire("t1"):
            mock_lock.release.assert_not_called()

        mock_redis.lock.assert_called_once_with(
            "mailwright:tenantlock:t1", timeout=60, blocking_timeout=2.0
        )
        mock_lock.release.assert_called_once()

    @pytest.mark.asyncio
    async def test_blocking_timeout_override(self, mock_redis) -> None:
        lock = RedisTenantLock(mock_redis)

        async with lock.acquire("t1", blocking_timeout=0.5):
            pass

        assert mock_redis.lock.call_args.kwargs["blocking_timeout"] == 0.5

    @pytest.mark.asyncio
    async def test_not_acquired_raises(self, mock_redis, mock_lock) -> None:
        mock_lock.acquire = AsyncMock(return_value=False)
        lock = RedisTenantLock(mock_redis)

        with pytest.raises(ReconciliationInProgressError):
            async with lock.acquire("t1"):
                pass

        mock_lock.release.assert_not_called()

    @pytest.mark.asyncio
    async def test_expired_lock_release_tolerated(self, mock_redis, mock_lock) -> None:
        mock_lock.release = AsyncMock(side_effect=LockError("expired"))
        lock = RedisTenantLock(mock_redis)

        async with lock.acquire("t1"):
            pass

    @pytest.mark.asyncio
    async def test_is_locked(self, mock_redis) -> None:
        lock = RedisTenantLock(mock_redis)
        assert await lock.is_locked("t1") is False

        mock_redis.exists = AsyncMock(return_value=1)
        assert await lock.is_locked("t1") is True
