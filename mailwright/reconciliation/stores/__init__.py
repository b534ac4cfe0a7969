"""Persistence for reconciled taxonomy ids."""

from mailwright.reconciliation.stores.base import IdMapStore
from mailwright.reconciliation.stores.inmemory import InMemoryIdMapStore
from mailwright.reconciliation.stores.redis import RedisIdMapStore

__all__ = ["IdMapStore", "InMemoryIdMapStore", "RedisIdMapStore"]
