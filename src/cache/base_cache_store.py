# src/cache/base_cache_store.py
"""Abstract cache store interface used by the query client."""

from __future__ import annotations

from abc import ABC, abstractmethod

from realtycrm.cache.models import CacheEntry, QueryKey


class BaseCacheStore(ABC):
    """Unified interface for query cache storage backends."""

    @abstractmethod
    async def get(self, key: QueryKey) -> CacheEntry | None:
        """Retrieve a cache entry by key."""

    @abstractmethod
    async def put(self, key: QueryKey, entry: CacheEntry) -> None:
        """Store a cache entry."""

    @abstractmethod
    async def delete(self, key: QueryKey) -> None:
        """Remove a cache entry."""

    @abstractmethod
    async def keys(self) -> list[QueryKey]:
        """List all cached keys."""

    @abstractmethod
    async def clear(self) -> None:
        """Drop every entry."""
