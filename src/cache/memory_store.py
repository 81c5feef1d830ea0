# src/cache/memory_store.py
"""Process-local dict cache store (default)."""

from __future__ import annotations

from realtycrm.cache.base_cache_store import BaseCacheStore
from realtycrm.cache.models import CacheEntry, QueryKey


class MemoryCacheStore(BaseCacheStore):
    """In-memory cache store. Entries are returned by reference."""

    def __init__(self) -> None:
        self._entries: dict[QueryKey, CacheEntry] = {}

    async def get(self, key: QueryKey) -> CacheEntry | None:
        return self._entries.get(key)

    async def put(self, key: QueryKey, entry: CacheEntry) -> None:
        self._entries[key] = entry

    async def delete(self, key: QueryKey) -> None:
        self._entries.pop(key, None)

    async def keys(self) -> list[QueryKey]:
        return list(self._entries)

    async def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
