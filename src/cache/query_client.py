# src/cache/query_client.py
"""Query/mutation cache layer over the remote actor client.

Reads go through :meth:`QueryClient.query`: cached per key, deduplicated
(at most one in-flight fetch per key), stale after ``stale_time_ms`` and
optionally polled. Writes go through :meth:`QueryClient.mutate`: executed
immediately, never cached, and on success they mark every entry under the
listed key prefixes stale. Invalidation is lazy: nothing is refetched until
the next ``query`` for that key.

The client is an explicit object; construct one per session and pass it to
every consumer.
"""

from __future__ import annotations

import asyncio
import logging
import time
from functools import partial
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Hashable, Sequence

from realtycrm.cache.base_cache_store import BaseCacheStore
from realtycrm.cache.keys import as_key, format_key, matches_prefix
from realtycrm.cache.memory_store import MemoryCacheStore
from realtycrm.cache.models import (
    CacheEntry,
    MutationOptions,
    QueryKey,
    QueryOptions,
    QueryStatus,
)
from realtycrm.cache.retry import DEFAULT_QUERY_RETRY, RetryConfig, with_retry

if TYPE_CHECKING:
    from realtycrm.notify.notifier import BaseNotifier

logger = logging.getLogger(__name__)

Fetcher = Callable[[], Awaitable[Any]]


class QueryClient:
    """Process-wide cache of remote reads shared by every consumer."""

    def __init__(
        self,
        store: BaseCacheStore | None = None,
        notifier: BaseNotifier | None = None,
        clock: Callable[[], float] = time.monotonic,
        retry_config: RetryConfig | None = None,
    ) -> None:
        self._store = store or MemoryCacheStore()
        self._notifier = notifier
        self._clock = clock
        self._retry_config = retry_config or DEFAULT_QUERY_RETRY
        self._inflight: dict[QueryKey, asyncio.Task] = {}
        self._stale_on_arrival: set[QueryKey] = set()
        self._pollers: dict[QueryKey, asyncio.Task] = {}
        # Bumped by clear_all; fetches started under an older generation
        # never write back into the cache.
        self._generation = 0

    @property
    def store(self) -> BaseCacheStore:
        return self._store

    @property
    def notifier(self) -> BaseNotifier | None:
        return self._notifier

    def is_fetching(self, key: Sequence[Hashable]) -> bool:
        return as_key(key) in self._inflight

    # --- Reads ---

    async def query(
        self,
        key: Sequence[Hashable],
        fetcher: Fetcher,
        options: QueryOptions | None = None,
    ) -> Any:
        """Return the value for ``key``, fetching only when needed.

        Args:
            key: Ordered key parts identifying the read and its parameters.
            fetcher: Zero-argument coroutine function performing the read.
            options: Enabled flag, staleness window, polling and retry.

        Returns:
            The cached or freshly fetched value. A disabled query returns the
            cached value if any, else ``options.placeholder``.

        Raises:
            Exception: Whatever the fetcher raised (never retried unless
                ``options.retry`` is set).
        """
        key = as_key(key)
        options = options or QueryOptions()
        entry = await self._store.get(key)

        if not options.enabled:
            logger.debug("Query %s disabled", format_key(key))
            if entry is not None and entry.has_data:
                return entry.data
            return options.placeholder

        if options.refetch_interval_ms:
            self._ensure_poller(key, fetcher, options)

        if entry is not None and entry.is_fresh(self._clock(), options.stale_time_ms):
            logger.debug("Cache hit %s", format_key(key))
            return entry.data

        return await self._fetch(key, fetcher, options)

    async def fetch(
        self,
        key: Sequence[Hashable],
        fetcher: Fetcher,
        options: QueryOptions | None = None,
    ) -> Any:
        """Refetch ``key`` regardless of staleness (still deduplicated)."""
        return await self._fetch(as_key(key), fetcher, options or QueryOptions())

    async def _fetch(self, key: QueryKey, fetcher: Fetcher, options: QueryOptions) -> Any:
        task = self._inflight.get(key)
        if task is None:
            logger.debug("Cache miss %s, fetching", format_key(key))
            task = asyncio.get_running_loop().create_task(
                self._run_fetch(key, fetcher, options, self._generation)
            )
            self._inflight[key] = task
            task.add_done_callback(partial(self._forget_inflight, key))
        else:
            logger.debug("Joining in-flight fetch %s", format_key(key))
        # Shielded: a cancelled consumer must not abort the shared fetch.
        return await asyncio.shield(task)

    def _forget_inflight(self, key: QueryKey, task: asyncio.Task) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]
        if not task.cancelled():
            # Mark the exception retrieved when every consumer went away.
            task.exception()

    async def _run_fetch(
        self, key: QueryKey, fetcher: Fetcher, options: QueryOptions, generation: int
    ) -> Any:
        entry = await self._store.get(key) or CacheEntry(key=key)
        if not entry.has_data and generation == self._generation:
            entry.status = QueryStatus.LOADING
            await self._store.put(key, entry)

        try:
            if options.retry:
                data = await with_retry(
                    fetcher, key=format_key(key), config=self._retry_config
                )
            else:
                data = await fetcher()
        except Exception as exc:
            logger.warning("Query %s failed: %s", format_key(key), exc)
            if generation == self._generation:
                entry.status = QueryStatus.ERROR
                entry.error = exc
                entry.error_count += 1
                await self._store.put(key, entry)
            self._stale_on_arrival.discard(key)
            raise

        if generation != self._generation:
            logger.debug("Discarding %s fetched before cache clear", format_key(key))
            return data

        entry.data = data
        entry.has_data = True
        entry.status = QueryStatus.SUCCESS
        entry.error = None
        entry.updated_at = self._clock()
        entry.fetch_count += 1
        entry.invalidated = key in self._stale_on_arrival
        self._stale_on_arrival.discard(key)
        await self._store.put(key, entry)
        return data

    # --- Polling ---

    def _ensure_poller(self, key: QueryKey, fetcher: Fetcher, options: QueryOptions) -> None:
        existing = self._pollers.get(key)
        if existing is not None and not existing.done():
            return
        self._pollers[key] = asyncio.get_running_loop().create_task(
            self._poll(key, fetcher, options)
        )
        logger.debug(
            "Polling %s every %d ms", format_key(key), options.refetch_interval_ms
        )

    async def _poll(self, key: QueryKey, fetcher: Fetcher, options: QueryOptions) -> None:
        interval_s = (options.refetch_interval_ms or 0) / 1000
        while True:
            await asyncio.sleep(interval_s)
            try:
                await self._fetch(key, fetcher, options)
            except Exception as exc:
                # Failure is already recorded on the entry.
                logger.debug("Background refetch of %s failed: %s", format_key(key), exc)

    def stop_polling(self, key: Sequence[Hashable]) -> bool:
        """Cancel the poller of ``key``; returns whether one was running."""
        task = self._pollers.pop(as_key(key), None)
        if task is None:
            return False
        task.cancel()
        return True

    def is_polling(self, key: Sequence[Hashable]) -> bool:
        task = self._pollers.get(as_key(key))
        return task is not None and not task.done()

    # --- Writes ---

    async def mutate(
        self,
        fetcher: Fetcher,
        options: MutationOptions | None = None,
    ) -> Any:
        """Run a single remote write and invalidate dependents on success.

        Never cached, never deduplicated, never retried.

        Raises:
            Exception: Whatever the write raised, after the error notification.
        """
        options = options or MutationOptions()
        try:
            result = await fetcher()
        except Exception as exc:
            logger.warning("Mutation failed: %s", exc)
            if options.error_message and self._notifier is not None:
                self._notifier.error(f"{options.error_message}: {exc}")
            raise

        for prefix in options.invalidate:
            await self.invalidate(prefix)

        if options.success_message and self._notifier is not None:
            self._notifier.success(options.success_message)
        return result

    # --- Administration ---

    async def invalidate(self, prefix: Sequence[Hashable]) -> int:
        """Mark every entry under ``prefix`` stale; returns how many.

        Fetches already in flight for matching keys land stale.
        """
        prefix = as_key(prefix)
        count = 0
        for key in await self._store.keys():
            if not matches_prefix(key, prefix):
                continue
            entry = await self._store.get(key)
            if entry is not None and not entry.invalidated:
                entry.invalidated = True
                await self._store.put(key, entry)
                count += 1
        for key in self._inflight:
            if matches_prefix(key, prefix):
                self._stale_on_arrival.add(key)
        logger.debug("Invalidated %d entries under %s", count, format_key(prefix))
        return count

    async def clear_all(self) -> None:
        """Drop every entry, in-flight request and poller."""
        self._generation += 1
        self._inflight.clear()
        self._stale_on_arrival.clear()
        for task in self._pollers.values():
            task.cancel()
        self._pollers.clear()
        await self._store.clear()
        logger.info("Query cache cleared")

    async def get_entry(self, key: Sequence[Hashable]) -> CacheEntry | None:
        return await self._store.get(as_key(key))

    async def get_data(self, key: Sequence[Hashable], default: Any = None) -> Any:
        """Cached value of ``key`` without fetching."""
        entry = await self._store.get(as_key(key))
        if entry is None or not entry.has_data:
            return default
        return entry.data

    async def set_data(self, key: Sequence[Hashable], data: Any) -> None:
        """Seed or overwrite a cached value as a fresh success."""
        key = as_key(key)
        entry = await self._store.get(key) or CacheEntry(key=key)
        entry.data = data
        entry.has_data = True
        entry.status = QueryStatus.SUCCESS
        entry.error = None
        entry.invalidated = False
        entry.updated_at = self._clock()
        await self._store.put(key, entry)

    async def close(self) -> None:
        """Cancel pollers and in-flight fetches (process shutdown)."""
        tasks = [*self._pollers.values(), *self._inflight.values()]
        for task in tasks:
            task.cancel()
        self._pollers.clear()
        self._inflight.clear()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
