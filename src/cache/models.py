# src/cache/models.py
"""Cache domain models: QueryKey, CacheEntry, QueryOptions, MutationOptions."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Hashable

QueryKey = tuple[Hashable, ...]


class QueryStatus(str, Enum):
    """Lifecycle of a cached read."""

    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class CacheEntry:
    """Single cached read, keyed by its ordered parameter tuple.

    ``updated_at`` is a monotonic clock reading of the last success.
    """

    key: QueryKey
    data: Any = None
    has_data: bool = False
    status: QueryStatus = QueryStatus.IDLE
    error: BaseException | None = None
    updated_at: float | None = None
    invalidated: bool = False
    fetch_count: int = 0
    error_count: int = 0

    def is_fresh(self, now: float, stale_time_ms: int) -> bool:
        """True when the last success is younger than ``stale_time_ms``."""
        if self.status is not QueryStatus.SUCCESS or self.invalidated:
            return False
        if self.updated_at is None:
            return False
        return (now - self.updated_at) * 1000 < stale_time_ms


@dataclass(frozen=True)
class QueryOptions:
    """Per-call options of :meth:`QueryClient.query`."""

    enabled: bool = True
    stale_time_ms: int = 0
    refetch_interval_ms: int | None = None
    retry: bool = False
    placeholder: Any = None


@dataclass(frozen=True)
class MutationOptions:
    """Per-call options of :meth:`QueryClient.mutate`."""

    invalidate: tuple[QueryKey, ...] = field(default_factory=tuple)
    success_message: str | None = None
    error_message: str | None = None
