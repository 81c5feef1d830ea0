# src/cache/retry.py
"""Retry policy with exponential backoff for queries that opt in.

Only transport failures are retried; authorization, not-found and
validation failures surface immediately.
"""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from realtycrm.actor.errors import ErrorKind, TransportError, classify_error

logger = logging.getLogger(__name__)


class QueryRetryExhausted(TransportError):
    """All retries exhausted for a query fetch."""

    def __init__(self, key: str, attempts: int, last_error: Exception):
        self.key = key
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"Query '{key}' failed after {attempts} attempts: {last_error}")


@dataclass(frozen=True)
class RetryConfig:
    """Retry configuration for retryable failures."""

    max_retries: int = 3
    base_delay_s: float = 1.0
    backoff_factor: float = 2.0
    max_delay_s: float = 30.0
    jitter: bool = True


DEFAULT_QUERY_RETRY = RetryConfig()

_RETRYABLE = frozenset({ErrorKind.TRANSPORT})


def compute_delay(config: RetryConfig, attempt: int) -> float:
    """Compute delay for a given attempt (0-based)."""
    delay = min(config.base_delay_s * (config.backoff_factor ** attempt), config.max_delay_s)
    if config.jitter:
        delay *= 0.5 + random.random()  # noqa: S311
    return delay


async def with_retry(
    fn: Callable[[], Awaitable[Any]],
    key: str = "unknown",
    config: RetryConfig | None = None,
) -> Any:
    """Execute an async fetcher with retry logic.

    Non-retryable failures are re-raised unchanged.

    Raises:
        QueryRetryExhausted: If all retries are exhausted.
    """
    config = config or DEFAULT_QUERY_RETRY
    attempts = 0

    while True:
        try:
            return await fn()
        except Exception as e:
            kind = classify_error(e)
            if kind not in _RETRYABLE:
                raise
            attempts += 1
            if attempts > config.max_retries:
                raise QueryRetryExhausted(key, attempts, e) from e

            delay = compute_delay(config, attempts - 1)
            logger.warning(
                "Query '%s': %s (attempt %d/%d), retrying in %.1fs",
                key, kind.value, attempts, config.max_retries, delay,
            )
            await asyncio.sleep(delay)
