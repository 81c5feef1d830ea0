# src/crm/base.py
"""Shared plumbing for CRM resources: per-call error policy, query and
mutation helpers.

Reads never fail the page by default: each read declares an
:class:`ErrorPolicy` saying which error kinds collapse to the read's empty
value and which propagate. Writes always propagate after notifying.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Hashable, Sequence

from realtycrm.actor.base_actor import BaseActorClient
from realtycrm.actor.errors import ActorUnavailableError, ErrorKind, classify_error
from realtycrm.cache.invalidation import edges_for
from realtycrm.cache.keys import format_key
from realtycrm.cache.models import MutationOptions, QueryKey, QueryOptions
from realtycrm.cache.retry import with_retry
from realtycrm.crm.context import CrmContext
from realtycrm.logging.context import set_operation_context

logger = logging.getLogger(__name__)

ActorCall = Callable[[BaseActorClient], Awaitable[Any]]

_ALL_KINDS = frozenset(ErrorKind)


@dataclass(frozen=True)
class ErrorPolicy:
    """What a read does with a failure.

    Attributes:
        fallback_kinds: Error kinds that resolve to the read's default value.
        toast: Error notification emitted on any failure (None = silent).
    """

    fallback_kinds: frozenset[ErrorKind] = _ALL_KINDS
    toast: str | None = None

    def falls_back(self, kind: ErrorKind) -> bool:
        return kind in self.fallback_kinds


def fallback(toast: str | None = None) -> ErrorPolicy:
    """Any failure resolves to the default value."""
    return ErrorPolicy(fallback_kinds=_ALL_KINDS, toast=toast)


def fallback_on(*kinds: ErrorKind, toast: str | None = None) -> ErrorPolicy:
    """Only the listed kinds resolve to the default; others propagate."""
    return ErrorPolicy(fallback_kinds=frozenset(kinds), toast=toast)


def propagate(toast: str | None = None) -> ErrorPolicy:
    """Every failure propagates."""
    return ErrorPolicy(fallback_kinds=frozenset(), toast=toast)


class ResourceBase:
    """Base class of the per-entity operation groups."""

    def __init__(self, ctx: CrmContext) -> None:
        self._ctx = ctx

    @property
    def ctx(self) -> CrmContext:
        return self._ctx

    @property
    def _settings(self):
        return self._ctx.settings

    @property
    def _actor_ready(self) -> bool:
        return self._ctx.actor is not None

    def _caller_principal(self) -> str | None:
        return self._ctx.principal

    def _require_actor(self) -> BaseActorClient:
        if self._ctx.actor is None:
            raise ActorUnavailableError()
        return self._ctx.actor

    def _apply_policy(self, exc: Exception, policy: ErrorPolicy, default: Any, op: str) -> Any:
        kind = classify_error(exc)
        if policy.toast:
            self._ctx.notifier.error(policy.toast)
        if policy.falls_back(kind):
            logger.warning("%s failed (%s), using default: %s", op, kind.value, exc)
            return default
        logger.error("%s failed (%s): %s", op, kind.value, exc)
        raise exc

    async def _query(
        self,
        key: Sequence[Hashable],
        call: ActorCall,
        *,
        default: Any = None,
        policy: ErrorPolicy | None = None,
        enabled: bool = True,
        stale_time_ms: int | None = None,
        refetch_interval_ms: int | None = None,
        retry: bool | None = None,
    ) -> Any:
        """Cached read through the query client.

        The read is disabled (returns ``default`` or the cached value) while
        the actor is unavailable or ``enabled`` is False.
        """
        actor = self._ctx.actor
        policy = policy or fallback()
        key = tuple(key)
        op = format_key(key)
        use_retry = self._settings.query_retry if retry is None else retry

        async def fetcher() -> Any:
            if actor is None:
                raise ActorUnavailableError()
            try:
                if use_retry:
                    return await with_retry(lambda: call(actor), key=op)
                return await call(actor)
            except Exception as exc:
                return self._apply_policy(exc, policy, default, op)

        options = QueryOptions(
            enabled=enabled and self._actor_ready,
            stale_time_ms=(
                self._settings.default_stale_time_ms
                if stale_time_ms is None
                else stale_time_ms
            ),
            refetch_interval_ms=refetch_interval_ms,
            placeholder=default,
        )
        set_operation_context("query", op)
        return await self._ctx.client.query(key, fetcher, options)

    async def _mutate(
        self,
        name: str,
        call: ActorCall,
        *,
        success: str | None = None,
        error: str | None = None,
        invalidate: tuple[QueryKey, ...] | None = None,
    ) -> Any:
        """Remote write with the invalidation edges registered for ``name``."""

        async def fetcher() -> Any:
            return await call(self._require_actor())

        options = MutationOptions(
            invalidate=edges_for(name) if invalidate is None else invalidate,
            success_message=success,
            error_message=error,
        )
        set_operation_context(name)
        return await self._ctx.client.mutate(fetcher, options)
