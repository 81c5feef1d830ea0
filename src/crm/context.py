# src/crm/context.py
"""Session wiring shared by every CRM operation.

A :class:`CrmContext` bundles the query client, the remote actor (``None``
until it is available), the identity provider, the notifier and settings.
It is created once per session and passed to every resource.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from typing import Callable

from realtycrm.actor.base_actor import BaseActorClient
from realtycrm.cache.base_cache_store import BaseCacheStore
from realtycrm.cache.query_client import QueryClient
from realtycrm.config.settings import Settings
from realtycrm.identity.models import Identity, IdentityState
from realtycrm.identity.provider import BaseIdentityProvider
from realtycrm.logging.context import set_session_context
from realtycrm.notify.notifier import BaseNotifier, LogNotifier

logger = logging.getLogger(__name__)


def _default_settings() -> Settings:
    return Settings(_env_file=None)  # type: ignore[call-arg]


@dataclass
class CrmContext:
    """Per-session dependencies of the CRM layer."""

    client: QueryClient
    actor: BaseActorClient | None = None
    identity: BaseIdentityProvider | None = None
    notifier: BaseNotifier = field(default_factory=LogNotifier)
    settings: Settings = field(default_factory=_default_settings)
    session_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    _unsubscribe: Callable[[], None] | None = field(default=None, repr=False)
    _last_principal: str | None = field(default=None, repr=False)
    _pending_clear: asyncio.Task | None = field(default=None, repr=False)

    @classmethod
    def create(
        cls,
        settings: Settings | None = None,
        actor: BaseActorClient | None = None,
        identity: BaseIdentityProvider | None = None,
        notifier: BaseNotifier | None = None,
        store: BaseCacheStore | None = None,
    ) -> CrmContext:
        """Build a context with a fresh query client."""
        notifier = notifier or LogNotifier()
        ctx = cls(
            client=QueryClient(store=store, notifier=notifier),
            actor=actor,
            notifier=notifier,
            settings=settings or _default_settings(),
        )
        if identity is not None:
            ctx.bind_identity(identity)
        set_session_context(ctx.principal, ctx.session_id)
        return ctx

    @property
    def principal(self) -> str | None:
        """Caller principal (identity first, then the actor's own)."""
        if self.identity is not None:
            return self.identity.principal
        if self.actor is not None:
            return self.actor.principal
        return None

    def bind_identity(self, identity: BaseIdentityProvider) -> None:
        """Follow ``identity``: a logout drops every cached read."""
        if self._unsubscribe is not None:
            self._unsubscribe()
        self.identity = identity
        self._last_principal = identity.principal
        self._unsubscribe = identity.subscribe(self._on_identity)

    def _on_identity(self, identity: Identity) -> None:
        previous = self._last_principal
        if identity.state is IdentityState.LOGGED_IN:
            self._last_principal = identity.principal
            set_session_context(identity.principal, self.session_id)
        elif identity.state is IdentityState.LOGGED_OUT:
            self._last_principal = None
            set_session_context(None, self.session_id)
            if previous is not None:
                logger.info("Identity logged out, clearing query cache")
                self._pending_clear = asyncio.get_running_loop().create_task(
                    self.client.clear_all()
                )

    async def logout(self) -> None:
        """Log the identity out and drop every cached read."""
        if self.identity is not None:
            await self.identity.logout()
        if self._pending_clear is not None:
            await self._pending_clear
            self._pending_clear = None
        await self.client.clear_all()

    async def aclose(self) -> None:
        """Stop background work and release the actor transport."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        await self.client.close()
        if self.actor is not None:
            await self.actor.aclose()
