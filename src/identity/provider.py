# src/identity/provider.py
"""Identity provider interface and a static-principal implementation.

Consumers only react to the presence or absence of a principal; listeners
registered with :meth:`BaseIdentityProvider.subscribe` receive every
:class:`Identity` transition.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Callable

from realtycrm.actor.errors import UnauthorizedError
from realtycrm.identity.models import Identity, IdentityState

logger = logging.getLogger(__name__)

IdentityListener = Callable[[Identity], None]


class BaseIdentityProvider(ABC):
    """Supplies the authenticated principal and its login lifecycle."""

    def __init__(self) -> None:
        self._identity = Identity()
        self._listeners: list[IdentityListener] = []

    @property
    def identity(self) -> Identity:
        return self._identity

    @property
    def state(self) -> IdentityState:
        return self._identity.state

    @property
    def principal(self) -> str | None:
        """Principal while logged in, else None."""
        if self._identity.state is IdentityState.LOGGED_IN:
            return self._identity.principal
        return None

    def subscribe(self, listener: IdentityListener) -> Callable[[], None]:
        """Register a transition listener; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _transition(self, state: IdentityState, principal: str | None) -> None:
        self._identity = Identity(state=state, principal=principal)
        logger.debug("Identity -> %s", state.value)
        for listener in list(self._listeners):
            listener(self._identity)

    @abstractmethod
    async def initialize(self) -> Identity:
        """Restore any existing session."""

    @abstractmethod
    async def login(self) -> Identity:
        """Authenticate and return the logged-in identity."""

    @abstractmethod
    async def logout(self) -> Identity:
        """Drop the session."""


class StaticIdentityProvider(BaseIdentityProvider):
    """Identity backed by a preconfigured principal (CLI, services, tests)."""

    def __init__(self, principal: str | None, auto_login: bool = False) -> None:
        super().__init__()
        self._configured = principal or None
        self._auto_login = auto_login

    async def initialize(self) -> Identity:
        self._transition(IdentityState.INITIALIZING, None)
        if self._auto_login and self._configured:
            self._transition(IdentityState.LOGGED_IN, self._configured)
        else:
            self._transition(IdentityState.LOGGED_OUT, None)
        return self._identity

    async def login(self) -> Identity:
        if self._identity.state is IdentityState.LOGGED_IN:
            return self._identity
        self._transition(IdentityState.LOGGING_IN, None)
        if not self._configured:
            self._transition(IdentityState.LOGGED_OUT, None)
            raise UnauthorizedError("No principal configured")
        self._transition(IdentityState.LOGGED_IN, self._configured)
        logger.info("Logged in as %s", self._configured)
        return self._identity

    async def logout(self) -> Identity:
        self._transition(IdentityState.LOGGED_OUT, None)
        logger.info("Logged out")
        return self._identity
