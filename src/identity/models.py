# src/identity/models.py
"""Identity lifecycle types for principal-authenticated CRM users."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class IdentityState(str, Enum):
    """Login lifecycle of the identity provider."""

    NOT_INITIALIZED = "not-initialized"
    INITIALIZING = "initializing"
    LOGGED_OUT = "logged-out"
    LOGGING_IN = "logging-in"
    LOGGED_IN = "logged-in"


class Identity(BaseModel):
    """Snapshot of the current identity."""

    state: IdentityState = IdentityState.NOT_INITIALIZED
    principal: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.state is IdentityState.LOGGED_IN and bool(self.principal)
