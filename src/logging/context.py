# src/logging/context.py
"""Contextual logging support: attach principal, session, operation and
query key to log records.
"""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

# Context variables for structured logging, set per session / operation.
_principal: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "principal", default=None
)
_session_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "session_id", default=None
)
_operation: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "operation", default=None
)
_query_key: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "query_key", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    principal: str | None = None
    session_id: str | None = None
    operation: str | None = None
    query_key: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        principal=_principal.get(),
        session_id=_session_id.get(),
        operation=_operation.get(),
        query_key=_query_key.get(),
    )


def set_session_context(principal: str | None, session_id: str) -> None:
    """Set session-level context (called once per CRM session)."""
    _principal.set(principal)
    _session_id.set(session_id)


def set_operation_context(operation: str, query_key: str | None = None) -> None:
    """Set operation-level context (called per query or mutation)."""
    _operation.set(operation)
    _query_key.set(query_key)


def clear_context() -> None:
    """Reset all context variables."""
    _principal.set(None)
    _session_id.set(None)
    _operation.set(None)
    _query_key.set(None)
