# src/actor/errors.py
"""Typed error kinds raised by the remote actor client and the CRM layer.

Call sites decide what to do with a failure by switching on
:class:`ErrorKind`; the message-text heuristics live only in
:func:`classify_error`.
"""

from __future__ import annotations

from enum import Enum

import httpx


class ErrorKind(str, Enum):
    """Failure classification shared by queries and mutations."""

    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    TRANSPORT = "transport"
    VALIDATION = "validation"
    APPLICATION = "application"


class CrmError(Exception):
    """Base error carrying an :class:`ErrorKind`."""

    kind: ErrorKind = ErrorKind.APPLICATION

    def __init__(self, message: str, kind: ErrorKind | None = None) -> None:
        super().__init__(message)
        self.message = message
        if kind is not None:
            self.kind = kind

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind.value!r}, message={self.message!r})"


class UnauthorizedError(CrmError):
    """Backend refused the caller."""

    kind = ErrorKind.UNAUTHORIZED


class NotFoundError(CrmError):
    """Referenced record does not exist (or no longer exists)."""

    kind = ErrorKind.NOT_FOUND


class TransportError(CrmError):
    """Network failure, timeout or unusable backend response."""

    kind = ErrorKind.TRANSPORT


class ActorUnavailableError(TransportError):
    """The remote actor client is not ready yet."""

    def __init__(self, message: str = "Actor not available") -> None:
        super().__init__(message)


class ClientValidationError(CrmError):
    """Input rejected before dispatch; never reaches the backend."""

    kind = ErrorKind.VALIDATION


class AttendanceStateError(CrmError):
    """Check-in or check-out attempted from the wrong attendance state."""


_KIND_TO_CLASS: dict[ErrorKind, type[CrmError]] = {
    ErrorKind.UNAUTHORIZED: UnauthorizedError,
    ErrorKind.NOT_FOUND: NotFoundError,
    ErrorKind.TRANSPORT: TransportError,
    ErrorKind.VALIDATION: ClientValidationError,
    ErrorKind.APPLICATION: CrmError,
}


def classify_error(error: BaseException) -> ErrorKind:
    """Classify an exception into an :class:`ErrorKind`."""
    if isinstance(error, CrmError):
        return error.kind

    if isinstance(error, httpx.HTTPStatusError):
        status = error.response.status_code
        if status in (401, 403):
            return ErrorKind.UNAUTHORIZED
        if status == 404:
            return ErrorKind.NOT_FOUND
        if status in (400, 422):
            return ErrorKind.VALIDATION
        if status >= 500:
            return ErrorKind.TRANSPORT
        return ErrorKind.APPLICATION

    if isinstance(error, (httpx.TransportError, TimeoutError, ConnectionError)):
        return ErrorKind.TRANSPORT

    msg = str(error).lower()
    if "unauthorized" in msg or "not authorized" in msg:
        return ErrorKind.UNAUTHORIZED
    if "not found" in msg or "does not exist" in msg:
        return ErrorKind.NOT_FOUND
    if "timeout" in msg or "timed out" in msg:
        return ErrorKind.TRANSPORT
    return ErrorKind.APPLICATION


def error_from_kind(kind: ErrorKind | str, message: str) -> CrmError:
    """Build the CrmError subclass matching a kind tag from the wire."""
    try:
        resolved = ErrorKind(kind)
    except ValueError:
        resolved = classify_error(Exception(message))
    return _KIND_TO_CLASS[resolved](message)


def to_crm_error(error: BaseException) -> CrmError:
    """Wrap any exception into the matching CrmError (idempotent)."""
    if isinstance(error, CrmError):
        return error
    kind = classify_error(error)
    wrapped = _KIND_TO_CLASS[kind](str(error) or type(error).__name__)
    wrapped.__cause__ = error
    return wrapped
