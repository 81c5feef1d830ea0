# tests/unit/actor/test_errors.py
"""Tests for actor/errors.py: error kinds and classification."""

from __future__ import annotations

import httpx
import pytest

from realtycrm.actor.errors import (
    ActorUnavailableError,
    ClientValidationError,
    CrmError,
    ErrorKind,
    NotFoundError,
    TransportError,
    UnauthorizedError,
    classify_error,
    error_from_kind,
    to_crm_error,
)


def _status_error(status: int) -> httpx.HTTPStatusError:
    request = httpx.Request("POST", "http://crm.test/api/rpc")
    response = httpx.Response(status, request=request)
    return httpx.HTTPStatusError("boom", request=request, response=response)


class TestCrmError:
    def test_subclass_kinds(self):
        assert UnauthorizedError("x").kind == ErrorKind.UNAUTHORIZED
        assert NotFoundError("x").kind == ErrorKind.NOT_FOUND
        assert TransportError("x").kind == ErrorKind.TRANSPORT
        assert ClientValidationError("x").kind == ErrorKind.VALIDATION
        assert CrmError("x").kind == ErrorKind.APPLICATION

    def test_actor_unavailable_is_transport(self):
        err = ActorUnavailableError()
        assert err.kind == ErrorKind.TRANSPORT
        assert str(err) == "Actor not available"

    def test_explicit_kind(self):
        assert CrmError("x", kind=ErrorKind.NOT_FOUND).kind == ErrorKind.NOT_FOUND


class TestClassify:
    @pytest.mark.parametrize(
        "status,kind",
        [
            (401, ErrorKind.UNAUTHORIZED),
            (403, ErrorKind.UNAUTHORIZED),
            (404, ErrorKind.NOT_FOUND),
            (422, ErrorKind.VALIDATION),
            (503, ErrorKind.TRANSPORT),
            (409, ErrorKind.APPLICATION),
        ],
    )
    def test_http_status(self, status, kind):
        assert classify_error(_status_error(status)) == kind

    def test_transport_exceptions(self):
        assert classify_error(httpx.ConnectError("refused")) == ErrorKind.TRANSPORT
        assert classify_error(TimeoutError()) == ErrorKind.TRANSPORT

    def test_message_heuristics(self):
        assert classify_error(Exception("Unauthorized: only admins")) == ErrorKind.UNAUTHORIZED
        assert classify_error(Exception("Lead not found")) == ErrorKind.NOT_FOUND
        assert classify_error(Exception("something odd")) == ErrorKind.APPLICATION


class TestConversions:
    def test_error_from_kind(self):
        err = error_from_kind("not_found", "Lead not found")
        assert isinstance(err, NotFoundError)
        assert err.message == "Lead not found"

    def test_error_from_unknown_kind_uses_message(self):
        err = error_from_kind("weird", "Unauthorized caller")
        assert isinstance(err, UnauthorizedError)

    def test_to_crm_error_wraps(self):
        cause = httpx.ConnectError("refused")
        err = to_crm_error(cause)
        assert isinstance(err, TransportError)
        assert err.__cause__ is cause

    def test_to_crm_error_idempotent(self):
        err = NotFoundError("x")
        assert to_crm_error(err) is err
