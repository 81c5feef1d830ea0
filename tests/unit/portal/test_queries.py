# tests/unit/portal/test_queries.py
"""Tests for portal/queries.py."""

from __future__ import annotations

import pytest

from realtycrm.actor.errors import ClientValidationError, NotFoundError, TransportError
from realtycrm.actor.models import CustomerProfile, CustomerQueryResponse
from realtycrm.portal.auth import CustomerAuth
from realtycrm.portal.queries import CONFIRMATION_FALLBACK, NOT_REGISTERED, PortalOperations
from realtycrm.portal.storage import MemoryStorage

PHONE = "9876543210"


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def portal(ctx, storage):
    return PortalOperations(ctx, CustomerAuth(storage, client=ctx.client))


def _response(phone: str = PHONE) -> CustomerQueryResponse:
    return CustomerQueryResponse(
        name="Asha", phone_number=phone, query_type="rent", message="Need a 2BHK"
    )


class TestLogin:
    @pytest.mark.asyncio
    async def test_registered(self, portal, actor, storage, notifier):
        actor.portal_profiles[PHONE] = CustomerProfile(name="Asha", phone_number=PHONE)
        profile = await portal.customer_login(f" {PHONE} ")
        assert profile.name == "Asha"
        assert portal.auth.phone_number == PHONE
        assert storage.get_item("customer_phone") == PHONE
        assert notifier.messages("success") == ["Login successful"]

    @pytest.mark.asyncio
    async def test_not_registered(self, portal, notifier):
        with pytest.raises(NotFoundError, match="not registered"):
            await portal.customer_login(PHONE)
        assert not portal.auth.is_authenticated
        assert notifier.messages("error") == [f"Login failed: {NOT_REGISTERED}"]

    @pytest.mark.asyncio
    async def test_malformed_phone(self, portal, actor, notifier):
        with pytest.raises(ClientValidationError):
            await portal.customer_login("12345")
        assert notifier.messages("error") == ["Phone number must be exactly 10 digits"]
        assert actor.count("get_customer_profile_by_phone") == 0


class TestRegister:
    @pytest.mark.asyncio
    async def test_register(self, portal, actor, notifier):
        await portal.customer_register(
            CustomerProfile(name="Asha", phone_number=f"{PHONE} ", email=" asha@example.com ")
        )
        stored = actor.portal_profiles[PHONE]
        assert stored.email == "asha@example.com"
        assert portal.auth.phone_number == PHONE
        assert notifier.messages("success") == ["Registration successful"]

    @pytest.mark.asyncio
    async def test_blank_email_dropped(self, portal, actor):
        await portal.customer_register(CustomerProfile(name="Asha", phone_number=PHONE, email="  "))
        assert actor.portal_profiles[PHONE].email is None

    @pytest.mark.asyncio
    async def test_invalid_email(self, portal, actor, notifier):
        with pytest.raises(ClientValidationError):
            await portal.customer_register(CustomerProfile(name="Asha", phone_number=PHONE, email="bad"))
        assert notifier.messages("error") == ["Please enter a valid email address"]
        assert actor.count("register_customer_profile") == 0

    @pytest.mark.asyncio
    async def test_backend_failure(self, portal, actor, notifier):
        actor.failures["register_customer_profile"] = TransportError("down")
        with pytest.raises(TransportError):
            await portal.customer_register(CustomerProfile(name="Asha", phone_number=PHONE))
        assert not portal.auth.is_authenticated
        assert notifier.messages("error") == ["Registration failed: down"]


class TestReads:
    @pytest.mark.asyncio
    async def test_disabled_when_logged_out(self, portal, actor):
        assert await portal.get_customer_profile() is None
        assert await portal.get_customer_queries() == []
        assert (await portal.get_customer_dashboard_data()).queries == []
        assert actor.calls == []

    @pytest.mark.asyncio
    async def test_reads_for_session_phone(self, portal, actor):
        actor.portal_profiles[PHONE] = CustomerProfile(name="Asha", phone_number=PHONE)
        actor.portal_queries = [_response().model_copy(update={"id": 1}), _response("9000000000")]
        portal.auth.login(PHONE)
        assert (await portal.get_customer_profile()).name == "Asha"
        assert [q.id for q in await portal.get_customer_queries()] == [1]
        dashboard = await portal.get_customer_dashboard_data()
        assert len(dashboard.queries) == 1

    @pytest.mark.asyncio
    async def test_confirmation_message(self, portal, actor):
        assert await portal.get_confirmation_message() == actor.confirmation_message

    @pytest.mark.asyncio
    async def test_confirmation_message_fallback(self, portal, actor):
        actor.failures["get_query_confirmation_message"] = TransportError("down")
        assert await portal.get_confirmation_message() == CONFIRMATION_FALLBACK


class TestSubmitAndLogout:
    @pytest.mark.asyncio
    async def test_submit_invalidates_queries(self, portal, actor, notifier):
        portal.auth.login(PHONE)
        assert await portal.get_customer_queries() == []
        new_id = await portal.submit_customer_query(_response())
        assert (await portal.ctx.client.get_entry(("customerQueries", PHONE))).invalidated
        assert [q.id for q in await portal.get_customer_queries()] == [new_id]
        assert notifier.messages("success") == ["Query submitted successfully"]

    @pytest.mark.asyncio
    async def test_submit_invalid_phone(self, portal, actor):
        with pytest.raises(ClientValidationError):
            await portal.submit_customer_query(_response("123"))
        assert actor.count("submit_customer_query_response") == 0

    @pytest.mark.asyncio
    async def test_logout(self, portal, notifier):
        portal.auth.login(PHONE)
        await portal.ctx.client.set_data(("customerProfile", PHONE), "p")
        await portal.customer_logout()
        assert not portal.auth.is_authenticated
        assert await portal.ctx.client.get_entry(("customerProfile", PHONE)) is None
        assert notifier.messages("success") == ["Logged out successfully"]
