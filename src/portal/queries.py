# src/portal/queries.py
"""Customer portal operations: login, registration, profile and queries."""

from __future__ import annotations

from realtycrm.actor.errors import ClientValidationError, NotFoundError
from realtycrm.actor.models import (
    CustomerDashboardData,
    CustomerProfile,
    CustomerQueryResponse,
)
from realtycrm.cache import keys as k
from realtycrm.crm.base import ResourceBase
from realtycrm.crm.context import CrmContext
from realtycrm.portal.auth import CustomerAuth, validate_email, validate_phone_number

CONFIRMATION_FALLBACK = "Your Query has been submitted, Team will contact you shortly."
NOT_REGISTERED = "Phone number not registered. Please register first."


class PortalOperations(ResourceBase):
    """Reads and writes of the signed-in portal customer."""

    def __init__(self, ctx: CrmContext, auth: CustomerAuth) -> None:
        super().__init__(ctx)
        self.auth = auth

    def _validate(self, func, value):
        try:
            return func(value)
        except ClientValidationError as e:
            self.ctx.notifier.error(e.message)
            raise

    # --- Session ---

    async def customer_login(self, phone: str) -> CustomerProfile:
        """Start a session for a registered phone number.

        Raises:
            ClientValidationError: If the phone number is malformed.
            NotFoundError: If no profile is registered under it.
        """
        phone = self._validate(validate_phone_number, phone)

        async def lookup(actor) -> CustomerProfile:
            profile = await actor.get_customer_profile_by_phone(phone)
            if profile is None:
                raise NotFoundError(NOT_REGISTERED)
            return profile

        profile = await self._mutate(
            "customer_login", lookup, success="Login successful", error="Login failed"
        )
        self.auth.login(profile.phone_number)
        return profile

    async def customer_register(self, profile: CustomerProfile) -> int:
        """Register a profile and start a session for its phone number."""
        phone = self._validate(validate_phone_number, profile.phone_number)
        email = self._validate(validate_email, profile.email)
        profile = profile.model_copy(update={"phone_number": phone, "email": email})

        profile_id = await self._mutate(
            "register_customer_profile",
            lambda actor: actor.register_customer_profile(profile),
            success="Registration successful",
            error="Registration failed",
        )
        self.auth.login(phone)
        return profile_id

    async def customer_logout(self) -> None:
        await self.auth.logout()
        self.ctx.notifier.success("Logged out successfully")

    # --- Reads ---

    async def get_customer_profile(self, phone: str | None = None) -> CustomerProfile | None:
        phone = phone or self.auth.phone_number
        return await self._query(
            (k.CUSTOMER_PROFILE, phone),
            lambda actor: actor.get_customer_profile_by_phone(phone),
            default=None,
            enabled=bool(phone),
        )

    async def get_customer_queries(
        self, phone: str | None = None
    ) -> list[CustomerQueryResponse]:
        phone = phone or self.auth.phone_number
        return await self._query(
            (k.CUSTOMER_QUERIES, phone),
            lambda actor: actor.get_customer_queries_by_phone_number(phone),
            default=[],
            enabled=bool(phone),
        )

    async def get_customer_dashboard_data(
        self, phone: str | None = None
    ) -> CustomerDashboardData:
        phone = phone or self.auth.phone_number
        return await self._query(
            (k.CUSTOMER_DASHBOARD, phone),
            lambda actor: actor.get_customer_dashboard_data(phone),
            default=CustomerDashboardData(),
            enabled=bool(phone),
        )

    async def get_confirmation_message(self) -> str:
        return await self._query(
            (k.CONFIRMATION_MESSAGE,),
            lambda actor: actor.get_query_confirmation_message(),
            default=CONFIRMATION_FALLBACK,
        )

    # --- Writes ---

    async def submit_customer_query(self, response: CustomerQueryResponse) -> int:
        phone = self._validate(validate_phone_number, response.phone_number)
        response = response.model_copy(update={"phone_number": phone})
        return await self._mutate(
            "submit_customer_query",
            lambda actor: actor.submit_customer_query_response(response),
            success="Query submitted successfully",
            error="Failed to submit query",
        )
