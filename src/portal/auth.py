# src/portal/auth.py
"""Phone-number session of the customer portal.

There is no credential check: a customer is "logged in" while a phone
number is stored under the session key. Storage failures never raise; they
are reported through :attr:`CustomerAuth.error`.
"""

from __future__ import annotations

import logging
import re

from realtycrm.actor.errors import ClientValidationError
from realtycrm.cache.query_client import QueryClient
from realtycrm.portal.storage import BaseSessionStorage, StorageError

logger = logging.getLogger(__name__)

DEFAULT_SESSION_KEY = "customer_phone"

_PHONE_RE = re.compile(r"\d{10}")
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def validate_phone_number(raw: str | None) -> str:
    """Trimmed phone number; must be exactly 10 digits.

    Raises:
        ClientValidationError: Otherwise.
    """
    phone = (raw or "").strip()
    if not _PHONE_RE.fullmatch(phone):
        raise ClientValidationError("Phone number must be exactly 10 digits")
    return phone


def validate_email(raw: str | None) -> str | None:
    """Trimmed email, or None when blank.

    Raises:
        ClientValidationError: If a non-blank value is not an email address.
    """
    email = (raw or "").strip()
    if not email:
        return None
    if not _EMAIL_RE.match(email):
        raise ClientValidationError("Please enter a valid email address")
    return email


class CustomerAuth:
    """Customer session persisted in a :class:`BaseSessionStorage`."""

    def __init__(
        self,
        storage: BaseSessionStorage,
        client: QueryClient | None = None,
        key: str = DEFAULT_SESSION_KEY,
    ) -> None:
        self._storage = storage
        self._client = client
        self._key = key
        self._phone: str | None = None
        self._loading = True
        self.error: str | None = None

    @property
    def phone_number(self) -> str | None:
        return self._phone

    @property
    def is_authenticated(self) -> bool:
        return bool(self._phone)

    @property
    def is_loading(self) -> bool:
        return self._loading

    async def load(self) -> str | None:
        """Restore the session from storage."""
        try:
            self._phone = self._storage.get_item(self._key)
            self.error = None
        except StorageError as e:
            logger.error("Error loading customer auth: %s", e)
            self._phone = None
            self.error = "Failed to load authentication state"
        finally:
            self._loading = False
        return self._phone

    def login(self, phone: str) -> bool:
        """Persist ``phone`` as the session; returns whether it was saved."""
        try:
            self._storage.set_item(self._key, phone)
        except StorageError as e:
            logger.error("Error saving customer auth: %s", e)
            self.error = "Failed to save authentication state"
            return False
        self._phone = phone
        self.error = None
        logger.info("Customer session started")
        return True

    async def logout(self) -> bool:
        """Forget the session and drop every cached read."""
        ok = True
        try:
            self._storage.remove_item(self._key)
        except StorageError as e:
            logger.error("Error clearing customer auth: %s", e)
            self.error = "Failed to clear authentication state"
            ok = False
        else:
            self._phone = None
            self.error = None
        if self._client is not None:
            await self._client.clear_all()
        return ok
