# src/crm/messaging.py
"""Internal messages between principals."""

from __future__ import annotations

from realtycrm.actor.models import Message, Principal
from realtycrm.cache import keys as k
from realtycrm.crm.base import ResourceBase


class MessagingOperations(ResourceBase):

    async def get_messages(self, user: Principal | None = None) -> list[Message]:
        """Messages of ``user`` (default: the caller)."""
        user = user or self._caller_principal()
        return await self._query(
            (k.MESSAGES, user),
            lambda actor: actor.get_messages(user),
            default=[],
            enabled=bool(user),
        )

    async def send_message(self, recipient: Principal, content: str) -> int:
        return await self._mutate(
            "send_message",
            lambda actor: actor.send_message(recipient, content),
            success="Message sent successfully",
            error="Failed to send message",
        )
