# src/crm/whatsapp.py
"""WhatsApp configuration, message logs and click-to-chat links."""

from __future__ import annotations

import re
from urllib.parse import quote

from realtycrm.actor.errors import ClientValidationError
from realtycrm.actor.models import WhatsAppConfig, WhatsAppMessageLog
from realtycrm.cache import keys as k
from realtycrm.crm.base import ResourceBase

WA_ME_URL = "https://wa.me"

_NON_DIGITS = re.compile(r"\D")


def build_whatsapp_link(phone: str, text: str = "") -> str:
    """Click-to-chat URL for ``phone`` with a prefilled message.

    Raises:
        ClientValidationError: If ``phone`` contains no digits.
    """
    digits = _NON_DIGITS.sub("", phone or "")
    if not digits:
        raise ClientValidationError("Phone number is required")
    url = f"{WA_ME_URL}/{digits}"
    if text:
        url += f"?text={quote(text, safe='')}"
    return url


class WhatsAppOperations(ResourceBase):

    async def get_whatsapp_config(self) -> WhatsAppConfig | None:
        return await self._query(
            (k.WHATSAPP_CONFIG,),
            lambda actor: actor.get_whatsapp_config(),
            default=None,
        )

    async def is_whatsapp_active(self) -> bool:
        async def fetch(actor) -> bool:
            config = await actor.get_whatsapp_config()
            return bool(config and config.is_active)

        return await self._query((k.WHATSAPP_ACTIVE,), fetch, default=False)

    async def set_whatsapp_config(self, config: WhatsAppConfig) -> None:
        await self._mutate(
            "set_whatsapp_config",
            lambda actor: actor.set_whatsapp_config(config),
            success="WhatsApp configuration updated successfully",
            error="Failed to update WhatsApp config",
        )

    async def get_whatsapp_message_logs(self) -> list[WhatsAppMessageLog]:
        return await self._query(
            (k.WHATSAPP_MESSAGE_LOGS,),
            lambda actor: actor.get_whatsapp_message_logs(),
            default=[],
            refetch_interval_ms=self._settings.poll_interval_ms,
        )

    async def get_agent_whatsapp_message_logs(self) -> list[WhatsAppMessageLog]:
        """Logs of the leads assigned to the caller; polled."""
        principal = self._caller_principal()

        async def fetch(actor) -> list[WhatsAppMessageLog]:
            page = await actor.get_all_leads(None, None)
            lead_ids = {
                lead.id for lead in page.leads if lead.assigned_agent == principal
            }
            logs = await actor.get_whatsapp_message_logs()
            return [log for log in logs if log.lead_id in lead_ids]

        return await self._query(
            k.scoped(k.AGENT_WHATSAPP_MESSAGE_LOGS, principal),
            fetch,
            default=[],
            enabled=bool(principal),
            refetch_interval_ms=self._settings.poll_interval_ms,
        )

    async def log_whatsapp_message(self, log: WhatsAppMessageLog) -> int:
        return await self._mutate(
            "log_whatsapp_message",
            lambda actor: actor.log_whatsapp_message(log),
            error="Failed to log WhatsApp message",
        )
