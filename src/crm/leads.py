# src/crm/leads.py
"""Lead reads and writes."""

from __future__ import annotations

from realtycrm.actor.models import Lead, LeadStatus, PaginatedLeads, Principal
from realtycrm.cache import keys as k
from realtycrm.crm.base import ResourceBase, fallback


class LeadOperations(ResourceBase):

    async def get_all_leads_paginated(
        self, page_index: int, page_size: int
    ) -> PaginatedLeads:
        return await self._query(
            (k.LEADS, "paginated", page_index, page_size),
            lambda actor: actor.get_all_leads(page_index, page_size),
            default=PaginatedLeads.empty(),
            policy=fallback("Failed to load leads"),
            stale_time_ms=self._settings.list_stale_time_ms,
        )

    async def get_all_leads(self) -> list[Lead]:
        async def fetch_all(actor) -> list[Lead]:
            page = await actor.get_all_leads(None, None)
            return page.leads

        return await self._query(
            (k.LEADS,),
            fetch_all,
            default=[],
            policy=fallback("Failed to load leads"),
        )

    async def get_leads_by_status(self, status: LeadStatus) -> list[Lead]:
        """Leads of one status, filtered from the full lead list."""
        return [lead for lead in await self.get_all_leads() if lead.status == status]

    async def get_lead(self, lead_id: int | None) -> Lead | None:
        return await self._query(
            (k.LEAD, lead_id),
            lambda actor: actor.get_lead(lead_id),
            default=None,
            enabled=bool(lead_id),
        )

    async def create_lead(self, lead: Lead) -> int:
        return await self._mutate(
            "create_lead",
            lambda actor: actor.add_lead(lead),
            success="Lead created successfully",
            error="Failed to create lead",
        )

    async def update_lead(self, lead_id: int, lead: Lead) -> None:
        await self._mutate(
            "update_lead",
            lambda actor: actor.update_lead(lead_id, lead),
            success="Lead updated successfully",
            error="Failed to update lead",
        )

    async def assign_lead(self, lead_id: int, agent_id: Principal) -> None:
        await self._mutate(
            "assign_lead",
            lambda actor: actor.assign_lead(lead_id, agent_id),
            success="Lead assigned successfully",
            error="Failed to assign lead",
        )

    async def delete_lead(self, lead_id: int) -> None:
        await self._mutate(
            "delete_lead",
            lambda actor: actor.delete_lead(lead_id),
            success="Lead deleted successfully",
            error="Failed to delete lead",
        )
