# src/crm/approvals.py
"""Agent approval: panel data, approval list and status changes."""

from __future__ import annotations

from realtycrm.actor.models import (
    AgentPanelData,
    ApprovalStatus,
    Principal,
    UserApprovalInfo,
)
from realtycrm.cache import keys as k
from realtycrm.crm.base import ResourceBase, propagate

_STATUS_TEXT = {
    ApprovalStatus.APPROVED: "approved",
    ApprovalStatus.REJECTED: "rejected",
    ApprovalStatus.PENDING: "set to pending",
}


class ApprovalOperations(ResourceBase):

    async def get_agent_panel_data(self) -> AgentPanelData:
        """Agents with approval statistics; polled, failures propagate."""
        return await self._query(
            (k.AGENT_PANEL_DATA,),
            lambda actor: actor.get_agent_panel_data(),
            default=AgentPanelData(),
            policy=propagate("Failed to load agent panel data"),
            refetch_interval_ms=self._settings.poll_interval_ms,
        )

    async def change_agent_approval_status(
        self, agent_principal: Principal, status: ApprovalStatus
    ) -> None:
        await self._mutate(
            "change_agent_approval_status",
            lambda actor: actor.change_agent_approval_status(agent_principal, status),
            success=f"Agent {_STATUS_TEXT[status]} successfully",
            error="Failed to change approval status",
        )

    async def list_approvals(self) -> list[UserApprovalInfo]:
        return await self._query(
            (k.APPROVALS,),
            lambda actor: actor.list_approvals(),
            default=[],
        )

    async def is_caller_approved(self) -> bool:
        return await self._query(
            k.scoped(k.IS_CALLER_APPROVED, self._caller_principal()),
            lambda actor: actor.is_caller_approved(),
            default=False,
        )

    async def request_approval(self) -> None:
        await self._mutate(
            "request_approval",
            lambda actor: actor.request_approval(),
            success="Approval requested",
            error="Failed to request approval",
        )

    async def set_approval(self, user: Principal, status: ApprovalStatus) -> None:
        await self._mutate(
            "set_approval",
            lambda actor: actor.set_approval(user, status),
            success="Approval status updated",
            error="Failed to update approval status",
        )
