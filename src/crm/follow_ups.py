# src/crm/follow_ups.py
"""Follow-up reads and writes."""

from __future__ import annotations

from realtycrm.actor.errors import NotFoundError
from realtycrm.actor.models import FollowUp
from realtycrm.cache import keys as k
from realtycrm.crm.base import ResourceBase, fallback


class FollowUpOperations(ResourceBase):

    async def get_all_follow_ups(self) -> list[FollowUp]:
        return await self._query(
            (k.FOLLOW_UPS,),
            lambda actor: actor.get_all_follow_ups(),
            default=[],
            policy=fallback("Failed to load follow-ups"),
        )

    async def get_pending_follow_ups(self) -> list[FollowUp]:
        """Follow-ups not yet completed, soonest due first."""
        pending = [f for f in await self.get_all_follow_ups() if not f.completed]
        return sorted(pending, key=lambda f: f.due_date)

    async def get_follow_up(self, follow_up_id: int | None) -> FollowUp | None:
        return await self._query(
            (k.FOLLOW_UP, follow_up_id),
            lambda actor: actor.get_follow_up(follow_up_id),
            default=None,
            enabled=bool(follow_up_id),
        )

    async def add_follow_up(self, follow_up: FollowUp) -> int:
        return await self._mutate(
            "add_follow_up",
            lambda actor: actor.add_follow_up(follow_up),
            success="Follow-up scheduled successfully",
            error="Failed to schedule follow-up",
        )

    async def complete_follow_up(self, follow_up_id: int, completed: bool = True) -> None:
        async def write(actor) -> None:
            current = await actor.get_follow_up(follow_up_id)
            if current is None:
                raise NotFoundError("Follow-up not found")
            await actor.update_follow_up(
                follow_up_id, current.model_copy(update={"completed": completed})
            )

        await self._mutate(
            "update_follow_up",
            write,
            success="Follow-up updated successfully",
            error="Failed to update follow-up",
        )
