# src/crm/templates.py
"""Message template reads and writes."""

from __future__ import annotations

from realtycrm.actor.models import MessageTemplate, TemplateCategory
from realtycrm.cache import keys as k
from realtycrm.crm.base import ResourceBase


class TemplateOperations(ResourceBase):

    async def get_all_templates(self) -> list[MessageTemplate]:
        return await self._query(
            (k.TEMPLATES,),
            lambda actor: actor.get_all_templates(),
            default=[],
        )

    async def get_templates_by_category(
        self, category: TemplateCategory
    ) -> list[MessageTemplate]:
        return [t for t in await self.get_all_templates() if t.category == category]

    async def get_default_follow_up_template(self) -> MessageTemplate | None:
        """First follow-up template, if any."""
        for template in await self.get_all_templates():
            if template.category == TemplateCategory.FOLLOW_UP:
                return template
        return None

    async def get_template(self, template_id: int | None) -> MessageTemplate | None:
        return await self._query(
            (k.TEMPLATE, template_id),
            lambda actor: actor.get_template(template_id),
            default=None,
            enabled=bool(template_id),
        )

    async def save_template(self, template: MessageTemplate) -> int:
        """Create (id 0) or replace a template; returns its id."""

        async def write(actor) -> int:
            if template.id == 0:
                return await actor.add_template(template)
            await actor.update_template(template.id, template)
            return template.id

        return await self._mutate(
            "save_template",
            write,
            success="Template saved successfully",
            error="Failed to save template",
        )

    async def delete_template(self, template_id: int) -> None:
        await self._mutate(
            "delete_template",
            lambda actor: actor.delete_template(template_id),
            success="Template deleted successfully",
            error="Failed to delete template",
        )
