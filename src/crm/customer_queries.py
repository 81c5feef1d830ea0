# src/crm/customer_queries.py
"""Customer (property) queries: admin and agent lists, create, status and
agent changes."""

from __future__ import annotations

from realtycrm.actor.errors import NotFoundError
from realtycrm.actor.models import CustomerQuery, Principal, QueryStatus
from realtycrm.cache import keys as k
from realtycrm.crm.base import ResourceBase, fallback


class CustomerQueryOperations(ResourceBase):

    async def get_all_customer_queries(self) -> list[CustomerQuery]:
        return await self._query(
            (k.CUSTOMER_QUERIES, "admin"),
            lambda actor: actor.get_all_customer_queries(),
            default=[],
            policy=fallback("Failed to load customer queries"),
        )

    async def get_agent_customer_queries(self) -> list[CustomerQuery]:
        """Queries assigned to the caller; disabled while signed out."""
        principal = self._caller_principal()
        return await self._query(
            (k.CUSTOMER_QUERIES, "agent", principal),
            lambda actor: actor.get_agent_customer_queries(principal),
            default=[],
            policy=fallback("Failed to load your customer queries"),
            enabled=bool(principal),
        )

    async def get_customer_query(self, query_id: int | None) -> CustomerQuery | None:
        return await self._query(
            (k.CUSTOMER_QUERY, query_id),
            lambda actor: actor.get_customer_query(query_id),
            default=None,
            enabled=bool(query_id),
        )

    async def create_customer_query(self, customer_query: CustomerQuery) -> int:
        return await self._mutate(
            "create_customer_query",
            lambda actor: actor.add_customer_query(customer_query),
            success="Customer query created and assigned successfully",
            error="Failed to create customer query",
        )

    async def update_customer_query_status(
        self, query_id: int, status: QueryStatus
    ) -> None:
        await self._rewrite(
            query_id,
            {"status": status},
            success="Query status updated successfully",
            error="Failed to update query status",
        )

    async def assign_agent_to_customer_query(
        self, query_id: int, agent: Principal
    ) -> None:
        await self._rewrite(
            query_id,
            {"assigned_agent": agent},
            success="Agent assigned successfully",
            error="Failed to assign agent",
        )

    async def _rewrite(
        self, query_id: int, changes: dict, *, success: str, error: str
    ) -> None:
        # Read-modify-write: the backend only accepts whole records.
        async def write(actor) -> None:
            current = await actor.get_customer_query(query_id)
            if current is None:
                raise NotFoundError("Query not found")
            await actor.update_customer_query(
                query_id, current.model_copy(update=changes)
            )

        await self._mutate(
            "update_customer_query", write, success=success, error=error
        )
