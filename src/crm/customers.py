# src/crm/customers.py
"""Customer reads (paged and full) and writes."""

from __future__ import annotations

from realtycrm.actor.models import Customer, PaginatedCustomers
from realtycrm.cache import keys as k
from realtycrm.crm.base import ResourceBase, fallback


class CustomerOperations(ResourceBase):

    async def get_all_customers_paginated(
        self, page_index: int, page_size: int
    ) -> PaginatedCustomers:
        """One page of customers (1-based index); empty page on failure."""
        return await self._query(
            (k.CUSTOMERS, "paginated", page_index, page_size),
            lambda actor: actor.get_all_customers(page_index, page_size),
            default=PaginatedCustomers.empty(),
            policy=fallback("Failed to load customers"),
            stale_time_ms=self._settings.list_stale_time_ms,
        )

    async def get_all_customers(self) -> list[Customer]:
        async def fetch_all(actor) -> list[Customer]:
            page = await actor.get_all_customers(None, None)
            return page.customers

        return await self._query(
            (k.CUSTOMERS,),
            fetch_all,
            default=[],
            policy=fallback("Failed to load customers"),
        )

    async def get_customer(self, customer_id: int | None) -> Customer | None:
        return await self._query(
            (k.CUSTOMER, customer_id),
            lambda actor: actor.get_customer(customer_id),
            default=None,
            enabled=bool(customer_id),
        )

    async def add_customer(self, customer: Customer) -> int:
        return await self._mutate(
            "add_customer",
            lambda actor: actor.add_customer(customer),
            success="Customer added successfully",
            error="Failed to add customer",
        )

    async def update_customer(self, customer_id: int, customer: Customer) -> None:
        await self._mutate(
            "update_customer",
            lambda actor: actor.update_customer(customer_id, customer),
            success="Customer updated successfully",
            error="Failed to update customer",
        )
