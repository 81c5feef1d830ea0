# src/crm/aggregates.py
"""Dashboard aggregates computed by the backend."""

from __future__ import annotations

from realtycrm.actor.models import CrmDashboardData, CustomerPanels, OverviewMetrics
from realtycrm.cache import keys as k
from realtycrm.crm.base import ResourceBase, propagate


class AggregateOperations(ResourceBase):

    async def get_overview_metrics(self) -> OverviewMetrics | None:
        return await self._query(
            (k.OVERVIEW_METRICS,),
            lambda actor: actor.get_overview_metrics(),
            default=None,
            policy=propagate("Failed to load dashboard metrics"),
            stale_time_ms=self._settings.list_stale_time_ms,
        )

    async def get_crm_dashboard_data(self) -> CrmDashboardData | None:
        return await self._query(
            (k.CRM_DASHBOARD_DATA,),
            lambda actor: actor.get_crm_dashboard_data(),
            default=None,
            policy=propagate("Failed to load dashboard data"),
            stale_time_ms=self._settings.list_stale_time_ms,
        )

    async def get_customer_panels(self) -> CustomerPanels:
        return await self._query(
            (k.CUSTOMER_PANELS,),
            lambda actor: actor.get_customer_panels(),
            default=CustomerPanels(),
        )
