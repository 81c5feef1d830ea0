# src/crm/bootstrap.py
"""Dashboard bootstrap: load the caller profile under a load timeout and
decide what the user sees next."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum

from realtycrm.actor.models import UserProfile
from realtycrm.crm.context import CrmContext
from realtycrm.crm.load_timeout import LoadTimeout
from realtycrm.crm.users import UserOperations

logger = logging.getLogger(__name__)

TIMEOUT_MESSAGE = (
    "The dashboard is taking longer than expected to load. This could be due "
    "to a slow network connection or temporary service issue."
)
ERROR_MESSAGE = (
    "We encountered an issue while loading your profile and dashboard data. "
    "This may be a temporary connection problem."
)


class LoadStatus(str, Enum):
    READY = "ready"
    NEEDS_PROFILE = "needs_profile"
    LOGGED_OUT = "logged_out"
    ERROR = "error"
    TIMED_OUT = "timed_out"


@dataclass
class DashboardLoadResult:
    """Outcome of a dashboard load."""

    status: LoadStatus
    profile: UserProfile | None = None
    message: str | None = None
    technical_details: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == LoadStatus.READY


async def load_dashboard(
    ctx: CrmContext, timeout: LoadTimeout | None = None
) -> DashboardLoadResult:
    """Load the caller profile, bounded by the dashboard load timeout.

    A timed-out load leaves the shared profile fetch running; a later load
    joins it or reads its cached result.
    """
    if not ctx.principal:
        return DashboardLoadResult(LoadStatus.LOGGED_OUT)

    timeout = timeout or LoadTimeout(ctx.settings.load_timeout_ms)
    users = UserOperations(ctx)

    timeout.reset()
    timeout.start()
    profile_task = asyncio.ensure_future(users.get_caller_user_profile())
    timer_task = asyncio.ensure_future(timeout.wait())
    try:
        await asyncio.wait(
            {profile_task, timer_task}, return_when=asyncio.FIRST_COMPLETED
        )
    finally:
        timeout.stop()
        timer_task.cancel()

    if not profile_task.done():
        profile_task.cancel()
        seconds = timeout.timeout_ms // 1000
        logger.warning("Dashboard load timed out after %d s", seconds)
        return DashboardLoadResult(
            LoadStatus.TIMED_OUT,
            message=TIMEOUT_MESSAGE,
            technical_details=f"Load timeout exceeded ({seconds} seconds)",
        )

    exc = profile_task.exception()
    if exc is not None:
        logger.error("Dashboard load failed: %s", exc)
        return DashboardLoadResult(
            LoadStatus.ERROR,
            message=ERROR_MESSAGE,
            technical_details=f"Error: {exc}",
        )

    profile = profile_task.result()
    if profile is None:
        return DashboardLoadResult(LoadStatus.NEEDS_PROFILE)
    return DashboardLoadResult(LoadStatus.READY, profile=profile)


async def retry_from_scratch(
    ctx: CrmContext, timeout: LoadTimeout | None = None
) -> DashboardLoadResult:
    """Drop every cached read, then load the dashboard again."""
    await ctx.client.clear_all()
    return await load_dashboard(ctx, timeout)
