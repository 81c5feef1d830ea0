# src/crm/users.py
"""Caller profile, role and admin-flag reads; profile and role writes."""

from __future__ import annotations

from realtycrm.actor.errors import ErrorKind
from realtycrm.actor.models import Principal, UserProfile, UserRole
from realtycrm.cache import keys as k
from realtycrm.crm.base import ResourceBase, fallback, fallback_on


class UserOperations(ResourceBase):
    """Profile and role operations of the signed-in user."""

    async def get_caller_user_profile(self) -> UserProfile | None:
        """Caller profile; None when the caller has none or is unauthorized.

        Other failures propagate so the dashboard loader can show an error
        state instead of the profile setup form.
        """
        return await self._query(
            k.scoped(k.CURRENT_USER_PROFILE, self._caller_principal()),
            lambda actor: actor.get_caller_user_profile(),
            default=None,
            policy=fallback_on(ErrorKind.UNAUTHORIZED),
            stale_time_ms=self._settings.profile_stale_time_ms,
            retry=False,
        )

    async def get_user_profile(self, user: Principal | None) -> UserProfile | None:
        return await self._query(
            (k.USER_PROFILE, user),
            lambda actor: actor.get_user_profile(user),
            default=None,
            enabled=bool(user),
        )

    async def is_caller_admin(self) -> bool:
        return await self._query(
            k.scoped(k.IS_CALLER_ADMIN, self._caller_principal()),
            lambda actor: actor.is_caller_admin(),
            default=False,
            retry=False,
        )

    async def get_caller_user_role(self) -> UserRole:
        return await self._query(
            k.scoped(k.CALLER_USER_ROLE, self._caller_principal()),
            lambda actor: actor.get_caller_user_role(),
            default=UserRole.GUEST,
            policy=fallback(),
            retry=False,
        )

    async def save_caller_user_profile(self, profile: UserProfile) -> None:
        await self._mutate(
            "save_caller_user_profile",
            lambda actor: actor.save_caller_user_profile(profile),
            success="Profile saved successfully",
            error="Failed to save profile",
        )

    async def assign_caller_user_role(self, user: Principal, role: UserRole) -> None:
        await self._mutate(
            "assign_caller_user_role",
            lambda actor: actor.assign_caller_user_role(user, role),
            success="Role assigned successfully",
            error="Failed to assign role",
        )
