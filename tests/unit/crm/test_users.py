# tests/unit/crm/test_users.py
"""Tests for crm/users.py."""

from __future__ import annotations

import pytest

from realtycrm.actor.errors import TransportError, UnauthorizedError
from realtycrm.actor.models import UserProfile, UserRole
from realtycrm.crm.users import UserOperations


class TestCallerProfile:
    @pytest.mark.asyncio
    async def test_returns_profile(self, ctx, actor, agent_profile):
        actor.profiles[actor.principal] = agent_profile
        profile = await UserOperations(ctx).get_caller_user_profile()
        assert profile.name == "Ravi Kumar"

    @pytest.mark.asyncio
    async def test_cached_for_profile_window(self, ctx, actor, agent_profile):
        actor.profiles[actor.principal] = agent_profile
        users = UserOperations(ctx)
        await users.get_caller_user_profile()
        await users.get_caller_user_profile()
        assert actor.count("get_caller_user_profile") == 1

    @pytest.mark.asyncio
    async def test_no_profile(self, ctx):
        assert await UserOperations(ctx).get_caller_user_profile() is None

    @pytest.mark.asyncio
    async def test_unauthorized_is_none(self, ctx, actor, notifier):
        actor.failures["get_caller_user_profile"] = UnauthorizedError("Unauthorized")
        assert await UserOperations(ctx).get_caller_user_profile() is None
        assert notifier.items == []

    @pytest.mark.asyncio
    async def test_other_failures_propagate(self, ctx, actor):
        actor.failures["get_caller_user_profile"] = TransportError("down")
        with pytest.raises(TransportError):
            await UserOperations(ctx).get_caller_user_profile()
        assert actor.count("get_caller_user_profile") == 1

    @pytest.mark.asyncio
    async def test_keyed_by_principal(self, ctx, actor, agent_profile):
        actor.profiles[actor.principal] = agent_profile
        await UserOperations(ctx).get_caller_user_profile()
        assert await ctx.client.get_data(("currentUserProfile", actor.principal)) == agent_profile


class TestRoleReads:
    @pytest.mark.asyncio
    async def test_is_caller_admin(self, ctx, actor):
        actor.roles[actor.principal] = UserRole.ADMIN
        assert await UserOperations(ctx).is_caller_admin() is True

    @pytest.mark.asyncio
    async def test_is_caller_admin_failure_is_false(self, ctx, actor):
        actor.failures["is_caller_admin"] = TransportError("down")
        assert await UserOperations(ctx).is_caller_admin() is False

    @pytest.mark.asyncio
    async def test_role_defaults_to_guest(self, ctx, actor):
        actor.failures["get_caller_user_role"] = TransportError("down")
        assert await UserOperations(ctx).get_caller_user_role() == UserRole.GUEST

    @pytest.mark.asyncio
    async def test_get_user_profile_disabled_without_user(self, ctx, actor):
        assert await UserOperations(ctx).get_user_profile(None) is None
        assert actor.count("get_user_profile") == 0


class TestProfileWrites:
    @pytest.mark.asyncio
    async def test_save_invalidates_profile(self, ctx, actor, notifier):
        users = UserOperations(ctx)
        assert await users.get_caller_user_profile() is None
        await users.save_caller_user_profile(UserProfile(name="Meera", role="agent"))
        assert notifier.messages("success") == ["Profile saved successfully"]
        profile = await users.get_caller_user_profile()
        assert profile.name == "Meera"
        assert actor.count("get_caller_user_profile") == 2

    @pytest.mark.asyncio
    async def test_save_failure(self, ctx, actor, notifier):
        actor.failures["save_caller_user_profile"] = TransportError("down")
        with pytest.raises(TransportError):
            await UserOperations(ctx).save_caller_user_profile(UserProfile(name="x", role="agent"))
        assert notifier.messages("error") == ["Failed to save profile: down"]

    @pytest.mark.asyncio
    async def test_assign_role(self, ctx, actor, notifier):
        await UserOperations(ctx).assign_caller_user_role("someone", UserRole.USER)
        assert actor.roles["someone"] == UserRole.USER
        assert notifier.messages("success") == ["Role assigned successfully"]
