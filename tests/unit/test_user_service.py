"""Unit tests for role changes."""

import json
import uuid

import pytest

from forum_trust.exceptions import AuthorizationError, NotFoundError, ValidationError


class TestChangeRole:
    async def test_admin_promotes_member(self, user_service, store, admin, member):
        updated = await user_service.change_role(admin, member.id, "moderator", "helpful regular")

        assert updated["role"] == "moderator"
        [entry] = store.rows("moderation_audit_log")
        assert entry["action_type"] == "change_role"
        assert entry["subject_type"] == "user"
        assert json.loads(entry["old_value"]) == "user"
        assert json.loads(entry["new_value"]) == "moderator"
        assert entry["reason"] == "helpful regular"

    async def test_checked_against_stored_role(self, user_service, admin, make_user):
        peer = await make_user("admin")
        with pytest.raises(AuthorizationError):
            await user_service.change_role(admin, peer.id, "user", "demotion")

    async def test_cannot_change_own_role(self, user_service, admin):
        with pytest.raises(AuthorizationError):
            await user_service.change_role(admin, admin.id, "moderator", "stepping down")

    async def test_super_moderator_cannot_change_roles(self, user_service, store, super_moderator, member):
        store.calls.clear()
        with pytest.raises(AuthorizationError):
            await user_service.change_role(super_moderator, member.id, "moderator", "promote")
        assert store.calls == []

    async def test_reason_required(self, user_service, store, admin, member):
        with pytest.raises(ValidationError):
            await user_service.change_role(admin, member.id, "moderator", "  ")
        assert (await store.get("users", member.id))["role"] == "user"

    async def test_same_role_is_noop(self, user_service, store, owner, moderator):
        store.calls.clear()
        await user_service.change_role(owner, moderator.id, "moderator", "no change")
        assert store.writes() == []

    async def test_unknown_user(self, user_service, admin):
        with pytest.raises(NotFoundError):
            await user_service.change_role(admin, uuid.uuid4(), "moderator", "promote")

    async def test_unknown_role(self, user_service, admin, member):
        with pytest.raises(ValidationError):
            await user_service.change_role(admin, member.id, "emperor", "promote")

    async def test_audit_failure_keeps_role_change(self, user_service, store, owner, member):
        store.fail("insert", "moderation_audit_log")

        updated = await user_service.change_role(owner, member.id, "admin", "new admin")

        assert updated["role"] == "admin"


class TestReads:
    async def test_list_users_by_role(self, user_service, super_moderator, make_user):
        await make_user("moderator")
        await make_user("moderator")
        await make_user("user")

        page = await user_service.list_users(super_moderator, "moderator")

        assert page.total == 2
        assert {r["role"] for r in page.rows} == {"moderator"}

    async def test_list_users_requires_manage_users(self, user_service, moderator):
        with pytest.raises(AuthorizationError):
            await user_service.list_users(moderator)

    async def test_get_user(self, user_service, super_moderator, member):
        row = await user_service.get_user(super_moderator, member.id)
        assert row["username"] == "member"
