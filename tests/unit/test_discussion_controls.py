"""Unit tests for discussion flags and soft deletion."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from forum_trust.exceptions import AuthorizationError, NotFoundError

AUDIT = "moderation_audit_log"


class TestFlags:
    async def test_feature_stamps_and_notifies(self, controls, store, outbox, notifier, moderator, member, discussion):
        updated = await controls.set_featured(moderator, discussion["id"], True)

        assert updated["is_featured"] is True
        assert updated["featured_by"] == moderator.id
        assert updated["featured_at"] is not None
        assert [e["action_type"] for e in store.rows(AUDIT)] == ["feature"]

        await outbox.deliver_pending()
        [message] = notifier.delivered
        assert message.user_id == member.id
        assert "mod" in message.content

    async def test_unfeature_clears_stamp(self, controls, store, outbox, moderator, make_content):
        item = await make_content("discussion", is_featured=True, featured_by=uuid.uuid4())

        updated = await controls.set_featured(moderator, item["id"], False)

        assert updated["featured_by"] is None
        assert updated["featured_at"] is None
        assert store.rows(AUDIT)[0]["action_type"] == "unfeature"
        assert outbox.pending == 0

    async def test_promote_with_end_date(self, controls, store, moderator, discussion):
        end = datetime.now(timezone.utc) + timedelta(days=7)

        updated = await controls.set_promoted(moderator, discussion["id"], True, end)

        assert updated["is_promoted"] is True
        assert updated["promoted_end_date"] == end
        assert updated["promoted_start_date"] is not None
        assert store.rows(AUDIT)[0]["action_type"] == "promote"

    async def test_unpin(self, controls, store, moderator, make_content):
        item = await make_content("discussion", is_pinned=True)

        updated = await controls.set_pinned(moderator, item["id"], False)

        assert updated["is_pinned"] is False
        assert store.rows(AUDIT)[0]["action_type"] == "unpin"

    async def test_unchanged_flag_is_noop(self, controls, store, moderator, discussion):
        store.calls.clear()
        await controls.set_pinned(moderator, discussion["id"], False)
        assert store.writes() == []

    async def test_member_cannot_set_flags(self, controls, member, discussion):
        with pytest.raises(AuthorizationError):
            await controls.set_featured(member, discussion["id"], True)

    async def test_missing_discussion(self, controls, moderator):
        with pytest.raises(NotFoundError):
            await controls.set_pinned(moderator, uuid.uuid4(), True)

    async def test_discussion_deleted_before_flag_write(self, controls, store, moderator, discussion):
        store.vanish_after_get("discussions")

        with pytest.raises(NotFoundError):
            await controls.set_pinned(moderator, discussion["id"], True)
        assert store.rows(AUDIT) == []

    async def test_promotion_expiration_is_audited_as_edit(self, controls, store, moderator, discussion):
        end = datetime(2027, 1, 1, tzinfo=timezone.utc)

        updated = await controls.update_promotion_expiration(moderator, discussion["id"], end)

        assert updated["promoted_end_date"] == end
        [entry] = store.rows(AUDIT)
        assert entry["action_type"] == "edit"
        assert entry["field_changed"] == "promoted_end_date"


class TestDelete:
    async def test_author_may_delete_own(self, controls, store, member, discussion):
        updated = await controls.delete_content(member, "discussion", discussion["id"])

        assert updated["deleted_at"] is not None
        assert updated["deleted_by"] == member.id
        assert store.rows(AUDIT)[0]["action_type"] == "delete"

    async def test_moderator_may_delete_any(self, controls, moderator, make_content):
        item = await make_content("comment")
        updated = await controls.delete_content(moderator, "comment", item["id"], "off topic")
        assert updated["deleted_by"] == moderator.id

    async def test_other_member_rejected(self, controls, store, make_user, discussion):
        stranger = await make_user("user")
        with pytest.raises(AuthorizationError):
            await controls.delete_content(stranger, "discussion", discussion["id"])
        assert store.rows(AUDIT) == []

    async def test_already_deleted_is_noop(self, controls, store, member, discussion):
        await controls.delete_content(member, "discussion", discussion["id"])
        store.calls.clear()

        await controls.delete_content(member, "discussion", discussion["id"])

        assert store.writes() == []

    async def test_content_deleted_between_read_and_write(self, controls, store, moderator, make_content):
        item = await make_content("comment")
        store.vanish_after_get("comments")

        with pytest.raises(NotFoundError):
            await controls.delete_content(moderator, "comment", item["id"], "off topic")
        assert store.rows(AUDIT) == []
