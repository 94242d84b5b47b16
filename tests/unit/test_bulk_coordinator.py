"""Unit tests for bulk operations and partial failure reporting."""

import uuid

import pytest

from forum_trust.exceptions import AuthorizationError, ValidationError

AUDIT = "moderation_audit_log"
RESTRICTIONS = "content_restrictions"


class TestBulkTransition:
    async def test_all_succeed(self, bulk, store, moderator, make_content):
        items = [await make_content("comment") for _ in range(3)]

        result = await bulk.bulk_transition(
            moderator, "comment", [i["id"] for i in items], "quarantined", "spam wave"
        )

        assert result.processed == 3
        assert result.failed == []
        assert {r["moderation_status"] for r in store.rows("comments")} == {"quarantined"}
        assert len(store.rows(RESTRICTIONS)) == 3
        assert len(store.rows(AUDIT)) == 3

    async def test_missing_and_invalid_ids_reported(self, bulk, moderator, make_content):
        item = await make_content("comment")
        missing = uuid.uuid4()

        result = await bulk.bulk_transition(
            moderator, "comment", [item["id"], missing, "not-a-uuid"], "removed", "cleanup"
        )

        assert result.processed == 1
        assert result.total == 3
        failures = {f.id: f.code for f in result.failed}
        assert failures == {str(missing): "not_found", "not-a-uuid": "validation_error"}

    async def test_duplicates_counted_once(self, bulk, store, moderator, make_content):
        item = await make_content("discussion")

        result = await bulk.bulk_transition(
            moderator, "discussion", [item["id"], str(item["id"])], "removed", "dup"
        )

        assert result.processed == 1
        assert len(store.rows(AUDIT)) == 1

    async def test_items_at_target_count_as_processed(self, bulk, store, moderator, make_content):
        done = await make_content("debate", moderation_status="removed")
        todo = await make_content("debate")

        result = await bulk.bulk_transition(
            moderator, "debate", [done["id"], todo["id"]], "removed", "cleanup"
        )

        assert result.processed == 2
        assert [e["subject_id"] for e in store.rows(AUDIT)] == [todo["id"]]

    async def test_storage_failure_fails_every_row(self, bulk, store, moderator, make_content):
        items = [await make_content("comment") for _ in range(2)]
        store.fail("update", "comments")

        result = await bulk.bulk_transition(
            moderator, "comment", [i["id"] for i in items], "removed", "cleanup"
        )

        assert result.processed == 0
        assert {f.code for f in result.failed} == {"storage_error"}
        assert store.rows(AUDIT) == []

    async def test_reason_checked_before_any_write(self, bulk, store, moderator, make_content):
        item = await make_content("comment")
        store.calls.clear()

        with pytest.raises(ValidationError):
            await bulk.bulk_transition(moderator, "comment", [item["id"]], "removed", " ")
        assert store.writes() == []

    async def test_no_reason_needed_when_nothing_changes(self, bulk, store, engine, moderator, make_content):
        item = await make_content("comment", moderation_status="quarantined")
        store.calls.clear()

        single = await engine.transition(moderator, "comment", item["id"], "quarantined")
        result = await bulk.bulk_transition(moderator, "comment", [item["id"]], "quarantined")

        assert single.changed is False
        assert result.processed == 1
        assert result.failed == []
        assert store.writes() == []

    async def test_lookup_failure_fails_every_item(self, bulk, store, moderator, make_content):
        items = [await make_content("comment") for _ in range(2)]
        store.fail("query", "comments")
        store.calls.clear()

        result = await bulk.bulk_transition(
            moderator, "comment", [i["id"] for i in items] + ["not-a-uuid"], "removed", "cleanup"
        )

        assert result.processed == 0
        codes = {f.id: f.code for f in result.failed}
        assert codes == {
            str(items[0]["id"]): "storage_error",
            str(items[1]["id"]): "storage_error",
            "not-a-uuid": "validation_error",
        }
        assert store.writes() == []

    async def test_member_rejected(self, bulk, member, make_content):
        item = await make_content("comment")
        with pytest.raises(AuthorizationError):
            await bulk.bulk_transition(member, "comment", [item["id"]], "approved")


class TestBulkRoles:
    async def test_partial_failure_per_user(self, bulk, store, admin, make_user):
        regular = await make_user("user")
        peer = await make_user("admin")

        result = await bulk.bulk_change_roles(
            admin, [regular.id, peer.id], "moderator", "staffing"
        )

        assert result.processed == 1
        [failure] = result.failed
        assert failure.id == str(peer.id)
        assert failure.code == "authorization_error"
        assert (await store.get("users", regular.id))["role"] == "moderator"
        assert (await store.get("users", peer.id))["role"] == "admin"

    async def test_unexpected_error_is_per_item(self, bulk, store, admin, make_user, monkeypatch):
        first = await make_user("user")
        broken = await make_user("user")
        change_role = bulk.users.change_role

        async def flaky_change_role(actor, user_id, new_role, reason):
            if user_id == broken.id:
                raise RuntimeError("connection reset")
            return await change_role(actor, user_id, new_role, reason)

        monkeypatch.setattr(bulk.users, "change_role", flaky_change_role)

        result = await bulk.bulk_change_roles(admin, [first.id, broken.id], "moderator", "staffing")

        assert result.processed == 1
        [failure] = result.failed
        assert failure.id == str(broken.id)
        assert failure.code == "internal_error"
        assert (await store.get("users", first.id))["role"] == "moderator"

    async def test_reason_required_upfront(self, bulk, store, admin, member):
        store.calls.clear()
        with pytest.raises(ValidationError):
            await bulk.bulk_change_roles(admin, [member.id], "moderator", None)
        assert store.calls == []


class TestBulkDiscussionControls:
    async def test_only_differing_rows_updated(self, bulk, store, outbox, moderator, make_content):
        plain = await make_content("discussion")
        featured = await make_content("discussion", is_featured=True)

        result = await bulk.bulk_update_discussion_controls(
            moderator, [plain["id"], featured["id"]], {"is_featured": True}
        )

        assert result.processed == 2
        assert [e["subject_id"] for e in store.rows(AUDIT)] == [plain["id"]]
        assert outbox.pending == 1

    async def test_multiple_flags_audited_separately(self, bulk, store, moderator, discussion):
        await bulk.bulk_update_discussion_controls(
            moderator, [discussion["id"]], {"is_pinned": True, "is_promoted": True}
        )

        assert sorted(e["action_type"] for e in store.rows(AUDIT)) == ["pin", "promote"]
        row = await store.get("discussions", discussion["id"])
        assert row["is_pinned"] and row["is_promoted"]

    @pytest.mark.parametrize("flags", [{}, {"is_locked": True}])
    async def test_flag_keys_validated(self, bulk, moderator, discussion, flags):
        with pytest.raises(ValidationError):
            await bulk.bulk_update_discussion_controls(moderator, [discussion["id"]], flags)


class TestBulkReports:
    async def test_resolve_many(self, bulk, store, report_service, moderator, member, discussion):
        reports = [
            await report_service.create_report(member, "discussion", discussion["id"], "spam")
            for _ in range(2)
        ]

        result = await bulk.bulk_update_report_status(
            moderator, [r["id"] for r in reports], "resolved"
        )

        assert result.processed == 2
        assert {r["resolved_by"] for r in store.rows("reports")} == {moderator.id}
        created = {r["id"]: r["created_at"] for r in reports}
        assert all(r["resolved_at"] >= created[r["id"]] for r in store.rows("reports"))
        assert {e["action_type"] for e in store.rows(AUDIT)} == {"resolve_report"}


class TestBulkDelete:
    async def test_delete_skips_already_deleted(self, bulk, store, moderator, make_content):
        live = await make_content("comment")
        gone = await make_content("comment", deleted_at=live["created_at"])

        result = await bulk.bulk_delete(moderator, "comment", [live["id"], gone["id"]], "purge")

        assert result.processed == 2
        assert [e["subject_id"] for e in store.rows(AUDIT)] == [live["id"]]

    async def test_authors_cannot_bulk_delete(self, bulk, member, discussion):
        with pytest.raises(AuthorizationError):
            await bulk.bulk_delete(member, "discussion", [discussion["id"]])
