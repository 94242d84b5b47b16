"""Unit tests for the audit recorder and restriction ledger."""

import json
import uuid
from datetime import datetime, timedelta, timezone

import pytest

from forum_trust.engines.moderation.restriction_ledger import restriction_for
from forum_trust.exceptions import ValidationError
from forum_trust.kernel.events.audit_recorder import AuditRecorder
from forum_trust.kernel.models.audit_log import AuditAction
from forum_trust.kernel.models.content import ModerationStatus
from forum_trust.kernel.models.restriction import RestrictionType


class TestAppend:
    async def test_append_serializes_values(self, audit):
        subject = uuid.uuid4()
        actor = uuid.uuid4()

        entry = await audit.append(
            subject_type="discussion",
            subject_id=subject,
            actor_id=actor,
            action_type=AuditAction.FEATURE,
            field_changed="is_featured",
            old_value=False,
            new_value=True,
        )

        assert entry["action_type"] == "feature"
        assert json.loads(entry["old_value"]) is False
        assert json.loads(entry["new_value"]) is True
        assert entry["created_at"] is not None

    async def test_none_actor_means_system(self, audit):
        entry = await audit.append(
            subject_type="report",
            subject_id=uuid.uuid4(),
            actor_id=None,
            action_type="edit",
            field_changed="status",
        )
        assert entry["actor_id"] is None
        assert entry["old_value"] is None

    async def test_unknown_action_rejected(self, audit, store):
        with pytest.raises(ValidationError):
            await audit.append(
                subject_type="user",
                subject_id=uuid.uuid4(),
                actor_id=None,
                action_type="ban",
                field_changed="role",
            )
        assert store.writes() == []

    def test_recorder_exposes_no_mutators(self):
        assert not hasattr(AuditRecorder, "update")
        assert not hasattr(AuditRecorder, "delete")

    def test_serialize_plain_types(self):
        moment = datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        value = {"when": moment, "status": ModerationStatus.REMOVED, "ids": (uuid.UUID(int=1),)}

        decoded = json.loads(AuditRecorder.serialize(value))

        assert decoded == {
            "when": "2026-01-02T03:04:05+00:00",
            "status": "removed",
            "ids": ["00000000-0000-0000-0000-000000000001"],
        }


class TestReads:
    async def _append(self, audit, subject, actor, action, subject_type="discussion"):
        return await audit.append(
            subject_type=subject_type,
            subject_id=subject,
            actor_id=actor,
            action_type=action,
            field_changed="moderation_status",
        )

    async def test_subject_history_newest_first(self, audit):
        subject = uuid.uuid4()
        first = await self._append(audit, subject, None, "quarantine")
        second = await self._append(audit, subject, None, "restore")
        await self._append(audit, uuid.uuid4(), None, "remove")

        page = await audit.subject_history(subject)

        assert page.total == 2
        assert [e["id"] for e in page.items] == [second["id"], first["id"]]
        assert not page.has_more

    async def test_subject_history_pages(self, audit):
        subject = uuid.uuid4()
        for _ in range(5):
            await self._append(audit, subject, None, "edit")

        page = await audit.subject_history(subject, limit=2, offset=2)

        assert page.total == 5
        assert len(page.items) == 2
        assert page.has_more

    async def test_search_filters(self, audit):
        mod = uuid.uuid4()
        await self._append(audit, uuid.uuid4(), mod, "quarantine")
        await self._append(audit, uuid.uuid4(), mod, "remove", subject_type="comment")
        await self._append(audit, uuid.uuid4(), uuid.uuid4(), "quarantine")

        assert (await audit.search(actor_id=mod)).total == 2
        assert (await audit.search(action_type="quarantine")).total == 2
        assert (await audit.search(actor_id=mod, target_type="comment")).total == 1

    async def test_search_time_range(self, audit):
        await self._append(audit, uuid.uuid4(), None, "edit")
        now = datetime.now(timezone.utc)

        assert (await audit.search(since=now - timedelta(minutes=1))).total == 1
        assert (await audit.search(until=now - timedelta(minutes=1))).total == 0


class TestRestrictionLedger:
    @pytest.mark.parametrize(
        "status,expected",
        [
            (ModerationStatus.APPROVED, RestrictionType.RESTORED),
            (ModerationStatus.QUARANTINED, RestrictionType.QUARANTINED),
            (ModerationStatus.REMOVED, RestrictionType.REMOVED),
            (ModerationStatus.PENDING, RestrictionType.QUARANTINED),
        ],
    )
    def test_restriction_for(self, status, expected):
        assert restriction_for(status) == expected

    async def test_latest_record(self, ledger):
        content_id = uuid.uuid4()
        moderator_id = uuid.uuid4()
        await ledger.record("comment", content_id, "quarantined", moderator_id, "spam")
        await ledger.record("comment", content_id, "restored", moderator_id, "  ")

        latest = await ledger.latest("comment", content_id)

        assert latest["restriction_type"] == "restored"
        assert latest["reason"] is None

    async def test_history_scoped_to_content_type(self, ledger):
        content_id = uuid.uuid4()
        await ledger.record("comment", content_id, "removed", uuid.uuid4())

        assert await ledger.history("discussion", content_id) == []
        assert await ledger.latest("debate", uuid.uuid4()) is None
