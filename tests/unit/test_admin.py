"""Unit tests for homepage controls and dashboard metrics."""

import uuid

import pytest

from forum_trust.exceptions import AuthorizationError, NotFoundError, ValidationError

SECTIONS = "homepage_section_controls"
AUDIT = "moderation_audit_log"


@pytest.fixture
def make_section(store):
    async def factory(key: str, order: int, visible: bool = True):
        rows = await store.insert(
            SECTIONS,
            {"section_key": key, "title": key.title(), "display_order": order, "is_visible": visible},
        )
        return rows[0]

    return factory


class TestHomepageControls:
    async def test_sections_listed_in_display_order(self, homepage, make_section):
        await make_section("trending", 2)
        await make_section("featured", 0)
        await make_section("latest", 1, visible=False)

        assert [s["section_key"] for s in await homepage.list_sections()] == [
            "featured", "latest", "trending"
        ]
        assert [s["section_key"] for s in await homepage.list_sections(visible_only=True)] == [
            "featured", "trending"
        ]

    async def test_hide_section(self, homepage, store, admin, make_section):
        section = await make_section("featured", 0)

        updated = await homepage.set_visibility(admin, section["id"], False)

        assert updated["is_visible"] is False
        [entry] = store.rows(AUDIT)
        assert entry["subject_type"] == "homepage_section"
        assert entry["field_changed"] == "is_visible"

    async def test_visibility_requires_settings_role(self, homepage, super_moderator, make_section):
        section = await make_section("featured", 0)
        with pytest.raises(AuthorizationError):
            await homepage.set_visibility(super_moderator, section["id"], False)

    async def test_reorder_swaps_positions(self, homepage, store, admin, make_section):
        first = await make_section("featured", 0)
        second = await make_section("latest", 1)

        sections = await homepage.reorder(admin, {first["id"]: 1, second["id"]: 0})

        assert [s["section_key"] for s in sections] == ["latest", "featured"]
        assert len(store.rows(AUDIT)) == 2

    async def test_reorder_skips_unchanged(self, homepage, store, admin, make_section):
        first = await make_section("featured", 0)
        second = await make_section("latest", 1)

        await homepage.reorder(admin, {first["id"]: 0, second["id"]: 5})

        [entry] = store.rows(AUDIT)
        assert entry["subject_id"] == second["id"]

    async def test_reorder_unknown_section(self, homepage, store, admin, make_section):
        section = await make_section("featured", 0)
        store.calls.clear()

        with pytest.raises(NotFoundError):
            await homepage.reorder(admin, {section["id"]: 3, uuid.uuid4(): 1})
        assert store.writes() == []

    async def test_reorder_negative_position(self, homepage, admin, make_section):
        section = await make_section("featured", 0)
        with pytest.raises(ValidationError):
            await homepage.reorder(admin, {section["id"]: -1})


class TestDashboard:
    async def test_metrics(self, dashboard, report_service, member, moderator, admin, make_content):
        discussion = await make_content("discussion", member)
        await make_content("discussion", moderation_status="quarantined")
        await make_content("comment", moderation_status="quarantined")
        await make_content("comment", moderation_status="quarantined", deleted_at=discussion["created_at"])
        await report_service.create_report(member, "discussion", discussion["id"], "spam")

        metrics = await dashboard.metrics(moderator)

        assert metrics.to_dict() == {
            "total_users": 3,
            "total_discussions": 2,
            "total_comments": 1,
            "unresolved_reports": 1,
            "quarantined_content": 2,
            "staff_accounts": 2,
        }

    async def test_metrics_require_moderator(self, dashboard, member):
        with pytest.raises(AuthorizationError):
            await dashboard.metrics(member)
