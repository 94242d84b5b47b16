"""
Homepage section controls - visibility and ordering of homepage sections.
"""

from typing import List, Mapping, Optional

from forum_trust.engines.best_effort import best_effort
from forum_trust.exceptions import NotFoundError, ValidationError
from forum_trust.kernel.events.audit_recorder import AuditRecorder
from forum_trust.kernel.identity.actor import Actor
from forum_trust.kernel.models.audit_log import AuditAction
from forum_trust.kernel.models.base import utcnow
from forum_trust.kernel.models.notification import HomepageSectionControl
from forum_trust.kernel.permissions.authorization_gate import AuthorizationGate
from forum_trust.kernel.permissions.policy import Operation
from forum_trust.kernel.store.base import QueryOptions, Record, RecordId, Store
from forum_trust.kernel.validators import coerce_uuid
from forum_trust.logging_config import get_logger

logger = get_logger(__name__)

SECTIONS = HomepageSectionControl.__tablename__
SUBJECT_TYPE = "homepage_section"


class HomepageControls:
    """Settings-level controls over the homepage layout."""

    def __init__(
        self,
        store: Store,
        gate: AuthorizationGate,
        audit: Optional[AuditRecorder] = None,
    ):
        self.store = store
        self.gate = gate
        self.audit = audit or AuditRecorder(store)

    async def list_sections(self, visible_only: bool = False) -> List[Record]:
        filters = {"is_visible": True} if visible_only else {}
        result = await self.store.query(
            SECTIONS, filters, QueryOptions(order_by="display_order", descending=False)
        )
        return result.rows

    async def _audit_edit(self, actor: Actor, section: Record, field: str, new_value) -> None:
        await best_effort(
            self.audit.append(
                subject_type=SUBJECT_TYPE,
                subject_id=section["id"],
                actor_id=actor.id,
                action_type=AuditAction.EDIT,
                field_changed=field,
                old_value=section.get(field),
                new_value=new_value,
            ),
            "homepage section audit",
            section_id=section["id"],
        )

    async def set_visibility(self, actor: Actor, section_id: RecordId, visible: bool) -> Record:
        self.gate.require(actor.role, Operation.MANAGE_SETTINGS)
        section = await self.store.get(SECTIONS, coerce_uuid(section_id, "section_id"))
        if section is None:
            raise NotFoundError(f"Homepage section {section_id} not found")
        if bool(section["is_visible"]) == visible:
            return section

        updated = await self.store.update_one(
            SECTIONS, section["id"], {"is_visible": visible, "updated_at": utcnow()}, "Homepage section"
        )
        await self._audit_edit(actor, section, "is_visible", visible)
        logger.info(
            "Homepage section visibility changed",
            extra={"section_key": section["section_key"], "visible": visible},
        )
        return updated

    async def reorder(self, actor: Actor, orders: Mapping[RecordId, int]) -> List[Record]:
        """
        Apply new display positions.

        ``orders`` maps section id to position. Every id must exist;
        positions must be non-negative. Returns all sections in the new order.
        """
        self.gate.require(actor.role, Operation.MANAGE_SETTINGS)
        wanted = {}
        for section_id, position in orders.items():
            if not isinstance(position, int) or position < 0:
                raise ValidationError("display_order must be a non-negative integer", field="display_order")
            wanted[coerce_uuid(section_id, "section_id")] = position

        found = await self.store.query(SECTIONS, {"id__in": list(wanted)}, QueryOptions(order_by=None))
        by_id = {row["id"]: row for row in found.rows}
        missing = [str(i) for i in wanted if i not in by_id]
        if missing:
            raise NotFoundError(f"Homepage sections not found: {', '.join(missing)}")

        now = utcnow()
        for section_id, position in wanted.items():
            section = by_id[section_id]
            if section["display_order"] == position:
                continue
            await self.store.update(SECTIONS, section_id, {"display_order": position, "updated_at": now})
            await self._audit_edit(actor, section, "display_order", position)

        return await self.list_sections()
