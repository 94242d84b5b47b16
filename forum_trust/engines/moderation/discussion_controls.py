"""
Discussion controls - featured / promoted / pinned flags and soft deletion.

The flags are orthogonal to ``moderation_status``. Every change writes the
row first and then one audit entry, best-effort.
"""

import uuid
from datetime import datetime
from typing import Any, Dict, Optional, Union

from forum_trust.engines.best_effort import best_effort
from forum_trust.exceptions import AuthorizationError, NotFoundError
from forum_trust.kernel.events.audit_recorder import AuditRecorder
from forum_trust.kernel.identity.actor import Actor
from forum_trust.kernel.models.audit_log import AuditAction
from forum_trust.kernel.models.base import utcnow
from forum_trust.kernel.models.content import ContentType, Discussion, table_for
from forum_trust.kernel.permissions.authorization_gate import AuthorizationGate
from forum_trust.kernel.permissions.policy import Operation
from forum_trust.kernel.store.base import Record, RecordId, Store
from forum_trust.kernel.validators import coerce_enum, coerce_uuid
from forum_trust.logging_config import get_logger
from forum_trust.orchestration.notification_outbox import (
    NotificationOutbox,
    featured_discussion_message,
)

logger = get_logger(__name__)

DISCUSSIONS = Discussion.__tablename__

# flag column -> (action when set, action when cleared)
FLAG_ACTIONS = {
    "is_featured": (AuditAction.FEATURE, AuditAction.UNFEATURE),
    "is_promoted": (AuditAction.PROMOTE, AuditAction.UNPROMOTE),
    "is_pinned": (AuditAction.PIN, AuditAction.UNPIN),
}


def feature_fields(value: bool, actor_id: uuid.UUID, now: datetime) -> Dict[str, Any]:
    return {
        "is_featured": value,
        "featured_at": now if value else None,
        "featured_by": actor_id if value else None,
    }


def promote_fields(
    value: bool,
    actor_id: uuid.UUID,
    now: datetime,
    end_date: Optional[datetime] = None,
) -> Dict[str, Any]:
    return {
        "is_promoted": value,
        "promoted_start_date": now if value else None,
        "promoted_end_date": end_date if value else None,
        "promoted_by": actor_id if value else None,
    }


def flag_fields(
    flags: Dict[str, bool],
    actor_id: uuid.UUID,
    now: datetime,
    promoted_end_date: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Column updates for a set of flag changes."""
    fields: Dict[str, Any] = {}
    if "is_featured" in flags:
        fields.update(feature_fields(flags["is_featured"], actor_id, now))
    if "is_promoted" in flags:
        fields.update(promote_fields(flags["is_promoted"], actor_id, now, promoted_end_date))
    if "is_pinned" in flags:
        fields["is_pinned"] = flags["is_pinned"]
    return fields


def flag_action(flag: str, value: bool) -> AuditAction:
    on, off = FLAG_ACTIONS[flag]
    return on if value else off


class DiscussionControls:
    """Homepage control flags on discussions plus soft deletion of content."""

    def __init__(
        self,
        store: Store,
        gate: AuthorizationGate,
        audit: Optional[AuditRecorder] = None,
        outbox: Optional[NotificationOutbox] = None,
    ):
        self.store = store
        self.gate = gate
        self.audit = audit or AuditRecorder(store)
        self.outbox = outbox

    async def _load(self, discussion_id: RecordId) -> Record:
        row = await self.store.get(DISCUSSIONS, coerce_uuid(discussion_id, "discussion_id"))
        if row is None:
            raise NotFoundError(f"Discussion {discussion_id} not found")
        return row

    def notify_featured(self, discussion: Record, actor: Actor) -> bool:
        """Queue the 'your discussion was featured' notification for the author."""
        if self.outbox is None:
            return False
        return self.outbox.enqueue(featured_discussion_message(discussion, actor.username))

    async def _set_flag(
        self,
        actor: Actor,
        discussion_id: RecordId,
        flag: str,
        value: bool,
        promoted_end_date: Optional[datetime] = None,
    ) -> Record:
        self.gate.require(actor.role, Operation.MODERATE_CONTENT)
        row = await self._load(discussion_id)
        old_value = bool(row.get(flag))
        if old_value == value:
            return row

        fields = flag_fields({flag: value}, actor.id, utcnow(), promoted_end_date)
        updated = await self.store.update_one(DISCUSSIONS, row["id"], fields, "Discussion")

        await best_effort(
            self.audit.append(
                subject_type=ContentType.DISCUSSION.value,
                subject_id=row["id"],
                actor_id=actor.id,
                action_type=flag_action(flag, value),
                field_changed=flag,
                old_value=old_value,
                new_value=value,
            ),
            "discussion flag audit",
            discussion_id=row["id"],
        )
        if flag == "is_featured" and value:
            self.notify_featured(updated, actor)

        logger.info(
            "Discussion flag changed",
            extra={"discussion_id": str(row["id"]), "flag": flag, "value": value},
        )
        return updated

    async def set_featured(self, actor: Actor, discussion_id: RecordId, value: bool) -> Record:
        return await self._set_flag(actor, discussion_id, "is_featured", value)

    async def set_promoted(
        self,
        actor: Actor,
        discussion_id: RecordId,
        value: bool,
        end_date: Optional[datetime] = None,
    ) -> Record:
        return await self._set_flag(actor, discussion_id, "is_promoted", value, end_date)

    async def set_pinned(self, actor: Actor, discussion_id: RecordId, value: bool) -> Record:
        return await self._set_flag(actor, discussion_id, "is_pinned", value)

    async def update_promotion_expiration(
        self,
        actor: Actor,
        discussion_id: RecordId,
        end_date: Optional[datetime],
    ) -> Record:
        self.gate.require(actor.role, Operation.MODERATE_CONTENT)
        row = await self._load(discussion_id)
        updated = await self.store.update_one(
            DISCUSSIONS, row["id"], {"promoted_end_date": end_date}, "Discussion"
        )
        await best_effort(
            self.audit.append(
                subject_type=ContentType.DISCUSSION.value,
                subject_id=row["id"],
                actor_id=actor.id,
                action_type=AuditAction.EDIT,
                field_changed="promoted_end_date",
                old_value=row.get("promoted_end_date"),
                new_value=end_date,
            ),
            "promotion expiration audit",
            discussion_id=row["id"],
        )
        return updated

    async def delete_content(
        self,
        actor: Actor,
        content_type: Union[ContentType, str],
        content_id: RecordId,
        reason: Optional[str] = None,
    ) -> Record:
        """
        Soft-delete one content item.

        Allowed for the author, otherwise requires the moderation threshold.
        Deleting an already deleted item is a no-op.
        """
        content_type = coerce_enum(ContentType, content_type, "content_type")
        table = table_for(content_type)
        row = await self.store.get(table, coerce_uuid(content_id, "content_id"))
        if row is None:
            raise NotFoundError(f"{content_type.value.capitalize()} {content_id} not found")
        if row.get("author_id") != actor.id and not self.gate.allows(actor.role, Operation.MODERATE_CONTENT):
            raise AuthorizationError("Only the author or a moderator may delete this content")
        if row.get("deleted_at") is not None:
            return row

        updated = await self.store.update_one(
            table, row["id"], {"deleted_at": utcnow(), "deleted_by": actor.id},
            content_type.value.capitalize(),
        )
        await best_effort(
            self.audit.append(
                subject_type=content_type.value,
                subject_id=row["id"],
                actor_id=actor.id,
                action_type=AuditAction.DELETE,
                field_changed="deleted_at",
                old_value=None,
                new_value=updated.get("deleted_at"),
                reason=reason,
            ),
            "delete audit",
            content_id=row["id"],
        )
        logger.info(
            "Content deleted",
            extra={"content_type": content_type.value, "content_id": str(row["id"])},
        )
        return updated
