"""
Moderation engine - the content trust state machine.

Every content item carries one ``moderation_status`` (pending, approved,
quarantined, removed). Any status may move to any other; what the engine
enforces is who may move it, that hiding content needs a stated reason,
and that each change is mirrored into the restriction ledger and the audit
log.

Write ordering:
    1. all checks (no writes)
    2. primary status update - failure propagates, nothing else happens
    3. restriction record, audit entries, notification - best-effort
"""

import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from forum_trust.engines.best_effort import best_effort
from forum_trust.engines.moderation.discussion_controls import (
    DiscussionControls,
    feature_fields,
    flag_action,
)
from forum_trust.engines.moderation.restriction_ledger import RestrictionLedger, restriction_for
from forum_trust.exceptions import NotFoundError, ValidationError
from forum_trust.kernel.events.audit_recorder import AuditRecorder
from forum_trust.kernel.identity.actor import Actor
from forum_trust.kernel.models.audit_log import AuditAction
from forum_trust.kernel.models.base import utcnow
from forum_trust.kernel.models.content import (
    CONTENT_TABLES,
    RESTRICTIVE_STATUSES,
    ContentType,
    ModerationStatus,
    table_for,
)
from forum_trust.kernel.permissions.authorization_gate import AuthorizationGate
from forum_trust.kernel.permissions.policy import Operation
from forum_trust.kernel.store.base import QueryOptions, QueryResult, Record, RecordId, Store
from forum_trust.kernel.validators import clean_reason, coerce_enum, coerce_uuid, require_reason
from forum_trust.logging_config import get_logger
from forum_trust.orchestration.notification_outbox import NotificationOutbox

logger = get_logger(__name__)


def audit_action_for(previous: ModerationStatus, target: ModerationStatus) -> AuditAction:
    """Audit vocabulary entry for a status change."""
    if target == ModerationStatus.APPROVED:
        if previous == ModerationStatus.PENDING:
            return AuditAction.APPROVE
        return AuditAction.RESTORE
    if target == ModerationStatus.REMOVED:
        return AuditAction.REMOVE
    # quarantined, and pending (withheld for review)
    return AuditAction.QUARANTINE


def check_reason(target: ModerationStatus, reason: Optional[str]) -> Optional[str]:
    """Restrictive targets need a non-blank reason; others keep it optional."""
    if target in RESTRICTIVE_STATUSES:
        return require_reason(
            reason,
            f"A reason is required to move content to {target.value}",
        )
    return clean_reason(reason)


@dataclass
class TransitionResult:
    """Outcome of one moderation transition."""

    content_type: ContentType
    content_id: uuid.UUID
    previous_status: ModerationStatus
    status: ModerationStatus
    changed: bool
    content: Record
    restriction: Optional[Record] = None
    audit_entries: List[Record] = field(default_factory=list)
    notified: bool = False


class ModerationEngine:
    """
    Moderation state machine over discussions, comments and debates.

    Usage:
        engine = ModerationEngine(store, gate, outbox=outbox)
        result = await engine.transition(
            actor, "discussion", discussion_id, "quarantined", reason="spam",
        )
    """

    def __init__(
        self,
        store: Store,
        gate: AuthorizationGate,
        audit: Optional[AuditRecorder] = None,
        ledger: Optional[RestrictionLedger] = None,
        outbox: Optional[NotificationOutbox] = None,
    ):
        self.store = store
        self.gate = gate
        self.audit = audit or AuditRecorder(store)
        self.ledger = ledger or RestrictionLedger(store)
        self.outbox = outbox
        self.controls = DiscussionControls(store, gate, self.audit, outbox)

    async def transition(
        self,
        actor: Actor,
        content_type: Union[ContentType, str],
        content_id: RecordId,
        target_status: Union[ModerationStatus, str],
        reason: Optional[str] = None,
        featured: Optional[bool] = None,
    ) -> TransitionResult:
        """
        Move one content item to ``target_status``.

        Args:
            actor: The acting user (stored role)
            content_type: discussion, comment or debate
            content_id: ID of the content item
            target_status: Desired moderation status
            reason: Required for quarantined and removed
            featured: Optionally set the featured flag in the same write
                (discussions only)

        Returns:
            TransitionResult; ``changed`` is False for a no-op

        Raises:
            ValidationError: bad enum value, missing reason, featured on a
                non-discussion
            AuthorizationError: actor below the moderation threshold
            NotFoundError: content does not exist
            StorageError: the primary status write failed
        """
        content_type = coerce_enum(ContentType, content_type, "content_type")
        target = coerce_enum(ModerationStatus, target_status, "status")
        content_id = coerce_uuid(content_id, "content_id")
        if featured is not None and content_type != ContentType.DISCUSSION:
            raise ValidationError("Only discussions can be featured", field="featured")

        self.gate.require(actor.role, Operation.MODERATE_CONTENT)

        row = await self.get_content(content_type, content_id)
        previous = coerce_enum(ModerationStatus, row["moderation_status"], "moderation_status")
        flag_change = featured is not None and bool(row.get("is_featured")) != featured

        if previous == target and not flag_change:
            return TransitionResult(
                content_type=content_type,
                content_id=content_id,
                previous_status=previous,
                status=previous,
                changed=False,
                content=row,
            )

        if previous != target:
            reason = check_reason(target, reason)
        else:
            reason = clean_reason(reason)

        now = utcnow()
        fields: Dict[str, Any] = {}
        if previous != target:
            fields.update(
                moderation_status=target.value,
                moderated_by=actor.id,
                last_moderation_action=now,
            )
        if flag_change:
            fields.update(feature_fields(featured, actor.id, now))

        updated = await self.store.update_one(
            table_for(content_type), content_id, fields, content_type.value.capitalize()
        )

        result = TransitionResult(
            content_type=content_type,
            content_id=content_id,
            previous_status=previous,
            status=target,
            changed=True,
            content=updated,
        )

        if previous != target:
            restriction, entry = await self.mirror_transition(
                actor, content_type, content_id, previous, target, reason
            )
            result.restriction = restriction
            if entry is not None:
                result.audit_entries.append(entry)

        if flag_change:
            entry = await best_effort(
                self.audit.append(
                    subject_type=content_type.value,
                    subject_id=content_id,
                    actor_id=actor.id,
                    action_type=flag_action("is_featured", featured),
                    field_changed="is_featured",
                    old_value=not featured,
                    new_value=featured,
                    reason=reason,
                ),
                "feature audit",
                content_id=content_id,
            )
            if entry is not None:
                result.audit_entries.append(entry)
            if featured:
                result.notified = self.controls.notify_featured(updated, actor)

        logger.info(
            "Content moderated",
            extra={
                "content_type": content_type.value,
                "content_id": str(content_id),
                "from_status": previous.value,
                "to_status": target.value,
            },
        )
        return result

    async def mirror_transition(
        self,
        actor: Actor,
        content_type: ContentType,
        content_id: uuid.UUID,
        previous: ModerationStatus,
        target: ModerationStatus,
        reason: Optional[str],
    ):
        """
        Write the restriction record and audit entry for an applied status
        change. Never raises on storage failure; returns
        (restriction, audit_entry), either of which may be None.
        """
        restriction = await best_effort(
            self.ledger.record(content_type, content_id, restriction_for(target), actor.id, reason),
            "restriction record",
            content_id=content_id,
        )
        entry = await best_effort(
            self.audit.append(
                subject_type=content_type.value,
                subject_id=content_id,
                actor_id=actor.id,
                action_type=audit_action_for(previous, target),
                field_changed="moderation_status",
                old_value=previous,
                new_value=target,
                reason=reason,
            ),
            "moderation audit",
            content_id=content_id,
        )
        return restriction, entry

    async def approve(self, actor, content_type, content_id, reason=None) -> TransitionResult:
        return await self.transition(actor, content_type, content_id, ModerationStatus.APPROVED, reason)

    async def quarantine(self, actor, content_type, content_id, reason) -> TransitionResult:
        return await self.transition(actor, content_type, content_id, ModerationStatus.QUARANTINED, reason)

    async def remove(self, actor, content_type, content_id, reason) -> TransitionResult:
        return await self.transition(actor, content_type, content_id, ModerationStatus.REMOVED, reason)

    async def restore(self, actor, content_type, content_id, reason=None) -> TransitionResult:
        """Return quarantined or removed content to approved."""
        return await self.transition(actor, content_type, content_id, ModerationStatus.APPROVED, reason)

    # ---- reads ----

    async def get_content(self, content_type: Union[ContentType, str], content_id: RecordId) -> Record:
        content_type = coerce_enum(ContentType, content_type, "content_type")
        row = await self.store.get(table_for(content_type), coerce_uuid(content_id, "content_id"))
        if row is None:
            raise NotFoundError(f"{content_type.value.capitalize()} {content_id} not found")
        return row

    async def content_by_status(
        self,
        actor: Actor,
        content_type: Union[ContentType, str],
        status: Union[ModerationStatus, str] = ModerationStatus.QUARANTINED,
        limit: int = 50,
        offset: int = 0,
    ) -> QueryResult:
        """Moderation queue for one content type, latest moderation action first."""
        content_type = coerce_enum(ContentType, content_type, "content_type")
        status = coerce_enum(ModerationStatus, status, "status")
        self.gate.require(actor.role, Operation.MODERATE_CONTENT)
        return await self.store.query(
            table_for(content_type),
            {"moderation_status": status.value, "deleted_at__isnull": True},
            QueryOptions(order_by="last_moderation_action", limit=limit, offset=offset, count=True),
        )

    async def quarantined_count(self, actor: Actor) -> int:
        """Quarantined, undeleted items across every content type."""
        self.gate.require(actor.role, Operation.MODERATE_CONTENT)
        total = 0
        for table in CONTENT_TABLES.values():
            result = await self.store.query(
                table,
                {"moderation_status": ModerationStatus.QUARANTINED.value, "deleted_at__isnull": True},
                QueryOptions(order_by=None, limit=0, count=True),
            )
            total += result.total
        return total

    async def moderation_history(
        self,
        actor: Actor,
        content_type: Union[ContentType, str],
        content_id: RecordId,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Record]:
        """Restriction records for one item, newest first."""
        self.gate.require(actor.role, Operation.MODERATE_CONTENT)
        await self.get_content(content_type, content_id)
        return await self.ledger.history(content_type, coerce_uuid(content_id, "content_id"), limit, offset)
