"""
Bulk operation coordinator.

Applies one operation to many ids and reports aggregate counts instead of
stopping at the first failure. Request-level problems (authorization, bad
enum values, missing reason) still raise before anything is written; a
restrictive status only needs a reason when some item actually changes.
Store failures, including the initial lookup, become per-item failures.

Where the bulk write is a single multi-row update it is all-or-nothing for
the rows it covers; the per-item audit entries that follow are independent
and best-effort. Processing order is unspecified.
"""

import asyncio
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from forum_trust.engines.best_effort import best_effort
from forum_trust.engines.moderation.discussion_controls import (
    DISCUSSIONS,
    FLAG_ACTIONS,
    flag_action,
    flag_fields,
)
from forum_trust.engines.moderation.moderation_engine import ModerationEngine, check_reason
from forum_trust.engines.reports.report_service import REPORTS, ReportService, status_fields
from forum_trust.engines.users.user_service import UserService
from forum_trust.exceptions import ForumTrustError, NotFoundError, StorageError, ValidationError
from forum_trust.kernel.identity.actor import Actor
from forum_trust.kernel.models.audit_log import AuditAction
from forum_trust.kernel.models.base import utcnow
from forum_trust.kernel.models.content import ContentType, ModerationStatus, table_for
from forum_trust.kernel.models.report import ReportStatus
from forum_trust.kernel.models.user import Role
from forum_trust.kernel.permissions.policy import Operation
from forum_trust.kernel.store.base import QueryOptions, Record, RecordId
from forum_trust.kernel.validators import clean_reason, coerce_enum, coerce_uuid, require_reason
from forum_trust.logging_config import get_logger

logger = get_logger(__name__)

UNEXPECTED_ERROR = "internal_error"


@dataclass
class BulkFailure:
    id: str
    error: str
    code: str = "error"


@dataclass
class BulkResult:
    """Aggregate outcome of a bulk request."""

    processed: int = 0
    failed: List[BulkFailure] = field(default_factory=list)

    def fail(self, item_id: Any, exc: ForumTrustError) -> None:
        self.failed.append(BulkFailure(id=str(item_id), error=exc.message, code=exc.code))

    @property
    def total(self) -> int:
        return self.processed + len(self.failed)


def unique_ids(ids: Iterable[RecordId], result: BulkResult) -> List[uuid.UUID]:
    """Parse and de-duplicate ids, recording unparseable ones as failures."""
    seen: Dict[uuid.UUID, None] = {}
    for raw in ids:
        try:
            seen.setdefault(coerce_uuid(raw, "id"), None)
        except ValidationError as exc:
            result.fail(raw, exc)
    return list(seen)


class BulkCoordinator:
    """
    Fan-out over the moderation, report and user services.

    Usage:
        bulk = BulkCoordinator(engine, reports, users)
        result = await bulk.bulk_transition(actor, "comment", ids, "removed", "spam wave")
        # result.processed, result.failed
    """

    def __init__(
        self,
        engine: ModerationEngine,
        reports: ReportService,
        users: UserService,
    ):
        self.engine = engine
        self.reports = reports
        self.users = users
        self.store = engine.store
        self.gate = engine.gate
        self.audit = engine.audit

    async def _lookup(
        self,
        table: str,
        ids: List[uuid.UUID],
        result: BulkResult,
        label: str,
    ) -> List[Record]:
        """Fetch rows for ``ids`` in one query; missing ids become failures."""
        if not ids:
            return []
        try:
            found = await self.store.query(table, {"id__in": ids}, QueryOptions(order_by=None))
        except StorageError as exc:
            for item_id in ids:
                result.fail(item_id, exc)
            return []
        by_id = {row["id"]: row for row in found.rows}
        for item_id in ids:
            if item_id not in by_id:
                result.fail(item_id, NotFoundError(f"{label} {item_id} not found"))
        return [by_id[i] for i in ids if i in by_id]

    async def _apply(
        self,
        table: str,
        rows: List[Record],
        fields: Mapping[str, Any],
        result: BulkResult,
    ) -> bool:
        """One multi-row update; on failure every row in it is failed."""
        if not rows:
            return True
        try:
            await self.store.update(table, [row["id"] for row in rows], fields)
        except StorageError as exc:
            for row in rows:
                result.fail(row["id"], exc)
            return False
        result.processed += len(rows)
        return True

    @staticmethod
    async def _gather(calls: List[Tuple[Any, Awaitable[Any]]], result: BulkResult) -> None:
        """Run independent per-item operations concurrently and tally them."""
        outcomes = await asyncio.gather(*(c for _, c in calls), return_exceptions=True)
        for (item_id, _), outcome in zip(calls, outcomes):
            if isinstance(outcome, ForumTrustError):
                result.fail(item_id, outcome)
            elif isinstance(outcome, Exception):
                logger.error(
                    "Bulk item failed unexpectedly",
                    extra={"item_id": str(item_id)},
                    exc_info=outcome,
                )
                result.failed.append(
                    BulkFailure(id=str(item_id), error="Unexpected error", code=UNEXPECTED_ERROR)
                )
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                result.processed += 1

    # ---- content status ----

    async def bulk_transition(
        self,
        actor: Actor,
        content_type: Union[ContentType, str],
        ids: Iterable[RecordId],
        target_status: Union[ModerationStatus, str],
        reason: Optional[str] = None,
    ) -> BulkResult:
        content_type = coerce_enum(ContentType, content_type, "content_type")
        target = coerce_enum(ModerationStatus, target_status, "status")
        self.gate.require(actor.role, Operation.MODERATE_CONTENT)

        result = BulkResult()
        table = table_for(content_type)
        rows = await self._lookup(table, unique_ids(ids, result), result, content_type.value.capitalize())

        to_change = [r for r in rows if r["moderation_status"] != target.value]
        # items already at the target need no reason, same as a single no-op
        reason = check_reason(target, reason) if to_change else clean_reason(reason)
        result.processed += len(rows) - len(to_change)

        fields = {
            "moderation_status": target.value,
            "moderated_by": actor.id,
            "last_moderation_action": utcnow(),
        }
        if await self._apply(table, to_change, fields, result) and to_change:
            await asyncio.gather(*(
                self.engine.mirror_transition(
                    actor,
                    content_type,
                    row["id"],
                    coerce_enum(ModerationStatus, row["moderation_status"], "moderation_status"),
                    target,
                    reason,
                )
                for row in to_change
            ))

        self._log("bulk_transition", result, content_type=content_type.value, status=target.value)
        return result

    # ---- roles ----

    async def bulk_change_roles(
        self,
        actor: Actor,
        user_ids: Iterable[RecordId],
        new_role: Union[Role, str],
        reason: Optional[str],
    ) -> BulkResult:
        """Independent role changes; each user is checked against its own stored role."""
        new_role = coerce_enum(Role, new_role, "role")
        self.gate.require(actor.role, Operation.CHANGE_ROLES)
        reason = require_reason(reason, "A reason is required for role changes")

        result = BulkResult()
        calls = [
            (user_id, self.users.change_role(actor, user_id, new_role, reason))
            for user_id in unique_ids(user_ids, result)
        ]
        await self._gather(calls, result)

        self._log("bulk_change_roles", result, role=new_role.value)
        return result

    # ---- discussion flags ----

    async def bulk_update_discussion_controls(
        self,
        actor: Actor,
        ids: Iterable[RecordId],
        flags: Mapping[str, bool],
        promoted_end_date: Optional[datetime] = None,
    ) -> BulkResult:
        """
        Set featured / promoted / pinned flags on many discussions.

        Rows already carrying every requested value are left untouched;
        the rest share one multi-row update.
        """
        unknown = sorted(set(flags) - set(FLAG_ACTIONS))
        if not flags or unknown:
            raise ValidationError(
                f"Flags must be a non-empty subset of: {', '.join(FLAG_ACTIONS)}",
                field="flags",
            )
        flags = {k: bool(v) for k, v in flags.items()}
        self.gate.require(actor.role, Operation.MODERATE_CONTENT)

        result = BulkResult()
        rows = await self._lookup(DISCUSSIONS, unique_ids(ids, result), result, "Discussion")
        to_change = [
            r for r in rows if any(bool(r.get(name)) != value for name, value in flags.items())
        ]
        result.processed += len(rows) - len(to_change)

        fields = flag_fields(flags, actor.id, utcnow(), promoted_end_date)
        if await self._apply(DISCUSSIONS, to_change, fields, result) and to_change:
            audits = []
            for row in to_change:
                for name, value in flags.items():
                    if bool(row.get(name)) == value:
                        continue
                    audits.append(best_effort(
                        self.audit.append(
                            subject_type=ContentType.DISCUSSION.value,
                            subject_id=row["id"],
                            actor_id=actor.id,
                            action_type=flag_action(name, value),
                            field_changed=name,
                            old_value=not value,
                            new_value=value,
                        ),
                        "bulk flag audit",
                        discussion_id=row["id"],
                    ))
                    if name == "is_featured" and value:
                        self.engine.controls.notify_featured({**row, **fields}, actor)
            await asyncio.gather(*audits)

        self._log("bulk_update_discussion_controls", result, flags=sorted(flags))
        return result

    # ---- reports ----

    async def bulk_update_report_status(
        self,
        actor: Actor,
        report_ids: Iterable[RecordId],
        new_status: Union[ReportStatus, str],
    ) -> BulkResult:
        new_status = coerce_enum(ReportStatus, new_status, "status")
        self.gate.require(actor.role, Operation.RESOLVE_REPORTS)

        result = BulkResult()
        rows = await self._lookup(REPORTS, unique_ids(report_ids, result), result, "Report")
        to_change = [r for r in rows if r["status"] != new_status.value]
        result.processed += len(rows) - len(to_change)

        if await self._apply(REPORTS, to_change, status_fields(new_status, actor), result) and to_change:
            await asyncio.gather(*(
                self.reports.audit_status_change(
                    actor,
                    row["id"],
                    coerce_enum(ReportStatus, row["status"], "status"),
                    new_status,
                )
                for row in to_change
            ))

        self._log("bulk_update_report_status", result, status=new_status.value)
        return result

    # ---- deletion ----

    async def bulk_delete(
        self,
        actor: Actor,
        content_type: Union[ContentType, str],
        ids: Iterable[RecordId],
        reason: Optional[str] = None,
    ) -> BulkResult:
        """Soft-delete many items. Bulk deletion is a moderator operation."""
        content_type = coerce_enum(ContentType, content_type, "content_type")
        self.gate.require(actor.role, Operation.MODERATE_CONTENT)
        reason = clean_reason(reason)

        result = BulkResult()
        table = table_for(content_type)
        rows = await self._lookup(table, unique_ids(ids, result), result, content_type.value.capitalize())
        to_delete = [r for r in rows if r.get("deleted_at") is None]
        result.processed += len(rows) - len(to_delete)

        now = utcnow()
        if await self._apply(table, to_delete, {"deleted_at": now, "deleted_by": actor.id}, result) and to_delete:
            await asyncio.gather(*(
                best_effort(
                    self.audit.append(
                        subject_type=content_type.value,
                        subject_id=row["id"],
                        actor_id=actor.id,
                        action_type=AuditAction.DELETE,
                        field_changed="deleted_at",
                        old_value=None,
                        new_value=now,
                        reason=reason,
                    ),
                    "bulk delete audit",
                    content_id=row["id"],
                )
                for row in to_delete
            ))

        self._log("bulk_delete", result, content_type=content_type.value)
        return result

    @staticmethod
    def _log(operation: str, result: BulkResult, **context: Any) -> None:
        logger.info(
            "Bulk operation finished",
            extra={
                "operation": operation,
                "processed": result.processed,
                "failed": len(result.failed),
                **context,
            },
        )
