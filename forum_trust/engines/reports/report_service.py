"""
Report lifecycle manager.

Reports move unresolved -> in_progress -> resolved | dismissed, and may be
reopened. Closing a report stamps ``resolved_by``/``resolved_at``; reopening
leaves both in place so the last resolution stays visible.
"""

from typing import Any, Dict, List, Optional, Union

from forum_trust.engines.best_effort import best_effort
from forum_trust.exceptions import AuthorizationError, NotFoundError
from forum_trust.kernel.events.audit_recorder import AuditRecorder
from forum_trust.kernel.identity.actor import Actor
from forum_trust.kernel.models.audit_log import AuditAction
from forum_trust.kernel.models.base import utcnow
from forum_trust.kernel.models.content import ContentType, table_for
from forum_trust.kernel.models.report import (
    CLOSING_STATUSES,
    Report,
    ReportReason,
    ReportStatus,
)
from forum_trust.kernel.permissions.authorization_gate import AuthorizationGate
from forum_trust.kernel.permissions.policy import Operation
from forum_trust.kernel.store.base import QueryOptions, QueryResult, Record, RecordId, Store
from forum_trust.kernel.validators import clean_reason, coerce_enum, coerce_uuid
from forum_trust.logging_config import get_logger

logger = get_logger(__name__)

REPORTS = Report.__tablename__


def report_audit_action(status: ReportStatus) -> AuditAction:
    if status == ReportStatus.RESOLVED:
        return AuditAction.RESOLVE_REPORT
    if status == ReportStatus.DISMISSED:
        return AuditAction.DISMISS_REPORT
    return AuditAction.EDIT


def status_fields(status: ReportStatus, actor: Actor) -> Dict[str, Any]:
    """Column updates for moving a report to ``status``."""
    fields: Dict[str, Any] = {"status": status.value}
    if status in CLOSING_STATUSES:
        fields["resolved_by"] = actor.id
        fields["resolved_at"] = utcnow()
    return fields


class ReportService:
    """Create, triage and resolve reports."""

    def __init__(
        self,
        store: Store,
        gate: AuthorizationGate,
        audit: Optional[AuditRecorder] = None,
    ):
        self.store = store
        self.gate = gate
        self.audit = audit or AuditRecorder(store)

    async def create_report(
        self,
        reporter: Optional[Actor],
        content_type: Union[ContentType, str],
        content_id: RecordId,
        reason: Union[ReportReason, str],
        description: Optional[str] = None,
    ) -> Record:
        """
        File a report against a content item.

        The report row is the primary write. The content's ``report_count``
        is bumped afterwards; if that fails the report still stands.
        Repeated reports by the same user are accepted.
        """
        if reporter is None:
            raise AuthorizationError("You must be signed in to report content")
        content_type = coerce_enum(ContentType, content_type, "content_type")
        reason = coerce_enum(ReportReason, reason, "reason")
        content_id = coerce_uuid(content_id, "content_id")

        table = table_for(content_type)
        content = await self.store.get(table, content_id)
        if content is None:
            raise NotFoundError(f"{content_type.value.capitalize()} {content_id} not found")

        report = (await self.store.insert(
            REPORTS,
            {
                "reporter_id": reporter.id,
                "content_type": content_type.value,
                "content_id": content_id,
                "reason": reason.value,
                "description": clean_reason(description),
                "status": ReportStatus.UNRESOLVED.value,
            },
        ))[0]

        # read-modify-write; concurrent reports may undercount
        await best_effort(
            self.store.update(
                table, content_id, {"report_count": (content.get("report_count") or 0) + 1}
            ),
            "report count increment",
            content_id=content_id,
        )

        logger.info(
            "Report created",
            extra={
                "report_id": str(report["id"]),
                "content_type": content_type.value,
                "reason": reason.value,
            },
        )
        return report

    async def update_report_status(
        self,
        actor: Actor,
        report_id: RecordId,
        new_status: Union[ReportStatus, str],
    ) -> Record:
        new_status = coerce_enum(ReportStatus, new_status, "status")
        self.gate.require(actor.role, Operation.RESOLVE_REPORTS)
        report = await self._load(report_id)
        old_status = coerce_enum(ReportStatus, report["status"], "status")
        if old_status == new_status:
            return report

        updated = await self.store.update_one(
            REPORTS, report["id"], status_fields(new_status, actor), "Report"
        )
        await self.audit_status_change(actor, report["id"], old_status, new_status)

        logger.info(
            "Report status changed",
            extra={
                "report_id": str(report["id"]),
                "from_status": old_status.value,
                "to_status": new_status.value,
            },
        )
        return updated

    async def audit_status_change(
        self,
        actor: Actor,
        report_id: RecordId,
        old_status: ReportStatus,
        new_status: ReportStatus,
    ) -> Optional[Record]:
        return await best_effort(
            self.audit.append(
                subject_type="report",
                subject_id=report_id,
                actor_id=actor.id,
                action_type=report_audit_action(new_status),
                field_changed="status",
                old_value=old_status,
                new_value=new_status,
            ),
            "report audit",
            report_id=report_id,
        )

    async def _load(self, report_id: RecordId) -> Record:
        report = await self.store.get(REPORTS, coerce_uuid(report_id, "report_id"))
        if report is None:
            raise NotFoundError(f"Report {report_id} not found")
        return report

    # ---- reads (moderators) ----

    async def get_report(self, actor: Actor, report_id: RecordId) -> Record:
        self.gate.require(actor.role, Operation.VIEW_REPORTS)
        return await self._load(report_id)

    async def list_reports(
        self,
        actor: Actor,
        status: Optional[Union[ReportStatus, str]] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> QueryResult:
        filters: Dict[str, Any] = {}
        if status is not None:
            filters["status"] = coerce_enum(ReportStatus, status, "status").value
        self.gate.require(actor.role, Operation.VIEW_REPORTS)
        return await self.store.query(
            REPORTS, filters, QueryOptions(limit=limit, offset=offset, count=True)
        )

    async def reports_for_content(
        self,
        actor: Actor,
        content_type: Union[ContentType, str],
        content_id: RecordId,
    ) -> List[Record]:
        content_type = coerce_enum(ContentType, content_type, "content_type")
        self.gate.require(actor.role, Operation.VIEW_REPORTS)
        result = await self.store.query(
            REPORTS,
            {"content_type": content_type.value, "content_id": coerce_uuid(content_id, "content_id")},
        )
        return result.rows

    async def pending_count(self, actor: Actor) -> int:
        """Reports that still need attention (unresolved or in progress)."""
        self.gate.require(actor.role, Operation.VIEW_REPORTS)
        result = await self.store.query(
            REPORTS,
            {"status__in": [ReportStatus.UNRESOLVED.value, ReportStatus.IN_PROGRESS.value]},
            QueryOptions(order_by=None, limit=0, count=True),
        )
        return result.total

    async def unresolved_counts_by_reason(self, actor: Actor) -> Dict[str, int]:
        """Unresolved report counts keyed by every reason, zero-filled."""
        self.gate.require(actor.role, Operation.VIEW_REPORTS)
        result = await self.store.query(
            REPORTS,
            {"status": ReportStatus.UNRESOLVED.value},
            QueryOptions(order_by=None),
        )
        counts = {reason.value: 0 for reason in ReportReason}
        for row in result.rows:
            if row["reason"] in counts:
                counts[row["reason"]] += 1
        return counts
