"""
Moderation dashboard metrics.
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping, Optional

from forum_trust.kernel.identity.actor import Actor
from forum_trust.kernel.models.content import CONTENT_TABLES, ContentType, ModerationStatus
from forum_trust.kernel.models.report import Report, ReportStatus
from forum_trust.kernel.models.user import User
from forum_trust.kernel.permissions.authorization_gate import AuthorizationGate
from forum_trust.kernel.permissions.policy import Operation
from forum_trust.kernel.permissions.role_hierarchy import STAFF_ROLES
from forum_trust.kernel.store.base import QueryOptions, Store

COUNT_ONLY = QueryOptions(order_by=None, limit=0, count=True)


@dataclass
class DashboardMetrics:
    total_users: int
    total_discussions: int
    total_comments: int
    unresolved_reports: int
    quarantined_content: int
    staff_accounts: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class DashboardService:
    """Headline counts for the staff dashboard."""

    def __init__(self, store: Store, gate: AuthorizationGate):
        self.store = store
        self.gate = gate

    async def _count(self, table: str, filters: Optional[Mapping[str, Any]] = None) -> int:
        result = await self.store.query(table, filters or {}, COUNT_ONLY)
        return result.total

    async def metrics(self, actor: Actor) -> DashboardMetrics:
        self.gate.require(actor.role, Operation.VIEW_REPORTS)

        live = {"deleted_at__isnull": True}
        quarantined = 0
        for table in CONTENT_TABLES.values():
            quarantined += await self._count(
                table, {**live, "moderation_status": ModerationStatus.QUARANTINED.value}
            )

        return DashboardMetrics(
            total_users=await self._count(User.__tablename__),
            total_discussions=await self._count(CONTENT_TABLES[ContentType.DISCUSSION], live),
            total_comments=await self._count(CONTENT_TABLES[ContentType.COMMENT], live),
            unresolved_reports=await self._count(
                Report.__tablename__, {"status": ReportStatus.UNRESOLVED.value}
            ),
            quarantined_content=quarantined,
            staff_accounts=await self._count(
                User.__tablename__, {"role__in": sorted(r.value for r in STAFF_ROLES)}
            ),
        )
