"""
Audit log endpoints (read-only).
"""

import uuid
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Query

from forum_trust.api.deps import AuditDep, CurrentActor, GateDep, PageParams
from forum_trust.kernel.models.audit_log import AuditAction
from forum_trust.kernel.permissions.policy import Operation
from forum_trust.schemas.audit import AuditEntryResponse
from forum_trust.schemas.common import PaginatedResponse

router = APIRouter()


def _page(result) -> PaginatedResponse[AuditEntryResponse]:
    return PaginatedResponse.create(
        items=[AuditEntryResponse.model_validate(row) for row in result.items],
        total=result.total,
        limit=result.limit,
        offset=result.offset,
    )


@router.get("", response_model=PaginatedResponse[AuditEntryResponse])
async def search_audit_log(
    actor: CurrentActor,
    gate: GateDep,
    audit: AuditDep,
    page: PageParams,
    actor_id: Optional[uuid.UUID] = Query(None),
    action_type: Optional[AuditAction] = Query(None),
    target_type: Optional[str] = Query(None, max_length=50),
    since: Optional[datetime] = Query(None),
    until: Optional[datetime] = Query(None),
):
    """Search the audit log, newest first."""
    gate.require(actor.role, Operation.VIEW_AUDIT_LOGS)
    result = await audit.search(
        actor_id=actor_id,
        action_type=action_type,
        target_type=target_type,
        since=since,
        until=until,
        limit=page.limit,
        offset=page.offset,
    )
    return _page(result)


@router.get("/subjects/{subject_id}", response_model=PaginatedResponse[AuditEntryResponse])
async def subject_history(
    subject_id: uuid.UUID,
    actor: CurrentActor,
    gate: GateDep,
    audit: AuditDep,
    page: PageParams,
):
    """Every audit entry for one subject."""
    gate.require(actor.role, Operation.VIEW_AUDIT_LOGS)
    return _page(await audit.subject_history(subject_id, page.limit, page.offset))
