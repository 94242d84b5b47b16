"""
Report endpoints.
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Query, status

from forum_trust.api.deps import BulkDep, CurrentActor, OptionalActor, PageParams, ReportsDep
from forum_trust.kernel.models.report import ReportStatus
from forum_trust.schemas.common import BulkResultResponse, PaginatedResponse
from forum_trust.schemas.reports import (
    BulkReportStatusRequest,
    ReportCreate,
    ReportResponse,
    ReportStatsResponse,
    ReportStatusUpdate,
)

router = APIRouter()


@router.post("", response_model=ReportResponse, status_code=status.HTTP_201_CREATED)
async def create_report(data: ReportCreate, reporter: OptionalActor, reports: ReportsDep):
    """Report a discussion, comment or debate. Requires a signed-in user."""
    row = await reports.create_report(
        reporter, data.content_type, data.content_id, data.reason, data.description
    )
    return ReportResponse.model_validate(row)


@router.get("", response_model=PaginatedResponse[ReportResponse])
async def list_reports(
    actor: CurrentActor,
    reports: ReportsDep,
    page: PageParams,
    report_status: Optional[ReportStatus] = Query(None, alias="status"),
):
    result = await reports.list_reports(actor, report_status, page.limit, page.offset)
    return PaginatedResponse.create(
        items=[ReportResponse.model_validate(row) for row in result.rows],
        total=result.total,
        limit=page.limit,
        offset=page.offset,
    )


@router.get("/stats", response_model=ReportStatsResponse)
async def report_stats(actor: CurrentActor, reports: ReportsDep):
    """Pending count and unresolved counts per reason."""
    return ReportStatsResponse(
        pending=await reports.pending_count(actor),
        unresolved_by_reason=await reports.unresolved_counts_by_reason(actor),
    )


@router.post("/bulk-status", response_model=BulkResultResponse)
async def bulk_report_status(data: BulkReportStatusRequest, actor: CurrentActor, bulk: BulkDep):
    result = await bulk.bulk_update_report_status(actor, data.ids, data.status)
    return BulkResultResponse.from_result(result)


@router.get("/{report_id}", response_model=ReportResponse)
async def get_report(report_id: uuid.UUID, actor: CurrentActor, reports: ReportsDep):
    return ReportResponse.model_validate(await reports.get_report(actor, report_id))


@router.patch("/{report_id}", response_model=ReportResponse)
async def update_report_status(
    report_id: uuid.UUID,
    data: ReportStatusUpdate,
    actor: CurrentActor,
    reports: ReportsDep,
):
    row = await reports.update_report_status(actor, report_id, data.status)
    return ReportResponse.model_validate(row)
