"""
Report schemas.
"""

import uuid
from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel, Field

from forum_trust.kernel.models.content import ContentType
from forum_trust.kernel.models.report import ReportReason, ReportStatus
from forum_trust.schemas.common import BulkIds


class ReportCreate(BaseModel):
    """Report creation request."""

    content_type: ContentType
    content_id: uuid.UUID
    reason: ReportReason
    description: Optional[str] = Field(None, max_length=2000)


class ReportStatusUpdate(BaseModel):
    status: ReportStatus


class BulkReportStatusRequest(BaseModel):
    ids: BulkIds = Field(..., min_length=1, max_length=500)
    status: ReportStatus


class ReportResponse(BaseModel):
    """Report response."""

    id: uuid.UUID
    reporter_id: uuid.UUID
    content_type: str
    content_id: uuid.UUID
    reason: str
    description: Optional[str] = None
    status: str
    resolved_by: Optional[uuid.UUID] = None
    resolved_at: Optional[datetime] = None
    created_at: datetime


class ReportStatsResponse(BaseModel):
    """Triage counters for the report queue."""

    pending: int
    unresolved_by_reason: Dict[str, int]
