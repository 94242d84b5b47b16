"""
Audit log and admin schemas.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class AuditEntryResponse(BaseModel):
    id: uuid.UUID
    subject_type: str
    subject_id: uuid.UUID
    actor_id: Optional[uuid.UUID] = None
    action_type: str
    field_changed: str
    old_value: Optional[str] = None
    new_value: Optional[str] = None
    reason: Optional[str] = None
    created_at: datetime


class HomepageSectionResponse(BaseModel):
    id: uuid.UUID
    section_key: str
    title: str
    is_visible: bool
    display_order: int
    updated_at: datetime


class HomepageSectionUpdate(BaseModel):
    id: uuid.UUID
    is_visible: Optional[bool] = None
    display_order: Optional[int] = Field(None, ge=0)


class HomepageSectionsUpdate(BaseModel):
    sections: List[HomepageSectionUpdate] = Field(..., min_length=1)


class DashboardMetricsResponse(BaseModel):
    total_users: int
    total_discussions: int
    total_comments: int
    unresolved_reports: int
    quarantined_content: int
    staff_accounts: int
