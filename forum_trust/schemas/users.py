"""
User and role schemas.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from forum_trust.kernel.models.user import Role
from forum_trust.schemas.common import BulkIds


class UserResponse(BaseModel):
    id: uuid.UUID
    username: str
    email: str
    role: str
    is_active: bool
    created_at: datetime


class RoleChangeRequest(BaseModel):
    """Role change request; a non-blank reason is required."""

    role: Role
    reason: Optional[str] = Field(None, max_length=500)


class BulkRoleChangeRequest(RoleChangeRequest):
    ids: BulkIds = Field(..., min_length=1, max_length=500)


class CapabilitiesResponse(BaseModel):
    """What the calling user's role allows."""

    role: Role
    display_name: str
    level: int
    can_view_reports: bool
    can_resolve_reports: bool
    can_moderate_content: bool
    can_manage_users: bool
    can_view_audit_logs: bool
    can_change_roles: bool
    can_manage_settings: bool
    assignable_roles: List[Role]
