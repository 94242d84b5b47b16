"""
Moderation and discussion control schemas.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from forum_trust.kernel.models.content import ModerationStatus
from forum_trust.schemas.common import BulkIds


class ModerationStatusUpdate(BaseModel):
    """Move one content item to a new moderation status."""

    status: ModerationStatus
    reason: Optional[str] = Field(None, max_length=2000)
    featured: Optional[bool] = None


class BulkModerationRequest(BaseModel):
    ids: BulkIds = Field(..., min_length=1, max_length=500)
    status: ModerationStatus
    reason: Optional[str] = Field(None, max_length=2000)


class ContentResponse(BaseModel):
    """A moderatable content row; type-specific columns are optional."""

    id: uuid.UUID
    author_id: uuid.UUID
    moderation_status: str
    report_count: int = 0
    last_moderation_action: Optional[datetime] = None
    moderated_by: Optional[uuid.UUID] = None
    created_at: datetime
    deleted_at: Optional[datetime] = None

    title: Optional[str] = None
    body: Optional[str] = None
    is_featured: Optional[bool] = None
    is_promoted: Optional[bool] = None
    promoted_end_date: Optional[datetime] = None
    is_pinned: Optional[bool] = None


class TransitionResponse(BaseModel):
    content: ContentResponse
    previous_status: ModerationStatus
    status: ModerationStatus
    changed: bool
    notified: bool = False


class RestrictionResponse(BaseModel):
    id: uuid.UUID
    content_type: str
    content_id: uuid.UUID
    restriction_type: str
    moderator_id: uuid.UUID
    reason: Optional[str] = None
    created_at: datetime


class DiscussionControlsUpdate(BaseModel):
    """Flags to change; omitted flags are left as they are."""

    is_featured: Optional[bool] = None
    is_promoted: Optional[bool] = None
    is_pinned: Optional[bool] = None
    promoted_end_date: Optional[datetime] = None

    def flags(self) -> dict:
        return {
            name: value
            for name, value in (
                ("is_featured", self.is_featured),
                ("is_promoted", self.is_promoted),
                ("is_pinned", self.is_pinned),
            )
            if value is not None
        }


class BulkDiscussionControlsRequest(DiscussionControlsUpdate):
    ids: BulkIds = Field(..., min_length=1, max_length=500)


class BulkDeleteRequest(BaseModel):
    ids: BulkIds = Field(..., min_length=1, max_length=500)
    reason: Optional[str] = Field(None, max_length=2000)
