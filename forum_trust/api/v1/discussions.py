"""
Discussion control endpoints - featured / promoted / pinned flags and deletion.
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Query

from forum_trust.api.deps import BulkDep, ControlsDep, CurrentActor
from forum_trust.exceptions import ValidationError
from forum_trust.kernel.models.content import ContentType
from forum_trust.schemas.common import BulkResultResponse
from forum_trust.schemas.moderation import (
    BulkDeleteRequest,
    BulkDiscussionControlsRequest,
    ContentResponse,
    DiscussionControlsUpdate,
)

router = APIRouter()


@router.patch("/discussions/{discussion_id}/controls", response_model=ContentResponse)
async def update_discussion_controls(
    discussion_id: uuid.UUID,
    data: DiscussionControlsUpdate,
    actor: CurrentActor,
    controls: ControlsDep,
):
    """Change one or more control flags on a discussion."""
    flags = data.flags()
    if not flags and "promoted_end_date" not in data.model_fields_set:
        raise ValidationError("No control changes supplied")

    row = None
    if "is_featured" in flags:
        row = await controls.set_featured(actor, discussion_id, flags["is_featured"])
    if "is_promoted" in flags:
        row = await controls.set_promoted(
            actor, discussion_id, flags["is_promoted"], data.promoted_end_date
        )
    elif "promoted_end_date" in data.model_fields_set:
        row = await controls.update_promotion_expiration(actor, discussion_id, data.promoted_end_date)
    if "is_pinned" in flags:
        row = await controls.set_pinned(actor, discussion_id, flags["is_pinned"])
    return ContentResponse.model_validate(row)


@router.post("/discussions/bulk-controls", response_model=BulkResultResponse)
async def bulk_discussion_controls(
    data: BulkDiscussionControlsRequest,
    actor: CurrentActor,
    bulk: BulkDep,
):
    result = await bulk.bulk_update_discussion_controls(
        actor, data.ids, data.flags(), data.promoted_end_date
    )
    return BulkResultResponse.from_result(result)


@router.delete("/content/{content_type}/{content_id}", response_model=ContentResponse)
async def delete_content(
    content_type: ContentType,
    content_id: uuid.UUID,
    actor: CurrentActor,
    controls: ControlsDep,
    reason: Optional[str] = Query(None, max_length=2000),
):
    """Soft-delete content. Authors may delete their own; moderators any."""
    row = await controls.delete_content(actor, content_type, content_id, reason)
    return ContentResponse.model_validate(row)


@router.post("/content/{content_type}/bulk-delete", response_model=BulkResultResponse)
async def bulk_delete(
    content_type: ContentType,
    data: BulkDeleteRequest,
    actor: CurrentActor,
    bulk: BulkDep,
):
    result = await bulk.bulk_delete(actor, content_type, data.ids, data.reason)
    return BulkResultResponse.from_result(result)
