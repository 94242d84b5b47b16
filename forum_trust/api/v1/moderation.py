"""
Moderation endpoints - status transitions, bulk moderation, queue and history.
"""

import uuid
from typing import List

from fastapi import APIRouter, Query

from forum_trust.api.deps import BulkDep, CurrentActor, EngineDep, PageParams
from forum_trust.kernel.models.content import ContentType, ModerationStatus
from forum_trust.schemas.common import BulkResultResponse, PaginatedResponse
from forum_trust.schemas.moderation import (
    BulkModerationRequest,
    ContentResponse,
    ModerationStatusUpdate,
    RestrictionResponse,
    TransitionResponse,
)

router = APIRouter()


@router.get("/queue", response_model=PaginatedResponse[ContentResponse])
async def moderation_queue(
    actor: CurrentActor,
    engine: EngineDep,
    page: PageParams,
    content_type: ContentType = Query(ContentType.DISCUSSION),
    status: ModerationStatus = Query(ModerationStatus.QUARANTINED),
):
    """Content in one moderation status, latest moderation action first."""
    result = await engine.content_by_status(actor, content_type, status, page.limit, page.offset)
    return PaginatedResponse.create(
        items=[ContentResponse.model_validate(row) for row in result.rows],
        total=result.total,
        limit=page.limit,
        offset=page.offset,
    )


@router.get("/quarantined-count")
async def quarantined_count(actor: CurrentActor, engine: EngineDep):
    """Quarantined items across every content type."""
    return {"count": await engine.quarantined_count(actor)}


@router.post("/{content_type}/{content_id}/status", response_model=TransitionResponse)
async def transition_content(
    content_type: ContentType,
    content_id: uuid.UUID,
    data: ModerationStatusUpdate,
    actor: CurrentActor,
    engine: EngineDep,
):
    """Move one content item to a new moderation status."""
    result = await engine.transition(
        actor,
        content_type,
        content_id,
        data.status,
        reason=data.reason,
        featured=data.featured,
    )
    return TransitionResponse(
        content=ContentResponse.model_validate(result.content),
        previous_status=result.previous_status,
        status=result.status,
        changed=result.changed,
        notified=result.notified,
    )


@router.post("/{content_type}/bulk", response_model=BulkResultResponse)
async def bulk_transition(
    content_type: ContentType,
    data: BulkModerationRequest,
    actor: CurrentActor,
    bulk: BulkDep,
):
    """Apply one status to many items; per-item failures are reported, not raised."""
    result = await bulk.bulk_transition(actor, content_type, data.ids, data.status, data.reason)
    return BulkResultResponse.from_result(result)


@router.get("/{content_type}/{content_id}/history", response_model=List[RestrictionResponse])
async def moderation_history(
    content_type: ContentType,
    content_id: uuid.UUID,
    actor: CurrentActor,
    engine: EngineDep,
    page: PageParams,
):
    rows = await engine.moderation_history(actor, content_type, content_id, page.limit, page.offset)
    return [RestrictionResponse.model_validate(row) for row in rows]
