"""
Homepage section controls and dashboard endpoints.
"""

from typing import List

from fastapi import APIRouter, Query

from forum_trust.api.deps import CurrentActor, DashboardDep, HomepageDep
from forum_trust.schemas.audit import (
    DashboardMetricsResponse,
    HomepageSectionResponse,
    HomepageSectionsUpdate,
)

router = APIRouter()


@router.get("/homepage/sections", response_model=List[HomepageSectionResponse])
async def list_homepage_sections(
    homepage: HomepageDep,
    visible_only: bool = Query(False),
):
    rows = await homepage.list_sections(visible_only)
    return [HomepageSectionResponse.model_validate(row) for row in rows]


@router.patch("/homepage/sections", response_model=List[HomepageSectionResponse])
async def update_homepage_sections(
    data: HomepageSectionsUpdate,
    actor: CurrentActor,
    homepage: HomepageDep,
):
    """Toggle visibility and/or reorder sections."""
    for section in data.sections:
        if section.is_visible is not None:
            await homepage.set_visibility(actor, section.id, section.is_visible)

    orders = {s.id: s.display_order for s in data.sections if s.display_order is not None}
    if orders:
        rows = await homepage.reorder(actor, orders)
    else:
        rows = await homepage.list_sections()
    return [HomepageSectionResponse.model_validate(row) for row in rows]


@router.get("/dashboard/metrics", response_model=DashboardMetricsResponse)
async def dashboard_metrics(actor: CurrentActor, dashboard: DashboardDep):
    metrics = await dashboard.metrics(actor)
    return DashboardMetricsResponse(**metrics.to_dict())
