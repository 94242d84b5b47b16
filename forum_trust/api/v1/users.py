"""
User and role management endpoints.
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Query

from forum_trust.api.deps import BulkDep, CurrentActor, GateDep, PageParams, UsersDep
from forum_trust.kernel.models.user import Role
from forum_trust.kernel.permissions.role_hierarchy import assignable_roles, display_name, level
from forum_trust.schemas.common import BulkResultResponse, PaginatedResponse
from forum_trust.schemas.users import (
    BulkRoleChangeRequest,
    CapabilitiesResponse,
    RoleChangeRequest,
    UserResponse,
)

router = APIRouter()


@router.get("", response_model=PaginatedResponse[UserResponse])
async def list_users(
    actor: CurrentActor,
    users: UsersDep,
    page: PageParams,
    role: Optional[Role] = Query(None),
):
    result = await users.list_users(actor, role, page.limit, page.offset)
    return PaginatedResponse.create(
        items=[UserResponse.model_validate(row) for row in result.rows],
        total=result.total,
        limit=page.limit,
        offset=page.offset,
    )


@router.get("/me/capabilities", response_model=CapabilitiesResponse)
async def my_capabilities(actor: CurrentActor, gate: GateDep):
    """What the caller's stored role is allowed to do."""
    caps = gate.capabilities(actor.role)
    return CapabilitiesResponse(
        role=caps.role,
        display_name=display_name(caps.role),
        level=level(caps.role),
        can_view_reports=caps.can_view_reports,
        can_resolve_reports=caps.can_resolve_reports,
        can_moderate_content=caps.can_moderate_content,
        can_manage_users=caps.can_manage_users,
        can_view_audit_logs=caps.can_view_audit_logs,
        can_change_roles=caps.can_change_roles,
        can_manage_settings=caps.can_manage_settings,
        assignable_roles=assignable_roles(caps.role) if caps.can_change_roles else [],
    )


@router.post("/bulk-role", response_model=BulkResultResponse)
async def bulk_change_roles(data: BulkRoleChangeRequest, actor: CurrentActor, bulk: BulkDep):
    result = await bulk.bulk_change_roles(actor, data.ids, data.role, data.reason)
    return BulkResultResponse.from_result(result)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: uuid.UUID, actor: CurrentActor, users: UsersDep):
    return UserResponse.model_validate(await users.get_user(actor, user_id))


@router.post("/{user_id}/role", response_model=UserResponse)
async def change_role(
    user_id: uuid.UUID,
    data: RoleChangeRequest,
    actor: CurrentActor,
    users: UsersDep,
):
    """Assign a new role. The caller must outrank both the current and the new role."""
    row = await users.change_role(actor, user_id, data.role, data.reason)
    return UserResponse.model_validate(row)
