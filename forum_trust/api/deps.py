"""
FastAPI dependencies for authentication, authorization and services.
"""

from functools import lru_cache
from typing import Annotated, Optional

from fastapi import Depends, HTTPException, Query, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from forum_trust.config import get_settings
from forum_trust.database import async_session_maker
from forum_trust.engines.admin.dashboard import DashboardService
from forum_trust.engines.admin.homepage_controls import HomepageControls
from forum_trust.engines.moderation.discussion_controls import DiscussionControls
from forum_trust.engines.moderation.moderation_engine import ModerationEngine
from forum_trust.engines.reports.report_service import ReportService
from forum_trust.engines.users.user_service import UserService
from forum_trust.exceptions import NotFoundError, ValidationError
from forum_trust.kernel.events.audit_recorder import AuditRecorder
from forum_trust.kernel.identity.actor import Actor, resolve_actor
from forum_trust.kernel.identity.jwt import verify_access_token
from forum_trust.kernel.permissions.authorization_gate import AuthorizationGate
from forum_trust.kernel.permissions.policy import get_role_policy
from forum_trust.kernel.store.base import Store
from forum_trust.kernel.store.sql_store import SqlAlchemyStore
from forum_trust.logging_config import actor_id_var
from forum_trust.orchestration.bulk_coordinator import BulkCoordinator
from forum_trust.orchestration.notification_outbox import NotificationOutbox, StoreNotifier


# Security scheme
security = HTTPBearer(auto_error=False)


@lru_cache
def get_store() -> Store:
    """Process-wide store over the configured database."""
    return SqlAlchemyStore(async_session_maker)


@lru_cache
def get_outbox() -> NotificationOutbox:
    settings = get_settings()
    return NotificationOutbox(
        StoreNotifier(get_store()),
        maxsize=settings.notification_queue_size,
        max_attempts=settings.notification_max_attempts,
        poll_seconds=settings.notification_poll_seconds,
    )


def get_gate() -> AuthorizationGate:
    return AuthorizationGate(get_role_policy())


StoreDep = Annotated[Store, Depends(get_store)]
OutboxDep = Annotated[NotificationOutbox, Depends(get_outbox)]
GateDep = Annotated[AuthorizationGate, Depends(get_gate)]


async def _actor_from_credentials(
    credentials: Optional[HTTPAuthorizationCredentials],
    store: Store,
) -> Optional[Actor]:
    if not credentials:
        return None

    payload = verify_access_token(credentials.credentials)
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    # The stored role is authoritative; the token's role claim is ignored
    try:
        actor = await resolve_actor(store, payload.sub)
    except (NotFoundError, ValidationError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    actor_id_var.set(str(actor.id))
    return actor


async def get_current_actor_optional(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    store: StoreDep,
) -> Optional[Actor]:
    """Actor if a bearer token was sent, None otherwise."""
    return await _actor_from_credentials(credentials, store)


async def get_current_actor(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    store: StoreDep,
) -> Actor:
    """Get the authenticated actor or raise 401."""
    actor = await _actor_from_credentials(credentials, store)
    if actor is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return actor


CurrentActor = Annotated[Actor, Depends(get_current_actor)]
OptionalActor = Annotated[Optional[Actor], Depends(get_current_actor_optional)]


def get_request_id(request: Request) -> Optional[str]:
    """Get request correlation ID (set by RequestIdMiddleware)."""
    return getattr(request.state, "request_id", None)


class Pagination:
    """limit/offset query parameters clamped to the configured maximum."""

    def __init__(
        self,
        limit: Annotated[Optional[int], Query(ge=1)] = None,
        offset: Annotated[int, Query(ge=0)] = 0,
    ):
        settings = get_settings()
        self.limit = min(limit or settings.default_page_size, settings.max_page_size)
        self.offset = offset


PageParams = Annotated[Pagination, Depends()]


# ---- services ----

def get_audit_recorder(store: StoreDep) -> AuditRecorder:
    return AuditRecorder(store)


def get_moderation_engine(store: StoreDep, gate: GateDep, outbox: OutboxDep) -> ModerationEngine:
    return ModerationEngine(store, gate, outbox=outbox)


def get_discussion_controls(store: StoreDep, gate: GateDep, outbox: OutboxDep) -> DiscussionControls:
    return DiscussionControls(store, gate, outbox=outbox)


def get_report_service(store: StoreDep, gate: GateDep) -> ReportService:
    return ReportService(store, gate)


def get_user_service(store: StoreDep, gate: GateDep) -> UserService:
    return UserService(store, gate)


def get_homepage_controls(store: StoreDep, gate: GateDep) -> HomepageControls:
    return HomepageControls(store, gate)


def get_dashboard_service(store: StoreDep, gate: GateDep) -> DashboardService:
    return DashboardService(store, gate)


AuditDep = Annotated[AuditRecorder, Depends(get_audit_recorder)]
EngineDep = Annotated[ModerationEngine, Depends(get_moderation_engine)]
ControlsDep = Annotated[DiscussionControls, Depends(get_discussion_controls)]
ReportsDep = Annotated[ReportService, Depends(get_report_service)]
UsersDep = Annotated[UserService, Depends(get_user_service)]
HomepageDep = Annotated[HomepageControls, Depends(get_homepage_controls)]
DashboardDep = Annotated[DashboardService, Depends(get_dashboard_service)]


def get_bulk_coordinator(engine: EngineDep, reports: ReportsDep, users: UsersDep) -> BulkCoordinator:
    return BulkCoordinator(engine, reports, users)


BulkDep = Annotated[BulkCoordinator, Depends(get_bulk_coordinator)]
