"""
Pydantic schemas for API request/response validation.
"""

from forum_trust.schemas.audit import (
    AuditEntryResponse,
    DashboardMetricsResponse,
    HomepageSectionResponse,
    HomepageSectionsUpdate,
    HomepageSectionUpdate,
)
from forum_trust.schemas.common import (
    BulkFailureResponse,
    BulkResultResponse,
    ErrorResponse,
    HealthResponse,
    PaginatedResponse,
)
from forum_trust.schemas.moderation import (
    BulkDeleteRequest,
    BulkDiscussionControlsRequest,
    BulkModerationRequest,
    ContentResponse,
    DiscussionControlsUpdate,
    ModerationStatusUpdate,
    RestrictionResponse,
    TransitionResponse,
)
from forum_trust.schemas.reports import (
    BulkReportStatusRequest,
    ReportCreate,
    ReportResponse,
    ReportStatsResponse,
    ReportStatusUpdate,
)
from forum_trust.schemas.users import (
    BulkRoleChangeRequest,
    CapabilitiesResponse,
    RoleChangeRequest,
    UserResponse,
)

__all__ = [
    # Common
    "BulkFailureResponse",
    "BulkResultResponse",
    "ErrorResponse",
    "HealthResponse",
    "PaginatedResponse",
    # Moderation
    "BulkDeleteRequest",
    "BulkDiscussionControlsRequest",
    "BulkModerationRequest",
    "ContentResponse",
    "DiscussionControlsUpdate",
    "ModerationStatusUpdate",
    "RestrictionResponse",
    "TransitionResponse",
    # Reports
    "BulkReportStatusRequest",
    "ReportCreate",
    "ReportResponse",
    "ReportStatsResponse",
    "ReportStatusUpdate",
    # Users
    "BulkRoleChangeRequest",
    "CapabilitiesResponse",
    "RoleChangeRequest",
    "UserResponse",
    # Audit / admin
    "AuditEntryResponse",
    "DashboardMetricsResponse",
    "HomepageSectionResponse",
    "HomepageSectionsUpdate",
    "HomepageSectionUpdate",
]
