"""
Kernel Data Models

SQLAlchemy models for users, moderatable content, restriction records,
the audit log, reports, notifications and homepage controls.
"""

from forum_trust.kernel.models.base import (
    Base,
    CreatedAtMixin,
    ModerationMixin,
    SoftDeleteMixin,
    generate_uuid,
    utcnow,
)
from forum_trust.kernel.models.user import User, Role
from forum_trust.kernel.models.content import (
    Discussion,
    Debate,
    Comment,
    ContentType,
    ModerationStatus,
    RESTRICTIVE_STATUSES,
    CONTENT_TABLES,
    table_for,
)
from forum_trust.kernel.models.restriction import ContentRestriction, RestrictionType
from forum_trust.kernel.models.audit_log import AuditLogEntry, AuditAction
from forum_trust.kernel.models.report import (
    Report,
    ReportReason,
    ReportStatus,
    CLOSING_STATUSES,
)
from forum_trust.kernel.models.notification import Notification, HomepageSectionControl

__all__ = [
    # Base
    "Base",
    "CreatedAtMixin",
    "ModerationMixin",
    "SoftDeleteMixin",
    "generate_uuid",
    "utcnow",
    # User
    "User",
    "Role",
    # Content
    "Discussion",
    "Debate",
    "Comment",
    "ContentType",
    "ModerationStatus",
    "RESTRICTIVE_STATUSES",
    "CONTENT_TABLES",
    "table_for",
    # Restrictions
    "ContentRestriction",
    "RestrictionType",
    # Audit
    "AuditLogEntry",
    "AuditAction",
    # Reports
    "Report",
    "ReportReason",
    "ReportStatus",
    "CLOSING_STATUSES",
    # Notifications / settings
    "Notification",
    "HomepageSectionControl",
]
