"""
Stable Kernel Layer

Foundational components every engine builds on:
- Data models (users, moderatable content, restrictions, audit log, reports)
- Store contract (the only path to persistence)
- Permission Core (role hierarchy, policy table, authorization gate)
- Identity Core (token verification, actor resolution)
- Audit recorder (append-only)

Architectural invariants:
- Moderation status is written only by the moderation engine and bulk coordinator
- Authorization and validation happen before any store write
- Audit entries are append-only; no update or delete is exposed
"""

from forum_trust.kernel.models import (
    Role,
    User,
    ContentType,
    ModerationStatus,
    RestrictionType,
    AuditAction,
    ReportReason,
    ReportStatus,
)

__all__ = [
    "Role",
    "User",
    "ContentType",
    "ModerationStatus",
    "RestrictionType",
    "AuditAction",
    "ReportReason",
    "ReportStatus",
]
