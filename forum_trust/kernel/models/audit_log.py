"""
Append-only moderation audit log.

Every tracked field change (moderation status, control flags, roles,
report resolution, deletions, settings) is recorded here as one row.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import DateTime, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from forum_trust.kernel.models.base import Base, generate_uuid, utcnow


class AuditAction(str, Enum):
    """Closed vocabulary of audited actions."""

    # Moderation status
    APPROVE = "approve"
    REMOVE = "remove"
    QUARANTINE = "quarantine"
    RESTORE = "restore"

    # Discussion controls
    FEATURE = "feature"
    UNFEATURE = "unfeature"
    PROMOTE = "promote"
    UNPROMOTE = "unpromote"
    PIN = "pin"
    UNPIN = "unpin"

    # Users
    CHANGE_ROLE = "change_role"

    # Reports
    RESOLVE_REPORT = "resolve_report"
    DISMISS_REPORT = "dismiss_report"

    # Generic
    EDIT = "edit"
    DELETE = "delete"


class AuditLogEntry(Base):
    """
    Immutable audit entry.

    This table is append-only - no updates or deletes are exposed.
    """

    __tablename__ = "moderation_audit_log"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=generate_uuid,
    )

    # Subject of the change
    subject_type: Mapped[str] = mapped_column(String(50), nullable=False)
    subject_id: Mapped[uuid.UUID] = mapped_column(Uuid(), nullable=False, index=True)

    # Actor (NULL means the system)
    actor_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(),
        nullable=True,
        index=True,
    )

    # Change
    action_type: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    field_changed: Mapped[str] = mapped_column(String(100), nullable=False)
    old_value: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    new_value: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
        index=True,
    )

    __table_args__ = (
        Index("ix_audit_subject_time", "subject_id", "created_at"),
        Index("ix_audit_actor_time", "actor_id", "created_at"),
        Index("ix_audit_action_time", "action_type", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<AuditLogEntry {self.action_type} {self.subject_type}:{self.subject_id}>"
