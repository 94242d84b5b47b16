"""
User-submitted reports against content.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from forum_trust.kernel.models.base import Base, CreatedAtMixin, generate_uuid


class ReportReason(str, Enum):
    """Why a reporter flagged the content."""
    SPAM = "spam"
    HARASSMENT = "harassment"
    MISINFORMATION = "misinformation"
    INAPPROPRIATE = "inappropriate"
    OFF_TOPIC = "off_topic"
    OTHER = "other"


class ReportStatus(str, Enum):
    """Report lifecycle states."""
    UNRESOLVED = "unresolved"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    DISMISSED = "dismissed"


# Terminal states that stamp resolved_by / resolved_at
CLOSING_STATUSES = frozenset({ReportStatus.RESOLVED, ReportStatus.DISMISSED})


class Report(Base, CreatedAtMixin):
    """A report filed against one content item."""

    __tablename__ = "reports"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=generate_uuid,
    )
    reporter_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    content_type: Mapped[str] = mapped_column(String(20), nullable=False)
    content_id: Mapped[uuid.UUID] = mapped_column(Uuid(), nullable=False)
    reason: Mapped[str] = mapped_column(String(30), nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20),
        default=ReportStatus.UNRESOLVED.value,
        nullable=False,
        index=True,
    )

    # Set when the report is resolved or dismissed; kept if reopened
    resolved_by: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid(), nullable=True)
    resolved_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_reports_content", "content_type", "content_id"),
    )

    def __repr__(self) -> str:
        return f"<Report {self.id} {self.reason} [{self.status}]>"
