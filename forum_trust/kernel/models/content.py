"""
Moderatable content models - discussions, debates and comments.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Dict, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from forum_trust.kernel.models.base import (
    Base,
    CreatedAtMixin,
    ModerationMixin,
    SoftDeleteMixin,
    generate_uuid,
)


class ModerationStatus(str, Enum):
    """Trust/visibility state of one content item."""
    PENDING = "pending"
    APPROVED = "approved"
    QUARANTINED = "quarantined"
    REMOVED = "removed"


# Target states that hide content and therefore need a stated reason
RESTRICTIVE_STATUSES = frozenset({ModerationStatus.QUARANTINED, ModerationStatus.REMOVED})


class ContentType(str, Enum):
    """Kinds of moderatable content."""
    DISCUSSION = "discussion"
    COMMENT = "comment"
    DEBATE = "debate"


class Discussion(Base, CreatedAtMixin, ModerationMixin, SoftDeleteMixin):
    """A discussion thread, including homepage control flags."""

    __tablename__ = "discussions"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=generate_uuid,
    )
    author_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    view_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Control flags (orthogonal to moderation_status)
    is_featured: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    featured_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    featured_by: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid(), nullable=True)
    is_promoted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    promoted_start_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    promoted_end_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    promoted_by: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid(), nullable=True)
    is_pinned: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    def __repr__(self) -> str:
        return f"<Discussion {self.id} [{self.moderation_status}]>"


class Debate(Base, CreatedAtMixin, ModerationMixin, SoftDeleteMixin):
    """A structured two-sided debate."""

    __tablename__ = "debates"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=generate_uuid,
    )
    author_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Debate {self.id} [{self.moderation_status}]>"


class Comment(Base, CreatedAtMixin, ModerationMixin, SoftDeleteMixin):
    """A comment on a discussion or debate."""

    __tablename__ = "comments"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=generate_uuid,
    )
    author_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    discussion_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid(), nullable=True, index=True)
    debate_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid(), nullable=True, index=True)
    body: Mapped[str] = mapped_column(Text, nullable=False)

    def __repr__(self) -> str:
        return f"<Comment {self.id} [{self.moderation_status}]>"


CONTENT_TABLES: Dict[ContentType, str] = {
    ContentType.DISCUSSION: Discussion.__tablename__,
    ContentType.COMMENT: Comment.__tablename__,
    ContentType.DEBATE: Debate.__tablename__,
}


def table_for(content_type: ContentType) -> str:
    """Table holding rows of the given content type."""
    return CONTENT_TABLES[content_type]
