"""
Content restriction records - the canonical history of a content item's
trust status, one row per moderation transition.
"""

import uuid
from enum import Enum
from typing import Optional

from sqlalchemy import Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from forum_trust.kernel.models.base import Base, CreatedAtMixin, generate_uuid


class RestrictionType(str, Enum):
    """Kind of transition a restriction record describes."""
    QUARANTINED = "quarantined"
    REMOVED = "removed"
    RESTORED = "restored"


class ContentRestriction(Base, CreatedAtMixin):
    """
    Immutable restriction record.

    Rows are only ever inserted; nothing updates or deletes them.
    """

    __tablename__ = "content_restrictions"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=generate_uuid,
    )
    content_type: Mapped[str] = mapped_column(String(20), nullable=False)
    content_id: Mapped[uuid.UUID] = mapped_column(Uuid(), nullable=False)
    restriction_type: Mapped[str] = mapped_column(String(20), nullable=False)
    moderator_id: Mapped[uuid.UUID] = mapped_column(Uuid(), nullable=False, index=True)
    reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("ix_content_restrictions_content", "content_type", "content_id"),
    )

    def __repr__(self) -> str:
        return f"<ContentRestriction {self.restriction_type} {self.content_type}:{self.content_id}>"
