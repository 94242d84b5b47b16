"""
User model and the forum role enum.
"""

import uuid
from enum import Enum

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from forum_trust.kernel.models.base import Base, CreatedAtMixin, generate_uuid


class Role(str, Enum):
    """Forum roles, declared from least to most privileged."""
    USER = "user"
    MODERATOR = "moderator"
    SUPER_MODERATOR = "super_moderator"
    ADMIN = "admin"
    OWNER = "owner"


class User(Base, CreatedAtMixin):
    """
    Forum account.

    The role column is only written through the role-change operation.
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=generate_uuid,
    )
    username: Mapped[str] = mapped_column(
        String(50),
        unique=True,
        index=True,
        nullable=False,
    )
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
    )
    role: Mapped[str] = mapped_column(
        String(20),
        default=Role.USER.value,
        nullable=False,
        index=True,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<User {self.username} ({self.role})>"
