"""
Acting user resolved for one request.
"""

import uuid
from dataclasses import dataclass
from typing import Optional

from forum_trust.exceptions import AuthorizationError, NotFoundError
from forum_trust.kernel.models.user import Role, User
from forum_trust.kernel.store.base import RecordId, Store
from forum_trust.kernel.validators import coerce_enum, coerce_uuid


@dataclass(frozen=True)
class Actor:
    """Who is performing an operation and with which stored role."""

    id: uuid.UUID
    role: Role
    username: Optional[str] = None

    @classmethod
    def from_record(cls, record: dict) -> "Actor":
        return cls(
            id=coerce_uuid(record["id"]),
            role=coerce_enum(Role, record["role"], "role"),
            username=record.get("username"),
        )


async def resolve_actor(store: Store, user_id: RecordId) -> Actor:
    """Load the user row and build an Actor from its stored role."""
    record = await store.get(User.__tablename__, coerce_uuid(user_id, "user_id"))
    if record is None:
        raise NotFoundError(f"User {user_id} not found")
    if not record.get("is_active", True):
        raise AuthorizationError("User account is disabled")
    return Actor.from_record(record)
