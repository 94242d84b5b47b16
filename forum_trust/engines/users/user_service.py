"""
User role management.
"""

from typing import Any, Dict, Optional, Union

from forum_trust.engines.best_effort import best_effort
from forum_trust.exceptions import NotFoundError
from forum_trust.kernel.events.audit_recorder import AuditRecorder
from forum_trust.kernel.identity.actor import Actor
from forum_trust.kernel.models.audit_log import AuditAction
from forum_trust.kernel.models.user import Role, User
from forum_trust.kernel.permissions.authorization_gate import AuthorizationGate
from forum_trust.kernel.permissions.policy import Operation
from forum_trust.kernel.store.base import QueryOptions, QueryResult, Record, RecordId, Store
from forum_trust.kernel.validators import coerce_enum, coerce_uuid
from forum_trust.logging_config import get_logger

logger = get_logger(__name__)

USERS = User.__tablename__


class UserService:
    """Role changes and staff-side user lookups."""

    def __init__(
        self,
        store: Store,
        gate: AuthorizationGate,
        audit: Optional[AuditRecorder] = None,
    ):
        self.store = store
        self.gate = gate
        self.audit = audit or AuditRecorder(store)

    async def change_role(
        self,
        actor: Actor,
        user_id: RecordId,
        new_role: Union[Role, str],
        reason: Optional[str],
    ) -> Record:
        """
        Assign ``new_role`` to a user.

        The check runs against the target's stored role. Assigning the role a
        user already has writes nothing.

        Raises:
            ValidationError: unknown role or blank reason
            AuthorizationError: actor lacks change_roles or does not outrank
                the current or the requested role
            NotFoundError: no such user
        """
        new_role = coerce_enum(Role, new_role, "role")
        self.gate.require(actor.role, Operation.CHANGE_ROLES)

        user = await self._load(user_id)
        current = coerce_enum(Role, user["role"], "role")
        reason = self.gate.check_role_change(actor.role, current, new_role, reason)
        if current == new_role:
            return user

        updated = await self.store.update_one(USERS, user["id"], {"role": new_role.value}, "User")
        await best_effort(
            self.audit.append(
                subject_type="user",
                subject_id=user["id"],
                actor_id=actor.id,
                action_type=AuditAction.CHANGE_ROLE,
                field_changed="role",
                old_value=current,
                new_value=new_role,
                reason=reason,
            ),
            "role change audit",
            user_id=user["id"],
        )

        logger.info(
            "User role changed",
            extra={
                "user_id": str(user["id"]),
                "from_role": current.value,
                "to_role": new_role.value,
            },
        )
        return updated

    async def _load(self, user_id: RecordId) -> Record:
        user = await self.store.get(USERS, coerce_uuid(user_id, "user_id"))
        if user is None:
            raise NotFoundError(f"User {user_id} not found")
        return user

    async def get_user(self, actor: Actor, user_id: RecordId) -> Record:
        self.gate.require(actor.role, Operation.MANAGE_USERS)
        return await self._load(user_id)

    async def list_users(
        self,
        actor: Actor,
        role: Optional[Union[Role, str]] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> QueryResult:
        filters: Dict[str, Any] = {}
        if role is not None:
            filters["role"] = coerce_enum(Role, role, "role").value
        self.gate.require(actor.role, Operation.MANAGE_USERS)
        return await self.store.query(
            USERS, filters, QueryOptions(limit=limit, offset=offset, count=True)
        )
