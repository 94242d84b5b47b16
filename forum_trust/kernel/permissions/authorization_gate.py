"""
Authorization gate - the single place that decides whether a role may
perform an operation. Runs before any engine call and never writes.
"""

from dataclasses import dataclass
from typing import FrozenSet, Optional

from forum_trust.exceptions import AuthorizationError
from forum_trust.kernel.models.user import Role
from forum_trust.kernel.permissions.policy import Operation, RolePolicy
from forum_trust.kernel.permissions.role_hierarchy import (
    RoleLike,
    as_role,
    can_act_on_role,
    has_minimum_role,
)
from forum_trust.kernel.validators import require_reason


@dataclass(frozen=True)
class RoleCapabilities:
    """Capability set derived from a role under a given policy."""

    role: Role
    can_view_reports: bool
    can_resolve_reports: bool
    can_moderate_content: bool
    can_manage_users: bool
    can_view_audit_logs: bool
    can_change_roles: bool
    can_manage_settings: bool

    @property
    def operations(self) -> FrozenSet[Operation]:
        flags = {
            Operation.VIEW_REPORTS: self.can_view_reports,
            Operation.RESOLVE_REPORTS: self.can_resolve_reports,
            Operation.MODERATE_CONTENT: self.can_moderate_content,
            Operation.MANAGE_USERS: self.can_manage_users,
            Operation.VIEW_AUDIT_LOGS: self.can_view_audit_logs,
            Operation.CHANGE_ROLES: self.can_change_roles,
            Operation.MANAGE_SETTINGS: self.can_manage_settings,
        }
        return frozenset(op for op, allowed in flags.items() if allowed)

    def can_act_on(self, target: RoleLike) -> bool:
        return can_act_on_role(self.role, target)


class AuthorizationGate:
    """
    Permit/deny check combining the role hierarchy with the policy table.

    Usage:
        gate = AuthorizationGate(get_role_policy())
        gate.require(actor.role, Operation.MODERATE_CONTENT)
    """

    def __init__(self, policy: RolePolicy):
        self.policy = policy

    def allows(self, role: RoleLike, operation: Operation) -> bool:
        return has_minimum_role(role, self.policy.minimum_role(operation))

    def require(self, role: RoleLike, operation: Operation) -> None:
        """Raise AuthorizationError unless ``role`` meets the operation's threshold."""
        if not self.allows(role, operation):
            required = self.policy.minimum_role(operation)
            raise AuthorizationError(
                f"Operation '{operation.value}' requires role '{required.value}' or higher"
            )

    def capabilities(self, role: RoleLike) -> RoleCapabilities:
        role = as_role(role)
        return RoleCapabilities(
            role=role,
            can_view_reports=self.allows(role, Operation.VIEW_REPORTS),
            can_resolve_reports=self.allows(role, Operation.RESOLVE_REPORTS),
            can_moderate_content=self.allows(role, Operation.MODERATE_CONTENT),
            can_manage_users=self.allows(role, Operation.MANAGE_USERS),
            can_view_audit_logs=self.allows(role, Operation.VIEW_AUDIT_LOGS),
            can_change_roles=self.allows(role, Operation.CHANGE_ROLES),
            can_manage_settings=self.allows(role, Operation.MANAGE_SETTINGS),
        )

    def check_role_change(
        self,
        actor_role: RoleLike,
        target_current_role: RoleLike,
        requested_role: RoleLike,
        reason: Optional[str],
    ) -> str:
        """
        Validate a role change request and return the cleaned reason.

        The actor must hold the change-roles threshold and strictly outrank
        both the target's current role and the role being assigned.
        """
        self.require(actor_role, Operation.CHANGE_ROLES)
        if not can_act_on_role(actor_role, target_current_role):
            raise AuthorizationError(
                f"Role '{as_role(actor_role).value}' cannot act on a user with role "
                f"'{as_role(target_current_role).value}'"
            )
        if not can_act_on_role(actor_role, requested_role):
            raise AuthorizationError(
                f"Role '{as_role(actor_role).value}' cannot assign role "
                f"'{as_role(requested_role).value}'"
            )
        return require_reason(reason, "A reason is required for role changes")
