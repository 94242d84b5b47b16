"""
Permission Core - role hierarchy, policy table and authorization gate.
"""

from forum_trust.kernel.permissions.role_hierarchy import (
    ROLE_LEVELS,
    STAFF_ROLES,
    as_role,
    assignable_roles,
    can_act_on_role,
    display_name,
    has_minimum_role,
    is_staff_role,
    level,
)
from forum_trust.kernel.permissions.policy import (
    DEFAULT_THRESHOLDS,
    Operation,
    RolePolicy,
    get_role_policy,
)
from forum_trust.kernel.permissions.authorization_gate import (
    AuthorizationGate,
    RoleCapabilities,
)

__all__ = [
    "ROLE_LEVELS",
    "STAFF_ROLES",
    "as_role",
    "assignable_roles",
    "can_act_on_role",
    "display_name",
    "has_minimum_role",
    "is_staff_role",
    "level",
    "DEFAULT_THRESHOLDS",
    "Operation",
    "RolePolicy",
    "get_role_policy",
    "AuthorizationGate",
    "RoleCapabilities",
]
