"""
Role policy - declarative threshold table mapping each gated operation to
the minimum role allowed to perform it.

Built once at process start (see ``get_role_policy``) and passed by
reference into the AuthorizationGate.
"""

from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from types import MappingProxyType
from typing import Mapping, Optional

from forum_trust.config import Settings, get_settings
from forum_trust.exceptions import ValidationError
from forum_trust.kernel.models.user import Role
from forum_trust.kernel.validators import coerce_enum


class Operation(str, Enum):
    """Operations guarded by the authorization gate."""
    VIEW_REPORTS = "view_reports"
    RESOLVE_REPORTS = "resolve_reports"
    MODERATE_CONTENT = "moderate_content"
    MANAGE_USERS = "manage_users"
    VIEW_AUDIT_LOGS = "view_audit_logs"
    CHANGE_ROLES = "change_roles"
    MANAGE_SETTINGS = "manage_settings"


DEFAULT_THRESHOLDS: Mapping[Operation, Role] = MappingProxyType({
    Operation.VIEW_REPORTS: Role.MODERATOR,
    Operation.RESOLVE_REPORTS: Role.MODERATOR,
    Operation.MODERATE_CONTENT: Role.MODERATOR,
    Operation.MANAGE_USERS: Role.SUPER_MODERATOR,
    Operation.VIEW_AUDIT_LOGS: Role.SUPER_MODERATOR,
    Operation.CHANGE_ROLES: Role.ADMIN,
    Operation.MANAGE_SETTINGS: Role.ADMIN,
})


@dataclass(frozen=True)
class RolePolicy:
    """Immutable operation -> minimum role table covering every Operation."""

    thresholds: Mapping[Operation, Role] = field(default_factory=lambda: DEFAULT_THRESHOLDS)

    def __post_init__(self) -> None:
        missing = [op.value for op in Operation if op not in self.thresholds]
        if missing:
            raise ValidationError(f"Role policy has no threshold for: {', '.join(missing)}")
        object.__setattr__(self, "thresholds", MappingProxyType(dict(self.thresholds)))

    def minimum_role(self, operation: Operation) -> Role:
        return self.thresholds[operation]

    @classmethod
    def with_overrides(cls, overrides: Optional[Mapping[str, str]] = None) -> "RolePolicy":
        """Defaults with selected operations re-pointed to another role."""
        thresholds = dict(DEFAULT_THRESHOLDS)
        for op_name, role_name in (overrides or {}).items():
            op = coerce_enum(Operation, op_name, "operation")
            thresholds[op] = coerce_enum(Role, role_name, "role")
        return cls(thresholds=thresholds)

    @classmethod
    def from_settings(cls, settings: Settings) -> "RolePolicy":
        return cls.with_overrides(settings.role_policy_overrides)


@lru_cache
def get_role_policy() -> RolePolicy:
    """Process-wide policy built from settings on first use."""
    return RolePolicy.from_settings(get_settings())
