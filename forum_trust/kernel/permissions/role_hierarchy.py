"""
Role hierarchy - total order over forum roles.

Pure functions; no I/O. A role can only ever act on roles strictly below
its own level, which rules out self-escalation and peer demotion.
"""

from typing import Dict, List, Union

from forum_trust.kernel.models.user import Role
from forum_trust.kernel.validators import coerce_enum

RoleLike = Union[Role, str]

# Role hierarchy - higher levels include all lower levels
ROLE_LEVELS: Dict[Role, int] = {
    Role.USER: 1,
    Role.MODERATOR: 2,
    Role.SUPER_MODERATOR: 3,
    Role.ADMIN: 4,
    Role.OWNER: 5,
}

STAFF_ROLES = frozenset({Role.MODERATOR, Role.SUPER_MODERATOR, Role.ADMIN, Role.OWNER})

_DISPLAY_NAMES: Dict[Role, str] = {
    Role.USER: "User",
    Role.MODERATOR: "Moderator",
    Role.SUPER_MODERATOR: "Super Moderator",
    Role.ADMIN: "Admin",
    Role.OWNER: "Owner",
}


def as_role(role: RoleLike) -> Role:
    return coerce_enum(Role, role, "role")


def level(role: RoleLike) -> int:
    """Numeric privilege level, 1 (user) through 5 (owner)."""
    return ROLE_LEVELS[as_role(role)]


def has_minimum_role(actual: RoleLike, required: RoleLike) -> bool:
    return level(actual) >= level(required)


def can_act_on_role(actor: RoleLike, target: RoleLike) -> bool:
    """True only when ``actor`` strictly outranks ``target``."""
    return level(actor) > level(target)


def is_staff_role(role: RoleLike) -> bool:
    return as_role(role) in STAFF_ROLES


def assignable_roles(actor: RoleLike) -> List[Role]:
    """Roles the actor may assign: everything strictly below its own level."""
    actor_level = level(actor)
    return [r for r in Role if ROLE_LEVELS[r] < actor_level]


def display_name(role: RoleLike) -> str:
    return _DISPLAY_NAMES[as_role(role)]
