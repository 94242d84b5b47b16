"""
Input coercion shared by the engines. Every failure is a ValidationError
raised before any store call.
"""

import uuid
from enum import Enum
from typing import Optional, Type, TypeVar, Union

from forum_trust.exceptions import ValidationError

E = TypeVar("E", bound=Enum)


def coerce_enum(enum_cls: Type[E], value: Union[E, str], field: str) -> E:
    """Return ``value`` as a member of ``enum_cls``."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(
            f"Invalid {field} '{value}'. Expected one of: {allowed}",
            field=field,
        ) from None


def coerce_uuid(value: Union[uuid.UUID, str], field: str = "id") -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise ValidationError(f"Invalid {field} '{value}'", field=field) from None


def clean_reason(reason: Optional[str]) -> Optional[str]:
    """Strip a free-text reason; blank becomes None."""
    if reason is None:
        return None
    reason = reason.strip()
    return reason or None


def require_reason(reason: Optional[str], message: str = "A reason is required") -> str:
    cleaned = clean_reason(reason)
    if cleaned is None:
        raise ValidationError(message, field="reason")
    return cleaned
