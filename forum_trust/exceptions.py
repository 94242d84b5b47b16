"""
Error taxonomy for the trust and moderation engine.

Validation and authorization errors are always raised before any store
write. Storage errors wrap failures of the underlying store.
"""

from typing import Optional


class ForumTrustError(Exception):
    """Base class for all engine errors."""

    code = "forum_trust_error"

    def __init__(self, message: str, *, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field

    def __str__(self) -> str:
        return self.message


class ValidationError(ForumTrustError):
    """Missing reason, blank justification or an invalid enum value."""

    code = "validation_error"


class AuthorizationError(ForumTrustError):
    """Role threshold or role precedence check failed."""

    code = "authorization_error"


class NotFoundError(ForumTrustError):
    """A content, report or user id does not resolve."""

    code = "not_found"


class StorageError(ForumTrustError):
    """The underlying store call failed."""

    code = "storage_error"
