"""
Identity Core - access token verification and actor resolution.
"""

from forum_trust.kernel.identity.jwt import (
    JWTManager,
    AccessTokenPayload,
    create_access_token,
    verify_access_token,
)
from forum_trust.kernel.identity.actor import Actor, resolve_actor

__all__ = [
    "JWTManager",
    "AccessTokenPayload",
    "create_access_token",
    "verify_access_token",
    "Actor",
    "resolve_actor",
]
