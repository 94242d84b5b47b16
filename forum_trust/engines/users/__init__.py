"""
Users - role management.
"""

from forum_trust.engines.users.user_service import UserService

__all__ = ["UserService"]
