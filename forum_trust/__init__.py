"""Forum trust engine - content moderation, reports and role-based authorization."""

__version__ = "1.0.0"
