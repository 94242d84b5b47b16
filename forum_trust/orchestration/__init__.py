"""Orchestration layer - notification outbox and bulk operation coordination.

``bulk_coordinator`` depends on the engines, which themselves enqueue through
the outbox, so it is imported from its own module rather than re-exported here.
"""

from forum_trust.orchestration.notification_outbox import (
    NotificationMessage,
    NotificationOutbox,
    Notifier,
    StoreNotifier,
    featured_discussion_message,
)

__all__ = [
    "NotificationMessage",
    "NotificationOutbox",
    "Notifier",
    "StoreNotifier",
    "featured_discussion_message",
]
