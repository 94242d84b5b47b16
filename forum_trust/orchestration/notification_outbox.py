"""
Notification outbox - bounded queue with at-least-once delivery.

Engines enqueue notifications and return immediately; delivery happens in
``deliver_pending`` (or the background worker) and is retried without
re-entering the moderation transition path.
"""

import asyncio
import uuid
from typing import List, Optional, Protocol

from pydantic import BaseModel

from forum_trust.exceptions import ForumTrustError
from forum_trust.kernel.models.notification import Notification
from forum_trust.kernel.store.base import Store
from forum_trust.logging_config import get_logger

logger = get_logger(__name__)


class NotificationMessage(BaseModel):
    """A notification waiting for delivery."""

    user_id: uuid.UUID
    type: str
    title: str
    content: str
    link: Optional[str] = None
    attempts: int = 0
    last_error: Optional[str] = None


class Notifier(Protocol):
    """Delivery collaborator: fire-and-forget from the caller's view."""

    async def notify(self, user_id: uuid.UUID, message: NotificationMessage) -> None:
        ...


class StoreNotifier:
    """Deliver notifications by inserting them into the notifications table."""

    def __init__(self, store: Store):
        self.store = store

    async def notify(self, user_id: uuid.UUID, message: NotificationMessage) -> None:
        await self.store.insert(
            Notification.__tablename__,
            {
                "user_id": user_id,
                "type": message.type,
                "title": message.title,
                "content": message.content,
                "link": message.link,
            },
        )


def featured_discussion_message(
    discussion: dict,
    featured_by: Optional[str] = None,
) -> NotificationMessage:
    """Notification telling an author their discussion was featured."""
    return NotificationMessage(
        user_id=discussion["author_id"],
        type="discussion_featured",
        title="Your discussion has been featured!",
        content=(
            f'Your discussion "{discussion.get("title", "")}" has been featured by '
            f"{featured_by or 'a moderator'}"
        ),
        link=f"/discussions/{discussion['id']}",
    )


class NotificationOutbox:
    """
    Bounded in-process outbox.

    Usage:
        outbox = NotificationOutbox(StoreNotifier(store))
        outbox.enqueue(message)          # never blocks
        await outbox.deliver_pending()   # or: await outbox.start()
    """

    def __init__(
        self,
        notifier: Notifier,
        maxsize: int = 1000,
        max_attempts: int = 3,
        poll_seconds: float = 1.0,
    ):
        self.notifier = notifier
        self.max_attempts = max_attempts
        self.poll_seconds = poll_seconds
        self.dead_letters: List[NotificationMessage] = []
        self._queue: asyncio.Queue[NotificationMessage] = asyncio.Queue(maxsize=maxsize)
        self._worker: Optional[asyncio.Task] = None

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def enqueue(self, message: NotificationMessage) -> bool:
        """Queue a message; returns False (and logs) when the outbox is full."""
        try:
            self._queue.put_nowait(message)
        except asyncio.QueueFull:
            logger.warning(
                "Notification outbox full, message rejected",
                extra={"user_id": str(message.user_id), "type": message.type},
            )
            return False
        return True

    async def _deliver(self, message: NotificationMessage) -> bool:
        message.attempts += 1
        try:
            await self.notifier.notify(message.user_id, message)
        except (ForumTrustError, OSError) as exc:
            message.last_error = str(exc)
            if message.attempts >= self.max_attempts:
                logger.error(
                    "Notification delivery abandoned",
                    extra={
                        "user_id": str(message.user_id),
                        "type": message.type,
                        "attempts": message.attempts,
                        "error": str(exc),
                    },
                )
                self.dead_letters.append(message)
            elif not self.enqueue(message):
                # queue filled up while this message was out; never drop it
                logger.error(
                    "Notification retry rejected, moved to dead letters",
                    extra={
                        "user_id": str(message.user_id),
                        "type": message.type,
                        "attempts": message.attempts,
                    },
                )
                self.dead_letters.append(message)
            return False
        return True

    async def deliver_pending(self) -> int:
        """
        Deliver everything currently queued, once each.

        Failed messages are re-queued for the next pass until they exhaust
        ``max_attempts``. Returns the number delivered in this pass.
        """
        delivered = 0
        for _ in range(self._queue.qsize()):
            try:
                message = self._queue.get_nowait()
            except asyncio.QueueEmpty:
                break
            if await self._deliver(message):
                delivered += 1
            self._queue.task_done()
        return delivered

    async def _run(self) -> None:
        while True:
            await self.deliver_pending()
            await asyncio.sleep(self.poll_seconds)

    async def start(self) -> None:
        """Start the background delivery worker."""
        if self._worker is None or self._worker.done():
            self._worker = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Stop the worker and flush what is left."""
        if self._worker is not None:
            self._worker.cancel()
            try:
                await self._worker
            except asyncio.CancelledError:
                pass
            self._worker = None
        await self.deliver_pending()
