"""
Secondary-write policy.

Once a primary write has succeeded, follow-up writes (audit entries,
restriction records, counters) must not change the outcome reported to the
caller: their storage failures are logged and swallowed.
"""

from typing import Any, Awaitable, Optional, TypeVar

from forum_trust.exceptions import StorageError
from forum_trust.logging_config import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


async def best_effort(awaitable: Awaitable[T], description: str, **context: Any) -> Optional[T]:
    """Await a secondary write; on StorageError log it and return None."""
    try:
        return await awaitable
    except StorageError as exc:
        logger.error(
            "Secondary write failed: %s",
            description,
            exc_info=exc,
            extra={k: str(v) for k, v in context.items()},
        )
        return None
