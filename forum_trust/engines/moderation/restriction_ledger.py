"""
Content restriction ledger.

One immutable record per moderation transition, keyed by
(content_type, content_id). Independent of the denormalized
``moderation_status`` column; the moderation engine keeps both in step.
"""

from typing import List, Optional, Union

from forum_trust.kernel.models.content import ContentType, ModerationStatus
from forum_trust.kernel.models.restriction import ContentRestriction, RestrictionType
from forum_trust.kernel.store.base import QueryOptions, Record, RecordId, Store
from forum_trust.kernel.validators import clean_reason, coerce_enum

# Pending content is withheld from public view, so it is ledgered as a quarantine
_RESTRICTION_FOR_STATUS = {
    ModerationStatus.APPROVED: RestrictionType.RESTORED,
    ModerationStatus.PENDING: RestrictionType.QUARANTINED,
    ModerationStatus.QUARANTINED: RestrictionType.QUARANTINED,
    ModerationStatus.REMOVED: RestrictionType.REMOVED,
}


def restriction_for(status: ModerationStatus) -> RestrictionType:
    """Restriction type recorded for a transition into ``status``."""
    return _RESTRICTION_FOR_STATUS[status]


class RestrictionLedger:
    """Append-only ledger over the content_restrictions table."""

    table = ContentRestriction.__tablename__

    def __init__(self, store: Store):
        self.store = store

    async def record(
        self,
        content_type: Union[ContentType, str],
        content_id: RecordId,
        restriction_type: Union[RestrictionType, str],
        moderator_id: RecordId,
        reason: Optional[str] = None,
    ) -> Record:
        content_type = coerce_enum(ContentType, content_type, "content_type")
        restriction_type = coerce_enum(RestrictionType, restriction_type, "restriction_type")
        rows = await self.store.insert(
            self.table,
            {
                "content_type": content_type.value,
                "content_id": content_id,
                "restriction_type": restriction_type.value,
                "moderator_id": moderator_id,
                "reason": clean_reason(reason),
            },
        )
        return rows[0]

    async def history(
        self,
        content_type: Union[ContentType, str],
        content_id: RecordId,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Record]:
        """Restriction records for one content item, newest first."""
        content_type = coerce_enum(ContentType, content_type, "content_type")
        result = await self.store.query(
            self.table,
            {"content_type": content_type.value, "content_id": content_id},
            QueryOptions(order_by="created_at", limit=limit, offset=offset),
        )
        return result.rows

    async def latest(
        self,
        content_type: Union[ContentType, str],
        content_id: RecordId,
    ) -> Optional[Record]:
        rows = await self.history(content_type, content_id, limit=1)
        return rows[0] if rows else None
