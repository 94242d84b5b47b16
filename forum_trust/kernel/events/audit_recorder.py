"""
Audit recorder for the append-only moderation audit log.

``append`` is the only mutator; there is no update or delete method.
Immutability is a property of this interface, not of the storage layer.
"""

import enum
import json
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from forum_trust.kernel.models.audit_log import AuditAction, AuditLogEntry
from forum_trust.kernel.store.base import QueryOptions, Record, RecordId, Store
from forum_trust.kernel.validators import clean_reason, coerce_enum


@dataclass
class AuditPage:
    """One page of audit entries, newest first."""

    items: List[Record]
    total: int
    limit: int
    offset: int

    @property
    def has_more(self) -> bool:
        return self.offset + len(self.items) < self.total


class AuditRecorder:
    """
    Service over the immutable audit log.

    Usage:
        recorder = AuditRecorder(store)
        await recorder.append(
            subject_type="discussion",
            subject_id=discussion_id,
            actor_id=actor.id,
            action_type=AuditAction.QUARANTINE,
            field_changed="moderation_status",
            old_value="approved",
            new_value="quarantined",
            reason="spam",
        )
    """

    table = AuditLogEntry.__tablename__

    def __init__(self, store: Store):
        self.store = store

    async def append(
        self,
        *,
        subject_type: str,
        subject_id: RecordId,
        actor_id: Optional[RecordId],
        action_type: Union[AuditAction, str],
        field_changed: str,
        old_value: Any = None,
        new_value: Any = None,
        reason: Optional[str] = None,
    ) -> Record:
        """
        Append one audit entry.

        Args:
            subject_type: Kind of subject (discussion, comment, debate, report, user, ...)
            subject_id: The ID of the subject
            actor_id: The acting user; None for system actions
            action_type: One of the AuditAction vocabulary
            field_changed: Name of the field that changed
            old_value: Value before the change (serialized to JSON)
            new_value: Value after the change (serialized to JSON)
            reason: Optional free-text justification

        Returns:
            The stored entry
        """
        action = coerce_enum(AuditAction, action_type, "action_type")
        rows = await self.store.insert(
            self.table,
            {
                "subject_type": subject_type,
                "subject_id": subject_id,
                "actor_id": actor_id,
                "action_type": action.value,
                "field_changed": field_changed,
                "old_value": self.serialize(old_value),
                "new_value": self.serialize(new_value),
                "reason": clean_reason(reason),
            },
        )
        return rows[0]

    async def subject_history(
        self,
        subject_id: RecordId,
        limit: int = 50,
        offset: int = 0,
    ) -> AuditPage:
        """All entries for one subject, newest first."""
        result = await self.store.query(
            self.table,
            {"subject_id": subject_id},
            QueryOptions(order_by="created_at", limit=limit, offset=offset, count=True),
        )
        return AuditPage(items=result.rows, total=result.total, limit=limit, offset=offset)

    async def search(
        self,
        *,
        actor_id: Optional[RecordId] = None,
        action_type: Optional[Union[AuditAction, str]] = None,
        target_type: Optional[str] = None,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> AuditPage:
        """
        Filter the log by actor, action, subject type and time range.

        Returns:
            AuditPage, newest first
        """
        filters: Dict[str, Any] = {}
        if actor_id is not None:
            filters["actor_id"] = actor_id
        if action_type is not None:
            filters["action_type"] = coerce_enum(AuditAction, action_type, "action_type").value
        if target_type is not None:
            filters["subject_type"] = target_type
        if since is not None:
            filters["created_at__gte"] = since
        if until is not None:
            filters["created_at__lte"] = until

        result = await self.store.query(
            self.table,
            filters,
            QueryOptions(order_by="created_at", limit=limit, offset=offset, count=True),
        )
        return AuditPage(items=result.rows, total=result.total, limit=limit, offset=offset)

    @classmethod
    def serialize(cls, value: Any) -> Optional[str]:
        """JSON-encode a field value; None stays None."""
        if value is None:
            return None
        return json.dumps(cls._plain(value))

    @classmethod
    def _plain(cls, value: Any) -> Any:
        """Convert values to JSON-serializable types."""
        if isinstance(value, enum.Enum):
            return value.value
        if isinstance(value, uuid.UUID):
            return str(value)
        if isinstance(value, datetime):
            return value.isoformat()
        if isinstance(value, dict):
            return {str(k): cls._plain(v) for k, v in value.items()}
        if isinstance(value, (list, tuple, set)):
            return [cls._plain(v) for v in value]
        return value
