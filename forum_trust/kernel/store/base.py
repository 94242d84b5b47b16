"""
Store collaborator contract.

The engine reaches persistence only through this interface: per-table
get / update / insert / query over plain dict records. No call spans more
than one statement's worth of atomicity.
"""

import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from forum_trust.exceptions import NotFoundError

Record = Dict[str, Any]
RecordId = Union[uuid.UUID, str]

FILTER_OPERATORS = ("in", "ne", "gte", "lte", "isnull")


@dataclass(frozen=True)
class QueryOptions:
    """Ordering, pagination and counting options for Store.query."""

    order_by: Optional[str] = "created_at"
    descending: bool = True
    limit: Optional[int] = None
    offset: int = 0
    count: bool = False


@dataclass
class QueryResult:
    """Rows of one query page, plus the total match count when requested."""

    rows: List[Record] = field(default_factory=list)
    count: Optional[int] = None

    @property
    def total(self) -> int:
        return self.count if self.count is not None else len(self.rows)


def parse_filter_key(key: str) -> Tuple[str, str]:
    """
    Split a filter key into (column, operator).

    ``"status"`` -> ``("status", "eq")``; ``"created_at__gte"`` ->
    ``("created_at", "gte")``. Unknown suffixes are treated as part of the
    column name.
    """
    column, sep, op = key.rpartition("__")
    if sep and op in FILTER_OPERATORS:
        return column, op
    return key, "eq"


def as_id_list(ids: Union[RecordId, Sequence[RecordId]]) -> List[RecordId]:
    """Normalize a single id or a sequence of ids to a list."""
    if isinstance(ids, (uuid.UUID, str)):
        return [ids]
    return list(ids)


class Store(ABC):
    """Opaque persistent store with per-table CRUD and basic filtering."""

    @abstractmethod
    async def get(self, table: str, record_id: RecordId) -> Optional[Record]:
        """Fetch one record by id, or None."""

    @abstractmethod
    async def update(
        self,
        table: str,
        ids: Union[RecordId, Sequence[RecordId]],
        fields: Mapping[str, Any],
    ) -> List[Record]:
        """Apply ``fields`` to every listed row in one statement; return the updated rows."""

    @abstractmethod
    async def insert(
        self,
        table: str,
        records: Union[Mapping[str, Any], Sequence[Mapping[str, Any]]],
    ) -> List[Record]:
        """Insert one or many records; return them with generated columns filled."""

    @abstractmethod
    async def query(
        self,
        table: str,
        filters: Optional[Mapping[str, Any]] = None,
        options: Optional[QueryOptions] = None,
    ) -> QueryResult:
        """Filter, order and paginate a table."""

    async def update_one(
        self,
        table: str,
        record_id: RecordId,
        fields: Mapping[str, Any],
        label: str = "Record",
    ) -> Record:
        """Update a single row; NotFoundError if it vanished since it was read."""
        rows = await self.update(table, record_id, fields)
        if not rows:
            raise NotFoundError(f"{label} {record_id} not found")
        return rows[0]
