"""
SQLAlchemy-backed Store.

Each call runs in its own session and transaction. No transaction spans
several calls; multi-step engine operations are best-effort.
"""

import uuid
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from sqlalchemy import Column, Table, Uuid, asc, desc, func, insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from forum_trust.exceptions import StorageError
from forum_trust.kernel.models import Base, generate_uuid, utcnow
from forum_trust.kernel.store.base import (
    QueryOptions,
    QueryResult,
    Record,
    RecordId,
    Store,
    as_id_list,
    parse_filter_key,
)
from forum_trust.logging_config import get_logger

logger = get_logger(__name__)


class SqlAlchemyStore(Store):
    """
    Store over the ORM tables using SQLAlchemy Core statements.

    Usage:
        store = SqlAlchemyStore(async_session_maker)
        row = await store.get("discussions", discussion_id)
    """

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self.session_maker = session_maker

    # -- helpers -------------------------------------------------------------

    def _table(self, name: str) -> Table:
        try:
            return Base.metadata.tables[name]
        except KeyError as exc:
            raise StorageError(f"Unknown table: {name}") from exc

    def _column(self, table: Table, name: str) -> Column:
        try:
            return table.c[name]
        except KeyError as exc:
            raise StorageError(f"Unknown column {table.name}.{name}") from exc

    @staticmethod
    def _bind(column: Column, value: Any) -> Any:
        """Coerce string ids to UUIDs for Uuid columns."""
        if isinstance(column.type, Uuid):
            if isinstance(value, str):
                return uuid.UUID(value)
            if isinstance(value, (list, tuple, set, frozenset)):
                return [uuid.UUID(v) if isinstance(v, str) else v for v in value]
        return value

    def _ids(self, table: Table, ids: Sequence[RecordId]) -> List[Any]:
        return self._bind(table.c.id, list(ids))

    def _where(self, table: Table, filters: Mapping[str, Any]) -> list:
        clauses = []
        for key, value in filters.items():
            name, op = parse_filter_key(key)
            column = self._column(table, name)
            value = self._bind(column, value)
            if op == "in":
                clauses.append(column.in_(list(value)))
            elif op == "ne":
                clauses.append(column != value)
            elif op == "gte":
                clauses.append(column >= value)
            elif op == "lte":
                clauses.append(column <= value)
            elif op == "isnull":
                clauses.append(column.is_(None) if value else column.is_not(None))
            elif value is None:
                clauses.append(column.is_(None))
            else:
                clauses.append(column == value)
        return clauses

    def _prepare(self, table: Table, record: Mapping[str, Any]) -> Record:
        row = dict(record)
        row.setdefault("id", generate_uuid())
        if "created_at" in table.c:
            row.setdefault("created_at", utcnow())
        for key in list(row):
            row[key] = self._bind(self._column(table, key), row[key])
        return row

    async def _fetch_ids(self, session: AsyncSession, table: Table, ids: List[Any]) -> List[Record]:
        result = await session.execute(select(table).where(table.c.id.in_(ids)))
        by_id = {row["id"]: dict(row) for row in result.mappings().all()}
        return [by_id[i] for i in ids if i in by_id]

    # -- Store contract ------------------------------------------------------

    async def get(self, table: str, record_id: RecordId) -> Optional[Record]:
        t = self._table(table)
        try:
            async with self.session_maker() as session:
                result = await session.execute(
                    select(t).where(t.c.id == self._bind(t.c.id, record_id))
                )
                row = result.mappings().first()
        except SQLAlchemyError as exc:
            logger.error("Store get failed", extra={"table": table, "error": str(exc)})
            raise StorageError(f"Failed to read {table}") from exc
        return dict(row) if row is not None else None

    async def update(
        self,
        table: str,
        ids: Union[RecordId, Sequence[RecordId]],
        fields: Mapping[str, Any],
    ) -> List[Record]:
        t = self._table(table)
        id_list = self._ids(t, as_id_list(ids))
        if not id_list:
            return []
        values = {k: self._bind(self._column(t, k), v) for k, v in fields.items()}
        try:
            async with self.session_maker() as session:
                async with session.begin():
                    await session.execute(
                        update(t).where(t.c.id.in_(id_list)).values(**values)
                    )
                return await self._fetch_ids(session, t, id_list)
        except SQLAlchemyError as exc:
            logger.error("Store update failed", extra={"table": table, "error": str(exc)})
            raise StorageError(f"Failed to update {table}") from exc

    async def insert(
        self,
        table: str,
        records: Union[Mapping[str, Any], Sequence[Mapping[str, Any]]],
    ) -> List[Record]:
        t = self._table(table)
        batch = [records] if isinstance(records, Mapping) else list(records)
        if not batch:
            return []
        rows = [self._prepare(t, r) for r in batch]
        # executemany needs one key set per statement
        groups: Dict[frozenset, List[Record]] = {}
        for row in rows:
            groups.setdefault(frozenset(row), []).append(row)
        try:
            async with self.session_maker() as session:
                async with session.begin():
                    for group in groups.values():
                        await session.execute(insert(t), group)
                return await self._fetch_ids(session, t, [r["id"] for r in rows])
        except SQLAlchemyError as exc:
            logger.error("Store insert failed", extra={"table": table, "error": str(exc)})
            raise StorageError(f"Failed to insert into {table}") from exc

    async def query(
        self,
        table: str,
        filters: Optional[Mapping[str, Any]] = None,
        options: Optional[QueryOptions] = None,
    ) -> QueryResult:
        t = self._table(table)
        options = options or QueryOptions()
        stmt = select(t).where(*self._where(t, filters or {}))

        try:
            async with self.session_maker() as session:
                count: Optional[int] = None
                if options.count:
                    count_stmt = select(func.count()).select_from(stmt.subquery())
                    count = (await session.execute(count_stmt)).scalar() or 0

                if options.order_by and options.order_by in t.c:
                    column = t.c[options.order_by]
                    stmt = stmt.order_by(desc(column) if options.descending else asc(column))
                if options.offset:
                    stmt = stmt.offset(options.offset)
                if options.limit is not None:
                    stmt = stmt.limit(options.limit)

                result = await session.execute(stmt)
                rows: List[Dict[str, Any]] = [dict(r) for r in result.mappings().all()]
        except SQLAlchemyError as exc:
            logger.error("Store query failed", extra={"table": table, "error": str(exc)})
            raise StorageError(f"Failed to query {table}") from exc

        return QueryResult(rows=rows, count=count)
