"""
Persistence boundary: the Store contract and its SQLAlchemy implementation.
"""

from forum_trust.kernel.store.base import (
    QueryOptions,
    QueryResult,
    Record,
    RecordId,
    Store,
    as_id_list,
    parse_filter_key,
)
from forum_trust.kernel.store.sql_store import SqlAlchemyStore

__all__ = [
    "QueryOptions",
    "QueryResult",
    "Record",
    "RecordId",
    "Store",
    "as_id_list",
    "parse_filter_key",
    "SqlAlchemyStore",
]
