"""
Pytest fixtures for forum trust tests.

Unit tests run the engines against ``InMemoryStore``, a dict-backed Store
that fills column defaults from the ORM metadata and can be told to fail
specific calls.
"""

import uuid
from collections import defaultdict
from typing import Any, Dict, List, Mapping, Optional, Sequence, Set, Tuple, Union

import pytest
import pytest_asyncio
from sqlalchemy import Uuid

from forum_trust.engines.admin.dashboard import DashboardService
from forum_trust.engines.admin.homepage_controls import HomepageControls
from forum_trust.engines.moderation.discussion_controls import DiscussionControls
from forum_trust.engines.moderation.moderation_engine import ModerationEngine
from forum_trust.engines.moderation.restriction_ledger import RestrictionLedger
from forum_trust.engines.reports.report_service import ReportService
from forum_trust.engines.users.user_service import UserService
from forum_trust.exceptions import StorageError
from forum_trust.kernel.events.audit_recorder import AuditRecorder
from forum_trust.kernel.identity.actor import Actor
from forum_trust.kernel.identity.jwt import JWTManager
from forum_trust.kernel.models import Base, generate_uuid, utcnow
from forum_trust.kernel.permissions.authorization_gate import AuthorizationGate
from forum_trust.kernel.permissions.policy import RolePolicy
from forum_trust.kernel.store.base import (
    QueryOptions,
    QueryResult,
    Record,
    RecordId,
    Store,
    as_id_list,
    parse_filter_key,
)
from forum_trust.orchestration.bulk_coordinator import BulkCoordinator
from forum_trust.orchestration.notification_outbox import NotificationMessage, NotificationOutbox


class InMemoryStore(Store):
    """Dict-backed Store with failure injection."""

    def __init__(self):
        self.tables: Dict[str, Dict[uuid.UUID, Record]] = defaultdict(dict)
        self.failures: Set[Tuple[str, str]] = set()
        self.vanishing: Set[str] = set()
        self.calls: List[Tuple[str, str]] = []
        self._seq = 0

    def fail(self, method: str, table: str) -> None:
        """Make every ``method`` call on ``table`` raise StorageError."""
        self.failures.add((method, table))

    def vanish_after_get(self, table: str) -> None:
        """Delete a row from ``table`` right after it is read, as a concurrent delete would."""
        self.vanishing.add(table)

    def heal(self) -> None:
        self.failures.clear()
        self.vanishing.clear()

    def writes(self, table: Optional[str] = None) -> List[Tuple[str, str]]:
        return [
            c for c in self.calls
            if c[0] in ("insert", "update") and (table is None or c[1] == table)
        ]

    def rows(self, table: str) -> List[Record]:
        return [dict(r) for r in self.tables[table].values()]

    def _check(self, method: str, table: str) -> None:
        self.calls.append((method, table))
        if table not in Base.metadata.tables:
            raise StorageError(f"Unknown table: {table}")
        if (method, table) in self.failures:
            raise StorageError(f"Injected {method} failure on {table}")

    @staticmethod
    def _coerce(table: str, key: str, value: Any) -> Any:
        column = Base.metadata.tables[table].c.get(key)
        if column is not None and isinstance(column.type, Uuid):
            if isinstance(value, str):
                return uuid.UUID(value)
            if isinstance(value, (list, tuple, set, frozenset)):
                return [uuid.UUID(v) if isinstance(v, str) else v for v in value]
        return value

    @staticmethod
    def _defaults(table: str) -> Record:
        row: Record = {}
        for column in Base.metadata.tables[table].columns:
            default = column.default
            if default is None:
                row[column.name] = None
            elif default.is_callable:
                row[column.name] = default.arg(None)
            else:
                row[column.name] = default.arg
        return row

    def _matches(self, table: str, row: Record, filters: Mapping[str, Any]) -> bool:
        for key, value in filters.items():
            name, op = parse_filter_key(key)
            actual = row.get(name)
            value = self._coerce(table, name, value)
            if op == "in":
                ok = actual in list(value)
            elif op == "ne":
                ok = actual != value
            elif op == "gte":
                ok = actual is not None and actual >= value
            elif op == "lte":
                ok = actual is not None and actual <= value
            elif op == "isnull":
                ok = (actual is None) == bool(value)
            else:
                ok = actual == value
            if not ok:
                return False
        return True

    @staticmethod
    def _public(row: Record) -> Record:
        return {k: v for k, v in row.items() if k != "_seq"}

    async def get(self, table: str, record_id: RecordId) -> Optional[Record]:
        self._check("get", table)
        key = self._coerce(table, "id", record_id)
        row = self.tables[table].get(key)
        if row is None:
            return None
        if table in self.vanishing:
            del self.tables[table][key]
        return self._public(row)

    async def update(
        self,
        table: str,
        ids: Union[RecordId, Sequence[RecordId]],
        fields: Mapping[str, Any],
    ) -> List[Record]:
        self._check("update", table)
        updated = []
        for record_id in self._coerce(table, "id", as_id_list(ids)):
            row = self.tables[table].get(record_id)
            if row is None:
                continue
            row.update({k: self._coerce(table, k, v) for k, v in fields.items()})
            updated.append(self._public(row))
        return updated

    async def insert(
        self,
        table: str,
        records: Union[Mapping[str, Any], Sequence[Mapping[str, Any]]],
    ) -> List[Record]:
        self._check("insert", table)
        batch = [records] if isinstance(records, Mapping) else list(records)
        inserted = []
        for record in batch:
            row = self._defaults(table)
            row.update({k: self._coerce(table, k, v) for k, v in record.items()})
            if row.get("id") is None:
                row["id"] = generate_uuid()
            if "created_at" in row and row["created_at"] is None:
                row["created_at"] = utcnow()
            self._seq += 1
            row["_seq"] = self._seq
            self.tables[table][row["id"]] = row
            inserted.append(self._public(row))
        return inserted

    async def query(
        self,
        table: str,
        filters: Optional[Mapping[str, Any]] = None,
        options: Optional[QueryOptions] = None,
    ) -> QueryResult:
        self._check("query", table)
        options = options or QueryOptions()
        rows = [r for r in self.tables[table].values() if self._matches(table, r, filters or {})]
        count = len(rows) if options.count else None

        if options.order_by and options.order_by in Base.metadata.tables[table].c:
            col = options.order_by

            # NULLs sort first ascending (last descending); insertion order breaks ties
            def sort_key(row: Record):
                value = row.get(col)
                return (value is not None, value if value is not None else 0, row["_seq"])

            rows.sort(key=sort_key, reverse=options.descending)
        rows = rows[options.offset:]
        if options.limit is not None:
            rows = rows[:options.limit]
        return QueryResult(rows=[self._public(r) for r in rows], count=count)


class RecordingNotifier:
    """Notifier that records deliveries and can fail a set number of times."""

    def __init__(self, failures: int = 0):
        self.delivered: List[NotificationMessage] = []
        self.failures = failures
        self.attempts = 0

    async def notify(self, user_id: uuid.UUID, message: NotificationMessage) -> None:
        self.attempts += 1
        if self.failures > 0:
            self.failures -= 1
            raise StorageError("notification backend unavailable")
        self.delivered.append(message)


# ---- core fixtures ----

@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def gate() -> AuthorizationGate:
    return AuthorizationGate(RolePolicy())


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def outbox(notifier: RecordingNotifier) -> NotificationOutbox:
    return NotificationOutbox(notifier, maxsize=100, max_attempts=3, poll_seconds=0.01)


@pytest.fixture
def audit(store: InMemoryStore) -> AuditRecorder:
    return AuditRecorder(store)


@pytest.fixture
def ledger(store: InMemoryStore) -> RestrictionLedger:
    return RestrictionLedger(store)


@pytest.fixture
def engine(store, gate, audit, ledger, outbox) -> ModerationEngine:
    return ModerationEngine(store, gate, audit, ledger, outbox)


@pytest.fixture
def controls(store, gate, audit, outbox) -> DiscussionControls:
    return DiscussionControls(store, gate, audit, outbox)


@pytest.fixture
def report_service(store, gate, audit) -> ReportService:
    return ReportService(store, gate, audit)


@pytest.fixture
def user_service(store, gate, audit) -> UserService:
    return UserService(store, gate, audit)


@pytest.fixture
def bulk(engine, report_service, user_service) -> BulkCoordinator:
    return BulkCoordinator(engine, report_service, user_service)


@pytest.fixture
def homepage(store, gate, audit) -> HomepageControls:
    return HomepageControls(store, gate, audit)


@pytest.fixture
def dashboard(store, gate) -> DashboardService:
    return DashboardService(store, gate)


# ---- data factories ----

@pytest.fixture
def make_user(store: InMemoryStore):
    """Create a user row and return its Actor."""

    async def factory(role: str = "user", username: Optional[str] = None, is_active: bool = True) -> Actor:
        name = username or f"{role}-{uuid.uuid4().hex[:8]}"
        rows = await store.insert(
            "users",
            {"username": name, "email": f"{name}@example.com", "role": role, "is_active": is_active},
        )
        return Actor.from_record(rows[0])

    return factory


@pytest.fixture
def make_content(store: InMemoryStore):
    """Create a discussion, comment or debate row."""

    async def factory(content_type: str = "discussion", author: Optional[Actor] = None, **fields) -> Record:
        author_id = author.id if author else uuid.uuid4()
        record: Dict[str, Any] = {"author_id": author_id}
        if content_type == "comment":
            record["body"] = "A comment"
        else:
            record["title"] = f"A {content_type}"
        record.update(fields)
        table = {"discussion": "discussions", "comment": "comments", "debate": "debates"}[content_type]
        return (await store.insert(table, record))[0]

    return factory


@pytest_asyncio.fixture
async def member(make_user) -> Actor:
    return await make_user("user", "member")


@pytest_asyncio.fixture
async def moderator(make_user) -> Actor:
    return await make_user("moderator", "mod")


@pytest_asyncio.fixture
async def super_moderator(make_user) -> Actor:
    return await make_user("super_moderator", "supermod")


@pytest_asyncio.fixture
async def admin(make_user) -> Actor:
    return await make_user("admin", "admin")


@pytest_asyncio.fixture
async def owner(make_user) -> Actor:
    return await make_user("owner", "owner")


@pytest_asyncio.fixture
async def discussion(make_content, member) -> Record:
    return await make_content("discussion", member)


@pytest.fixture
def jwt_manager() -> JWTManager:
    """Create a JWT manager for tests."""
    return JWTManager(
        secret_key="test-secret-key-for-testing-only",
        algorithm="HS256",
        access_token_expire_minutes=30,
    )
