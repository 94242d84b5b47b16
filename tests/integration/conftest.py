"""
Integration fixtures: a real SqlAlchemyStore on a temporary SQLite file and
an httpx client bound to the FastAPI app with the store swapped in.
"""

import uuid
from typing import Callable, Dict

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from forum_trust.api.deps import get_outbox, get_store
from forum_trust.database import close_db, create_engine_for_url, create_session_maker, init_db
from forum_trust.kernel.identity.jwt import create_access_token
from forum_trust.kernel.store.sql_store import SqlAlchemyStore
from forum_trust.main import app
from forum_trust.orchestration.notification_outbox import NotificationOutbox, StoreNotifier


@pytest_asyncio.fixture
async def sql_store(tmp_path) -> SqlAlchemyStore:
    db_engine = create_engine_for_url(f"sqlite+aiosqlite:///{tmp_path / 'forum_trust.db'}")
    await init_db(db_engine)
    yield SqlAlchemyStore(create_session_maker(db_engine))
    await close_db(db_engine)


@pytest.fixture
def api_outbox(sql_store) -> NotificationOutbox:
    return NotificationOutbox(StoreNotifier(sql_store), maxsize=100)


@pytest_asyncio.fixture
async def client(sql_store, api_outbox) -> AsyncClient:
    app.dependency_overrides[get_store] = lambda: sql_store
    app.dependency_overrides[get_outbox] = lambda: api_outbox
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def create_user(sql_store) -> Callable:
    """Insert a user and return (record, auth headers)."""

    async def factory(role: str = "user", is_active: bool = True):
        name = f"{role}-{uuid.uuid4().hex[:8]}"
        [record] = await sql_store.insert(
            "users",
            {"username": name, "email": f"{name}@example.com", "role": role, "is_active": is_active},
        )
        token, _, _ = create_access_token(record["id"], role)
        headers: Dict[str, str] = {"Authorization": f"Bearer {token}"}
        return record, headers

    return factory


@pytest.fixture
def create_discussion(sql_store) -> Callable:
    async def factory(author_id: uuid.UUID, **fields):
        [row] = await sql_store.insert(
            "discussions", {"author_id": author_id, "title": "Integration discussion", **fields}
        )
        return row

    return factory


@pytest_asyncio.fixture
async def author(sql_store) -> dict:
    """A plain user to own content rows (author_id is a foreign key)."""
    [record] = await sql_store.insert(
        "users", {"username": "author", "email": "author@example.com", "role": "user"}
    )
    return record
