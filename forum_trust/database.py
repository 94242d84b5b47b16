"""
Database connection and session management.
Uses SQLAlchemy 2.0 async pattern.
"""

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from forum_trust.config import get_settings


def create_engine_for_url(database_url: str, echo: bool = False) -> AsyncEngine:
    """Build an async engine with options suited to the database backend."""
    if database_url.startswith("sqlite"):
        # NullPool: every session gets its own connection
        sqlite_engine = create_async_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=NullPool,
        )

        @event.listens_for(sqlite_engine.sync_engine, "connect")
        def _set_sqlite_pragma(dbapi_conn, connection_record):
            """Enable WAL mode + foreign keys on every new SQLite connection."""
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.execute("PRAGMA busy_timeout=5000")
            cursor.close()

        return sqlite_engine

    return create_async_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
    )


def create_session_maker(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


settings = get_settings()
engine = create_engine_for_url(settings.database_url, echo=settings.debug)
async_session_maker = create_session_maker(engine)


async def init_db(db_engine: AsyncEngine = engine) -> None:
    """Create all tables (development / tests; production uses Alembic)."""
    # Import models so every table is registered on the metadata
    from forum_trust.kernel.models import Base

    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db(db_engine: AsyncEngine = engine) -> None:
    """Close database connections."""
    await db_engine.dispose()
