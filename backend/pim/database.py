"""
PIM Backend — Database Engine & Session Management
===================================================

What:  Async SQLAlchemy engine, session factory, declarative base and the
       FastAPI session dependency.
How:   A `Database` object owns the engine (and therefore the connection pool).
       The application factory constructs one, stores it on `app.state`, and
       the lifespan handler disposes it on shutdown. There is no module-level
       engine; anything that needs sessions receives the Database explicitly.
Who:   Route handlers (via `get_db_session`), the health check, Alembic's
       metadata lookup and the test suite.

Connection Pooling (PostgreSQL):
    pool_size / max_overflow:  from Settings (defaults 10 + 10)
    pool_pre_ping:             validates connections before use
    pool_recycle=3600:         recycles connections every hour
    SQLite URLs (tests) use the dialect's default pool and skip these options.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from typing import Any, AsyncGenerator, AsyncIterator, Dict, Optional

from fastapi import Request
from sqlalchemy import DateTime, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.types import TypeDecorator

from pim.config import Settings


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def advance_timestamp(previous: Optional[datetime]) -> datetime:
    """
    Returns a timestamp strictly later than `previous`.

    Two writes inside the same clock tick would otherwise share an
    updated_at value.
    """
    now = utcnow()
    if previous is not None and now <= previous:
        return previous + timedelta(microseconds=1)
    return now


class UTCDateTime(TypeDecorator):
    """
    DateTime column that always round-trips timezone-aware UTC values.

    PostgreSQL keeps the offset in TIMESTAMP WITH TIME ZONE; SQLite drops it,
    so naive values coming back are re-tagged as UTC.
    """

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Every model registers with this metadata, which Alembic reads for
    migrations and the test suite uses for create_all().
    """
    pass


class Database:
    """
    Owns the async engine and session factory for one application instance.

    Lifecycle:
        1. Constructed by create_app() (or by a test fixture / script)
        2. Sessions handed out per request through get_db_session()
        3. dispose() called from the application lifespan on shutdown

    Creating the engine does not open a connection; the first query does.
    """

    def __init__(self, settings: Settings):
        self.url = settings.database_url
        engine_options: Dict[str, Any] = {
            "echo": settings.db_echo or settings.log_level == "DEBUG",
        }
        if not settings.is_sqlite:
            engine_options.update(
                pool_size=settings.db_pool_size,
                max_overflow=settings.db_max_overflow,
                pool_pre_ping=settings.db_pool_pre_ping,
                pool_recycle=3600,
            )
        self.engine: AsyncEngine = create_async_engine(settings.database_url, **engine_options)
        # expire_on_commit=False: response models read attributes after the commit
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """
        One session per request: roll back on any error, always close.

        Nothing is committed here. OwnedRepository commits each write itself,
        so the commit (and any failure it raises) happens before the route
        handler returns, not after the response has been sent.
        """
        async with self.session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    async def ping(self) -> None:
        """Runs SELECT 1; raises whatever the driver raises when unreachable."""
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def create_all(self) -> None:
        """
        Creates every table registered on Base.metadata.

        Used by the test suite and local SQLite setups; PostgreSQL schemas
        are managed with Alembic.
        """
        from pim import models  # noqa: F401  (registers the mappers)

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        """Closes all pooled connections."""
        await self.engine.dispose()


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Looks up the Database attached to the running application
        2. Yields a session to the route handler
        3. Rolls back uncommitted work if the handler raised, then closes

    Writes are committed by the repository, not by this dependency: FastAPI
    runs the code after `yield` once the response is already on its way.

    Example usage in a route:
        @router.get("/notes")
        async def list_notes(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    database: Database = request.app.state.database
    async with database.session() as session:
        yield session
