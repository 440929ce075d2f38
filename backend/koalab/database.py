"""
Koalab Backend: Database Engine and Session Management
=======================================================

What:  Async SQLAlchemy engine factory, declarative base, schema bootstrap and
       the per-request session dependency.
How:   The lifespan builds one engine + session factory from Settings and
       stores them on the application context. Handlers receive a fresh
       AsyncSession per request that rolls back on error. Writes are
       committed by the store itself, before the response is built.

Connection Pooling:
    pool_size / max_overflow come from Settings. SQLite (used by the test
    suite) manages its own pool, so pool sizing is only passed for server
    databases.
"""

from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from koalab.config import Settings


class Base(DeclarativeBase):
    """Base class for all Koalab ORM models (boards, lines, postits)."""
    pass


def build_engine(settings: Settings) -> AsyncEngine:
    """
    Create the async engine for the configured store.

    Echoes SQL when LOG_LEVEL is DEBUG.
    """
    url = settings.sqlalchemy_url
    options = {
        "pool_pre_ping": settings.db_pool_pre_ping,
        "echo": settings.log_level == "DEBUG",
    }
    if not url.startswith("sqlite"):
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_recycle=3600,
        )
    return create_async_engine(url, **options)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Session factory bound to `engine`.

    expire_on_commit=False keeps ORM attributes readable after the commit in
    get_db_session(), which happens after the handler returned its rows.
    """
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def create_schema(engine: AsyncEngine) -> None:
    """
    Create the boards, lines and postits tables if they do not exist.

    Also serves as the startup connectivity check: an unreachable store
    raises here.
    """
    # Register the models with Base.metadata before create_all
    from koalab.models import board  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    1. Opens a session from the context's factory
    2. Yields it to the route handler
    3. Rolls back on any error (the store commits its own writes, since
       code after the yield runs once the response has been sent)
    4. Always closes the session (returns the connection to the pool)

    Example:
        @router.get("/boards")
        async def list_boards(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    session_factory = request.app.state.context.session_factory
    async with session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
