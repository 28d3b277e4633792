"""
Async SQLAlchemy engine and sessions for the document store.

PostgreSQL (asyncpg) in production; any SQLAlchemy async URL works, which is
how the tests run on aiosqlite. Non-PostgreSQL stores never get the
search_documents() procedure, so search always takes the fallback query there.
"""

import logging
from typing import Optional

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from .config import get_settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def _engine_options(backend: str) -> dict:
    settings = get_settings()
    options = {"echo": settings.debug}
    if backend == "postgresql":
        # asyncpg: every statement is bounded by command_timeout (seconds)
        options.update(
            pool_size=20,
            max_overflow=10,
            pool_pre_ping=True,
            connect_args={"command_timeout": settings.db_command_timeout},
        )
    return options


def get_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        url = make_url(get_settings().database_url)
        backend = url.get_backend_name()
        _engine = create_async_engine(url, **_engine_options(backend))
        logger.info("Document store engine created (%s)", backend)
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(get_engine(), expire_on_commit=False)
    return _session_factory


async def get_db() -> AsyncSession:
    """One session per request: committed on success, rolled back on error."""
    async with get_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db():
    """Create the users, documents and failed_searches tables if missing."""
    from ..models import document, failed_search, user  # noqa: F401

    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Tables verified: %s", ", ".join(sorted(Base.metadata.tables)))


async def close_db():
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _session_factory = None
        logger.info("Document store engine disposed")
