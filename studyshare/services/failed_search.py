"""
Failed search log — counts zero-result queries per normalized form.

Upsert is a single INSERT ... ON CONFLICT (normalized_query) DO UPDATE, so two
concurrent misses for the same query end up as one row with count 2.
"""

import logging
from typing import Optional

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..models.base import new_uuid
from ..models.failed_search import FailedSearch
from .normalize import normalize_query

logger = logging.getLogger(__name__)


def _dialect_insert(dialect_name: str):
    if dialect_name == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    elif dialect_name == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
    else:
        raise NotImplementedError(f"No upsert support for dialect {dialect_name!r}")
    return insert


async def upsert_failed_search(
    db: AsyncSession,
    query: str,
    subject: Optional[str] = None,
    medium: Optional[str] = None,
    document_type: Optional[str] = None,
) -> str:
    """Insert a counter row or bump the existing one. Returns the normalized key."""
    normalized = normalize_query(query)
    if not normalized:
        raise ValueError(f"Query {query!r} has no searchable characters")
    insert = _dialect_insert(db.get_bind().dialect.name)

    stmt = insert(FailedSearch).values(
        id=new_uuid(),
        query=query,
        normalized_query=normalized,
        subject=subject,
        medium=medium,
        document_type=document_type,
        search_count=1,
        last_searched_at=func.now(),
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["normalized_query"],
        set_={
            "query": stmt.excluded.query,
            "subject": stmt.excluded.subject,
            "medium": stmt.excluded.medium,
            "document_type": stmt.excluded.document_type,
            "search_count": FailedSearch.search_count + 1,
            "last_searched_at": func.now(),
            "updated_at": func.now(),
        },
    )
    await db.execute(stmt)
    return normalized


class FailedSearchRecorder:
    """Best-effort logging of misses. Uses its own session; never raises."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def record(
        self,
        query: str,
        subject: Optional[str] = None,
        medium: Optional[str] = None,
        document_type: Optional[str] = None,
    ) -> None:
        if not normalize_query(query):
            logger.debug("Skipping failed-search log, nothing left after normalizing %r", query)
            return

        try:
            async with self.session_factory() as session:
                key = await upsert_failed_search(session, query, subject, medium, document_type)
                await session.commit()
            logger.info("Logged failed search: %s", key)
        except Exception as e:
            # Never fail a search because analytics logging failed
            logger.warning("Failed to log search %r: %s", query, e)
