"""
FastAPI dependencies. Injected into route handlers.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from .config import get_settings
from .database import get_db as _get_db, get_session_factory
from .flags import get_flags
from .subjects import SubjectCatalog, get_catalog
from ..services.failed_search import FailedSearchRecorder
from ..services.search import SearchService
from ..services.search_store import DocumentSearchStore


async def get_db() -> AsyncSession:
    """Yields an async DB session per request."""
    async for session in _get_db():
        yield session


def get_catalog_dep() -> SubjectCatalog:
    """The process-wide subject catalog. Override in tests to swap it."""
    return get_catalog()


def get_search_service(
    db: AsyncSession = Depends(get_db),
    catalog: SubjectCatalog = Depends(get_catalog_dep),
) -> SearchService:
    settings = get_settings()
    flags = get_flags()
    return SearchService(
        store=DocumentSearchStore(db, procedure=settings.search_procedure),
        catalog=catalog,
        use_procedure=flags.use_full_text_search,
        avatar_base_url=settings.avatar_base_url,
    )


def get_recorder() -> FailedSearchRecorder:
    """Failed-search recorder with its own sessions (runs after the response)."""
    return FailedSearchRecorder(get_session_factory())
