"""
Document search — procedure first, query-builder fallback.

Order per request:
  1. search_documents() procedure (if FF_USE_FULL_TEXT_SEARCH). Any error → step 2.
  2. SELECT over approved documents: title ILIKE OR exact subject match,
     or literature subjects only for literature queries.

Only step 2 errors reach the caller (SearchUnavailableError → HTTP 500).
Empty queries skip both and list approved documents.
"""

import asyncio
import logging
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError

from ..core.subjects import SubjectCatalog, is_literature_query
from ..models.document import Document
from .results import (
    FallbackOutcome,
    PrimaryOutcome,
    SearchOutcome,
    SearchResult,
    shape_document,
    shape_procedure_row,
)
from .search_store import DocumentSearchStore, SortBy

logger = logging.getLogger(__name__)


class SearchUnavailableError(Exception):
    """The fallback query failed. There is nothing left to try."""


def store_error_message(error: BaseException) -> str:
    """First line of the driver error, without SQLAlchemy's statement dump."""
    cause = getattr(error, "orig", None) or error
    lines = str(cause).strip().splitlines()
    return lines[0] if lines else type(cause).__name__


def sort_results(items: list[SearchResult], sort_by: SortBy) -> list[SearchResult]:
    """Stable in-memory sort, same keys as order_by_clauses()."""
    if sort_by == SortBy.NEWEST:
        return sorted(items, key=lambda r: r.created_at.timestamp() if r.created_at else 0, reverse=True)
    if sort_by == SortBy.UPVOTES:
        return sorted(items, key=lambda r: r.upvotes, reverse=True)
    if sort_by == SortBy.TITLE_ASC:
        return sorted(items, key=lambda r: r.title.lower())
    if sort_by == SortBy.TITLE_DESC:
        return sorted(items, key=lambda r: r.title.lower(), reverse=True)
    return sorted(items, key=lambda r: r.downloads, reverse=True)


def relevance_score(
    item: SearchResult,
    query: str,
    exact_subject: Optional[str],
    related_subjects: list[str],
) -> float:
    """Browse ranking: subject matches beat title matches beat popularity."""
    score = 0.0
    title = item.title.lower()

    if exact_subject and item.subject == exact_subject:
        score += 100
    if item.subject in related_subjects:
        score += 80

    if query in title:
        score += 60
        if title.startswith(query):
            score += 20

    title_words = title.split()
    matching = [
        qw for qw in query.split()
        if any(tw in qw or qw in tw for tw in title_words)
    ]
    score += len(matching) * 15

    score += min(item.downloads + item.views * 0.1, 20)
    score += min(item.upvotes * 2, 10)
    return score


class SearchService:
    def __init__(
        self,
        store: DocumentSearchStore,
        catalog: SubjectCatalog,
        use_procedure: bool = True,
        avatar_base_url: str = "",
    ):
        self.store = store
        self.catalog = catalog
        self.use_procedure = use_procedure
        self.avatar_base_url = avatar_base_url

    async def search(
        self,
        query: Optional[str] = None,
        subject: Optional[str] = None,
        medium: Optional[str] = None,
        document_type: Optional[str] = None,
        sort_by: Optional[SortBy] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> SearchOutcome:
        """Text search; without a query this is a plain listing (newest first by default)."""
        query = (query or "").strip()
        if not query:
            return await self.browse(
                subject, medium, document_type, sort_by or SortBy.NEWEST, limit, offset
            )
        sort_by = sort_by or SortBy.DOWNLOADS

        literature = is_literature_query(query)

        if self.use_procedure:
            try:
                rows = await self.store.call_procedure(
                    query, subject, medium, document_type, limit, offset
                )
            except Exception as e:
                logger.warning("Search procedure failed, falling back (query=%r): %s", query, e)
            else:
                return self._primary(rows, literature, sort_by)
        else:
            logger.debug("Full-text search disabled, using fallback query")

        return await self._fallback(
            query, literature, subject, medium, document_type, sort_by, limit, offset
        )

    async def browse(
        self,
        subject: Optional[str] = None,
        medium: Optional[str] = None,
        document_type: Optional[str] = None,
        sort_by: SortBy = SortBy.NEWEST,
        limit: int = 20,
        offset: int = 0,
    ) -> FallbackOutcome:
        """All approved documents for the filters. No text matching."""
        return await self._run_query(
            None, subject, medium, document_type, sort_by, limit, offset
        )

    async def rank(
        self,
        query: str,
        subject: Optional[str] = None,
        medium: Optional[str] = None,
        document_type: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> FallbackOutcome:
        """
        Relevance-ranked browse search. Pulls every candidate (title match or
        any related subject), scores in memory, then pages.
        """
        normalized = query.strip().lower()
        related = self.catalog.fuzzy_match(normalized)
        exact = self.catalog.exact_match(normalized)

        match = Document.title.icontains(query.strip())
        if related:
            match = or_(match, Document.subject.in_(related))

        outcome = await self._run_query(
            match, subject, medium, document_type, SortBy.DOWNLOADS, None, 0
        )

        # sorted() is stable and candidates arrive by downloads desc, which breaks score ties
        scored = sorted(
            outcome.items,
            key=lambda item: relevance_score(item, normalized, exact, related),
            reverse=True,
        )
        return FallbackOutcome(items=scored[offset:offset + limit], total=len(scored))

    def _primary(self, rows, literature: bool, sort_by: SortBy) -> PrimaryOutcome:
        items = [shape_procedure_row(row, self.avatar_base_url) for row in rows]
        if literature:
            allowed = set(self.catalog.literature_subject_ids())
            items = [item for item in items if item.subject in allowed]
        return PrimaryOutcome(items=sort_results(items, sort_by), rows_returned=len(rows))

    async def _fallback(
        self,
        query: str,
        literature: bool,
        subject: Optional[str],
        medium: Optional[str],
        document_type: Optional[str],
        sort_by: SortBy,
        limit: int,
        offset: int,
    ) -> FallbackOutcome:
        if literature:
            match = Document.subject.in_(self.catalog.literature_subject_ids())
        else:
            match = Document.title.icontains(query)
            exact = self.catalog.exact_match(query)
            if exact:
                match = or_(match, Document.subject == exact)

        return await self._run_query(
            match, subject, medium, document_type, sort_by, limit, offset
        )

    async def _run_query(
        self, match, subject, medium, document_type, sort_by, limit, offset
    ) -> FallbackOutcome:
        try:
            rows, total = await self.store.query_documents(
                match=match,
                subject=subject,
                medium=medium,
                document_type=document_type,
                sort_by=sort_by,
                limit=limit,
                offset=offset,
            )
        except (SQLAlchemyError, OSError, asyncio.TimeoutError) as e:
            logger.error("Document query failed: %s", e)
            raise SearchUnavailableError(store_error_message(e)) from e

        items = [shape_document(doc, uploader, self.avatar_base_url) for doc, uploader in rows]
        return FallbackOutcome(items=items, total=total)
