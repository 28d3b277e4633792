"""
Document search data access.

Two ways in:
  - call_procedure(): the search_documents() SQL function (PostgreSQL only)
  - query_documents(): plain SELECT over approved documents, with an exact count
"""

import logging
import re
from enum import Enum
from typing import Any, Mapping, Optional

from sqlalchemy import ColumnElement, func, select, text
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.document import Document, DocumentStatus
from ..models.user import User

logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_.]*$")


class SortBy(str, Enum):
    NEWEST = "newest"
    DOWNLOADS = "downloads"
    UPVOTES = "upvotes"
    TITLE_ASC = "title-asc"
    TITLE_DESC = "title-desc"


class SearchProcedureUnavailable(Exception):
    """The store can't run the search procedure at all."""


def order_by_clauses(sort_by: SortBy) -> list:
    """ORDER BY for a sort key. Document id breaks ties so pages are stable."""
    if sort_by == SortBy.NEWEST:
        primary = Document.created_at.desc()
    elif sort_by == SortBy.UPVOTES:
        primary = Document.upvotes.desc()
    elif sort_by == SortBy.TITLE_ASC:
        primary = func.lower(Document.title).asc()
    elif sort_by == SortBy.TITLE_DESC:
        primary = func.lower(Document.title).desc()
    else:
        primary = Document.downloads.desc()
    return [primary, Document.id.asc()]


class DocumentSearchStore:
    def __init__(self, db: AsyncSession, procedure: str = "search_documents"):
        if not _IDENTIFIER.match(procedure):
            raise ValueError(f"Invalid search procedure name: {procedure!r}")
        self.db = db
        self.procedure = procedure

    def dialect_name(self) -> str:
        return self.db.get_bind().dialect.name

    async def call_procedure(
        self,
        query: str,
        subject: Optional[str] = None,
        medium: Optional[str] = None,
        document_type: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> list[Mapping[str, Any]]:
        """
        Run the full-text search function. Raises on any failure; callers fall back.
        Runs in a savepoint so a failed call doesn't poison the request transaction.
        """
        if self.dialect_name() != "postgresql":
            raise SearchProcedureUnavailable(
                f"{self.procedure}() needs PostgreSQL (got {self.dialect_name()})"
            )

        async with self.db.begin_nested():
            result = await self.db.execute(
                text(
                    f"SELECT * FROM {self.procedure}("
                    ":search_query, :filter_subject, :filter_medium, :filter_type, "
                    ":page_limit, :page_offset)"
                ),
                {
                    "search_query": query,
                    "filter_subject": subject,
                    "filter_medium": medium,
                    "filter_type": document_type,
                    "page_limit": limit,
                    "page_offset": offset,
                },
            )
            rows = result.mappings().all()

        logger.debug("%s(%r) returned %d rows", self.procedure, query, len(rows))
        return list(rows)

    async def query_documents(
        self,
        match: Optional[ColumnElement[bool]] = None,
        subject: Optional[str] = None,
        medium: Optional[str] = None,
        document_type: Optional[str] = None,
        sort_by: SortBy = SortBy.NEWEST,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> tuple[list[tuple[Document, Optional[User]]], int]:
        """Approved documents matching the filters, joined with uploaders. Returns (rows, total)."""
        conditions = [Document.status == DocumentStatus.APPROVED.value]
        if match is not None:
            conditions.append(match)
        if subject:
            conditions.append(Document.subject == subject)
        if medium:
            conditions.append(Document.medium == medium)
        if document_type:
            conditions.append(Document.type == document_type)

        total = await self.db.scalar(
            select(func.count()).select_from(Document).where(*conditions)
        )

        stmt = (
            select(Document, User)
            .outerjoin(User, Document.uploader_id == User.id)
            .where(*conditions)
            .order_by(*order_by_clauses(sort_by))
            .offset(offset)
        )
        if limit is not None:
            stmt = stmt.limit(limit)

        result = await self.db.execute(stmt)
        rows = [(doc, uploader) for doc, uploader in result.all()]
        return rows, total or 0
