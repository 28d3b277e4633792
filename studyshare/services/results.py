"""
Result shaping — procedure rows and (Document, User) rows become one SearchResult,
plus the pagination block sent to the browse UI.

The two search paths compute hasMore differently:
  - procedure: a full page came back  → assume there is more
  - fallback:  exact count available  → offset + limit < total
Both are kept on purpose. Don't merge them.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ..models.document import Document
from ..models.user import User

ANONYMOUS = "Anonymous"


class SearchResult(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    title: str
    uploader_name: str = ANONYMOUS
    uploader_avatar: Optional[str] = None
    subject: Optional[str] = None
    medium: Optional[str] = None
    type: Optional[str] = None
    upvotes: int = 0
    downvotes: int = 0
    views: int = 0
    downloads: int = 0
    created_at: Optional[datetime] = None
    file_path: str = ""


class Page(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    items: list[SearchResult] = []
    total: int = 0
    page: int = 1
    limit: int = 20
    has_more: bool = False


@dataclass
class PrimaryOutcome:
    """Procedure results. Exact page, no total count."""
    items: list[SearchResult] = field(default_factory=list)
    rows_returned: int = 0


@dataclass
class FallbackOutcome:
    """Query-builder results with an exact total."""
    items: list[SearchResult] = field(default_factory=list)
    total: int = 0


SearchOutcome = Union[PrimaryOutcome, FallbackOutcome]


def avatar_url(seed: Optional[str], base_url: str) -> Optional[str]:
    if not seed:
        return None
    return f"{base_url}?seed={seed}"


def shape_procedure_row(row: Mapping[str, Any], avatar_base_url: str) -> SearchResult:
    """Map a search_documents() row. Uploader columns may be missing or NULL."""
    avatar = row.get("uploader_avatar") or avatar_url(row.get("anon_avatar_seed"), avatar_base_url)
    return SearchResult(
        id=str(row["id"]),
        title=row.get("title") or "",
        uploader_name=row.get("uploader_name") or row.get("anon_name") or ANONYMOUS,
        uploader_avatar=avatar,
        subject=row.get("subject"),
        medium=row.get("medium"),
        type=row.get("type"),
        upvotes=row.get("upvotes") or 0,
        downvotes=row.get("downvotes") or 0,
        views=row.get("views") or 0,
        downloads=row.get("downloads") or 0,
        created_at=row.get("created_at"),
        file_path=row.get("file_path") or "",
    )


def shape_document(doc: Document, uploader: Optional[User], avatar_base_url: str) -> SearchResult:
    """Map a document joined with its (possibly deleted) uploader."""
    return SearchResult(
        id=doc.id,
        title=doc.title,
        uploader_name=(uploader.anon_name if uploader else None) or ANONYMOUS,
        uploader_avatar=avatar_url(uploader.anon_avatar_seed if uploader else None, avatar_base_url),
        subject=doc.subject,
        medium=doc.medium,
        type=doc.type,
        upvotes=doc.upvotes or 0,
        downvotes=doc.downvotes or 0,
        views=doc.views or 0,
        downloads=doc.downloads or 0,
        created_at=doc.created_at,
        file_path=doc.file_path or "",
    )


def build_page(outcome: SearchOutcome, limit: int, offset: int) -> Page:
    page = offset // limit + 1

    if isinstance(outcome, PrimaryOutcome):
        return Page(
            items=outcome.items,
            total=len(outcome.items),
            page=page,
            limit=limit,
            has_more=outcome.rows_returned == limit,
        )

    return Page(
        items=outcome.items,
        total=outcome.total,
        page=page,
        limit=limit,
        has_more=offset + limit < outcome.total,
    )
