"""
Search API.

GET  /v1/search         — Search approved documents (procedure → fallback)
POST /v1/search/failed  — Log a search the user couldn't find anything for
"""

import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import (
    get_catalog_dep,
    get_db,
    get_recorder,
    get_search_service,
)
from ..core.flags import get_flags
from ..core.subjects import SubjectCatalog
from ..models.document import DocumentType, Medium
from ..services.failed_search import FailedSearchRecorder, upsert_failed_search
from ..services.results import Page, build_page
from ..services.search import SearchService, SearchUnavailableError
from ..services.search_store import SortBy

logger = logging.getLogger(__name__)

search_router = APIRouter(prefix="/search", tags=["search"])

INVALID_PARAMETERS = "Invalid parameters"


class SearchParams(BaseModel):
    query: Optional[str] = None
    subject: Optional[str] = None
    medium: Optional[Medium] = None
    document_type: Optional[DocumentType] = None
    sort_by: Optional[SortBy] = None
    limit: int = Field(default=20, ge=1, le=50)
    offset: int = Field(default=0, ge=0)


class SearchResponse(BaseModel):
    success: bool = True
    data: Page


class FailedSearchRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    query: str = Field(min_length=1)
    subject: Optional[str] = None
    medium: Optional[Medium] = None
    document_type: Optional[DocumentType] = Field(
        default=None, alias="documentType"
    )


def parse_search_params(
    catalog: SubjectCatalog,
    allow_jumbled: bool = False,
    **raw: Optional[str],
) -> SearchParams:
    """Validate raw query-string values. Empty strings count as missing."""
    values = {k: v for k, v in raw.items() if v not in (None, "")}
    try:
        params = SearchParams(**values)
    except ValidationError as e:
        logger.debug("Rejected search params %s: %s", values, e)
        raise HTTPException(status_code=400, detail=INVALID_PARAMETERS)

    if params.subject and not catalog.is_valid(params.subject):
        raise HTTPException(status_code=400, detail=INVALID_PARAMETERS)
    if params.document_type == DocumentType.JUMBLED and not allow_jumbled:
        raise HTTPException(status_code=400, detail=INVALID_PARAMETERS)
    return params


@search_router.get("", response_model=SearchResponse)
async def search_documents(
    background_tasks: BackgroundTasks,
    query: Optional[str] = Query(None),
    subject: Optional[str] = Query(None),
    medium: Optional[str] = Query(None),
    document_type: Optional[str] = Query(None, alias="documentType"),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    limit: Optional[str] = Query(None),
    offset: Optional[str] = Query(None),
    catalog: SubjectCatalog = Depends(get_catalog_dep),
    service: SearchService = Depends(get_search_service),
    recorder: FailedSearchRecorder = Depends(get_recorder),
):
    """Search approved documents. Zero-result queries are logged for review."""
    params = parse_search_params(
        catalog,
        query=query,
        subject=subject,
        medium=medium,
        document_type=document_type,
        sort_by=sort_by,
        limit=limit,
        offset=offset,
    )
    medium_value = params.medium.value if params.medium else None
    type_value = params.document_type.value if params.document_type else None

    try:
        outcome = await service.search(
            query=params.query,
            subject=params.subject,
            medium=medium_value,
            document_type=type_value,
            sort_by=params.sort_by,
            limit=params.limit,
            offset=params.offset,
        )
    except SearchUnavailableError as e:
        raise HTTPException(status_code=500, detail=str(e))

    page = build_page(outcome, params.limit, params.offset)

    text = (params.query or "").strip()
    if text and not page.items and get_flags().log_failed_searches:
        background_tasks.add_task(
            recorder.record, text, params.subject, medium_value, type_value
        )

    return SearchResponse(data=page)


@search_router.post("/failed")
async def log_failed_search(
    request: FailedSearchRequest,
    catalog: SubjectCatalog = Depends(get_catalog_dep),
    db: AsyncSession = Depends(get_db),
):
    """Explicitly log a search the user gave up on."""
    if request.subject and not catalog.is_valid(request.subject):
        raise HTTPException(status_code=400, detail="Invalid data")

    try:
        key = await upsert_failed_search(
            db,
            request.query,
            subject=request.subject,
            medium=request.medium.value if request.medium else None,
            document_type=request.document_type.value if request.document_type else None,
        )
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid data")

    logger.info("Failed search logged via API: %s", key)
    return {"success": True, "message": "Search logged"}
