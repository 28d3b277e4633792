"""
Browse API.

GET /v1/documents — Approved documents with filters. With a query, results are
                    relevance-ranked (subject matches first, then title matches).
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ..core.dependencies import get_catalog_dep, get_search_service
from ..core.subjects import SubjectCatalog
from ..services.results import build_page
from ..services.search import SearchService, SearchUnavailableError
from ..services.search_store import SortBy
from .search import SearchResponse, parse_search_params

logger = logging.getLogger(__name__)

documents_router = APIRouter(tags=["documents"])


@documents_router.get("/documents", response_model=SearchResponse)
async def list_documents(
    query: Optional[str] = Query(None),
    subject: Optional[str] = Query(None),
    medium: Optional[str] = Query(None),
    document_type: Optional[str] = Query(None, alias="documentType"),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    limit: Optional[str] = Query(None),
    offset: Optional[str] = Query(None),
    catalog: SubjectCatalog = Depends(get_catalog_dep),
    service: SearchService = Depends(get_search_service),
):
    """List approved documents, newest first unless sortBy says otherwise."""
    params = parse_search_params(
        catalog,
        allow_jumbled=True,
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
    text = (params.query or "").strip()

    try:
        if text:
            outcome = await service.rank(
                text,
                subject=params.subject,
                medium=medium_value,
                document_type=type_value,
                limit=params.limit,
                offset=params.offset,
            )
        else:
            outcome = await service.browse(
                subject=params.subject,
                medium=medium_value,
                document_type=type_value,
                sort_by=params.sort_by or SortBy.NEWEST,
                limit=params.limit,
                offset=params.offset,
            )
    except SearchUnavailableError as e:
        raise HTTPException(status_code=500, detail=str(e))

    return SearchResponse(data=build_page(outcome, params.limit, params.offset))
