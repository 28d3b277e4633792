"""
Subjects API.

GET /v1/subjects?query= — Catalog subjects related to a query (all when empty)
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ..core.dependencies import get_catalog_dep
from ..core.subjects import SubjectCatalog

subjects_router = APIRouter(prefix="/subjects", tags=["subjects"])


class SubjectOut(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    display_name: str


class SubjectListResponse(BaseModel):
    success: bool = True
    data: list[SubjectOut] = []


@subjects_router.get("", response_model=SubjectListResponse)
async def list_subjects(
    query: Optional[str] = Query(None),
    catalog: SubjectCatalog = Depends(get_catalog_dep),
):
    if query and query.strip():
        ids = catalog.fuzzy_match(query)
    else:
        ids = catalog.ids()

    return SubjectListResponse(
        data=[SubjectOut(id=i, display_name=catalog.display_name(i)) for i in ids]
    )
