"""
Main API router. Mounts all sub-routers.
"""

from fastapi import APIRouter

router = APIRouter()


# ── Health ───────────────────────────────────────────────────────────

@router.get("/health")
async def health():
    return {"status": "ok", "service": "studyshare"}


# ── V1 routes (public, search needs no auth) ────────────────────────

from .search import search_router
from .documents import documents_router
from .subjects import subjects_router

router.include_router(search_router, prefix="/v1")
router.include_router(documents_router, prefix="/v1")
router.include_router(subjects_router, prefix="/v1")
