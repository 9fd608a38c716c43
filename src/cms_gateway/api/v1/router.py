"""API main router.

Aggregates the CMS and cache routers into a single router mounted at ``/api``.
"""

from fastapi import APIRouter

from cms_gateway.api.v1.cache import router as cache_router
from cms_gateway.api.v1.cms import router as cms_router

router = APIRouter()

router.include_router(cms_router, prefix="/cms", tags=["CMS"])
router.include_router(cache_router, prefix="/cache", tags=["Cache"])
