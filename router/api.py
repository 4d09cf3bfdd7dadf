"""API router aggregator.

This module exists only to keep the public import stable:

    `from router.api import router`

All endpoint implementations live in dedicated `router/routes_*.py` modules.
"""

from __future__ import annotations

from fastapi import APIRouter

from router.routes_checks import router as checks_router
from router.routes_documents import router as documents_router
from router.routes_health import router as health_router
from router.routes_lookup import router as lookup_router


router = APIRouter()
router.include_router(health_router, tags=["Health"])
router.include_router(documents_router, tags=["Documents"])
router.include_router(lookup_router, tags=["Lookup"])
router.include_router(checks_router, tags=["Checks"])
