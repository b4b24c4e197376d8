from __future__ import annotations
from fastapi import APIRouter
from tldr_ai.routes.analyze import router as analyze_router
from tldr_ai.routes.ask import router as ask_router
from tldr_ai.routes.health import router as health_router

router = APIRouter()
router.include_router(health_router, tags=["health"])
router.include_router(analyze_router)
router.include_router(ask_router)
