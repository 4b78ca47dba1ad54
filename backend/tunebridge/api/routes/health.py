"""Health check endpoint.

Reports configuration only; upstream APIs are not probed because every
YouTube call needs a caller's token. Always returns 200.
"""

from __future__ import annotations

from fastapi import APIRouter

from tunebridge.config import settings

router = APIRouter(tags=["health"])

VERSION = "0.1.0"


@router.get("/health")
async def health_check() -> dict:
    return {
        "status": "ok",
        "version": VERSION,
        "environment": settings.environment,
        "gemini": "configured" if settings.google_ai_api_key else "not_configured",
    }
