# app/entrypoints/api/routers/health.py
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Request

from ....config import settings

router = APIRouter(tags=["health"])


@router.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/debug/config")
def debug_config(request: Request) -> dict[str, Any]:
    return {
        "ENV": settings.ENV,
        "USER_API_BASE_URL": settings.USER_API_BASE_URL,
        "USER_API_TIMEOUT_S": settings.USER_API_TIMEOUT_S,
        "CALLOUTS_ENABLED": settings.CALLOUTS_ENABLED,
        "callout_hook_installed": getattr(request.app.state, "callout_hook", None) is not None,
    }
