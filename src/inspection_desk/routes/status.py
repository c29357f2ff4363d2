"""Status route: liveness and environment."""

from __future__ import annotations

from fastapi import APIRouter, Request

from inspection_desk import __version__

router = APIRouter(tags=["status"])


@router.get("/health")
async def health(request: Request) -> dict[str, str]:
    settings = request.app.state.settings
    return {"status": "ok", "environment": settings.app.env, "version": __version__}
