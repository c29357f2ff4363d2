"""Comparison route: diff two versions of an inspection."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from inspection_desk.auth.middleware import require_authenticated_user
from inspection_desk.comparison.orchestrator import ComparisonReport
from inspection_desk.services import build_comparison_orchestrator

router = APIRouter(tags=["comparison"], dependencies=[Depends(require_authenticated_user)])


@router.get("/inspections/{inspection_id}/compare")
async def compare(
    request: Request,
    inspection_id: str,
    base: str | None = None,
    target: str | None = None,
) -> ComparisonReport:
    """Compare ``base`` to ``target``; either defaults to the dashboard's usual pair."""
    orchestrator = build_comparison_orchestrator(request.app.state.cosmos.database)
    if base is None or target is None:
        default_base, default_target = await orchestrator.default_selectors(inspection_id)
        base = base or default_base
        target = target or default_target
    return await orchestrator.compare(inspection_id, base, target)
