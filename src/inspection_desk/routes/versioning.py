"""Versioning routes: pull, drift check, history, restore, preview."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from inspection_desk.auth.middleware import actor_id, require_authenticated_user
from inspection_desk.models.pull_history import PullHistoryEntry
from inspection_desk.models.working_copy import PulledCopy
from inspection_desk.services import build_versioning_service
from inspection_desk.versioning.results import (
    ChangeCheck,
    PreviewData,
    PullResult,
    RestoreResult,
)

router = APIRouter(
    prefix="/inspections/{inspection_id}/versioning",
    tags=["versioning"],
    dependencies=[Depends(require_authenticated_user)],
)


class PullRequestBody(BaseModel):
    notes: str = ""


class RestoreRequestBody(BaseModel):
    target_version: int
    notes: str = ""


@router.get("/changes")
async def check_changes(request: Request, inspection_id: str) -> ChangeCheck:
    """Report drift between the canonical record and the working copy."""
    service = build_versioning_service(request.app.state.cosmos.database)
    return await service.check_for_changes(inspection_id)


@router.post("/pull")
async def pull(request: Request, inspection_id: str, body: PullRequestBody) -> PullResult:
    """Copy the canonical record into the working copy."""
    service = build_versioning_service(request.app.state.cosmos.database)
    return await service.pull(inspection_id, actor_id(request), body.notes)


@router.get("/history")
async def history(request: Request, inspection_id: str) -> list[PullHistoryEntry]:
    service = build_versioning_service(request.app.state.cosmos.database)
    return await service.get_pull_history(inspection_id)


@router.get("/history/{version}")
async def version_snapshot(request: Request, inspection_id: str, version: int) -> PullHistoryEntry:
    service = build_versioning_service(request.app.state.cosmos.database)
    return await service.get_version_snapshot(inspection_id, version)


@router.post("/restore")
async def restore(request: Request, inspection_id: str, body: RestoreRequestBody) -> RestoreResult:
    """Record a restore of an earlier version as a new working-copy version."""
    service = build_versioning_service(request.app.state.cosmos.database)
    return await service.restore_version(
        inspection_id, body.target_version, actor_id(request), body.notes
    )


@router.get("/preview")
async def preview(request: Request, inspection_id: str) -> PreviewData:
    service = build_versioning_service(request.app.state.cosmos.database)
    return await service.generate_preview_data(inspection_id)


@router.get("/current")
async def current(request: Request, inspection_id: str) -> PulledCopy | None:
    service = build_versioning_service(request.app.state.cosmos.database)
    return await service.get_current_version(inspection_id)
