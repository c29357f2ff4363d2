"""Release routes: list, create, deliver, revert, edit block, completion."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from inspection_desk.auth.middleware import actor_id, require_authenticated_user
from inspection_desk.models.inspection import Inspection
from inspection_desk.models.release import Release
from inspection_desk.services import build_release_service

router = APIRouter(
    prefix="/inspections/{inspection_id}/releases",
    tags=["releases"],
    dependencies=[Depends(require_authenticated_user)],
)


class CreateReleaseBody(BaseModel):
    notes: str
    current_state: dict[str, Any] | None = None


class EditBlockBody(BaseModel):
    blocked: bool


class CompletionBody(BaseModel):
    completed: bool


@router.get("/")
async def list_releases(request: Request, inspection_id: str) -> list[Release]:
    service = build_release_service(request.app.state.cosmos.database)
    return await service.list_releases(inspection_id)


@router.post("/", status_code=201)
async def create_release(request: Request, inspection_id: str, body: CreateReleaseBody) -> Release:
    """Snapshot the working copy as a new release."""
    service = build_release_service(request.app.state.cosmos.database)
    return await service.create_release(
        inspection_id, body.current_state, body.notes, actor_id(request)
    )


@router.post("/{release_id}/deliver")
async def deliver_release(request: Request, inspection_id: str, release_id: str) -> Release:
    service = build_release_service(request.app.state.cosmos.database)
    return await service.deliver_release(release_id, inspection_id, actor_id(request))


@router.post("/{release_id}/revert")
async def revert_delivery(request: Request, inspection_id: str, release_id: str) -> Release:
    service = build_release_service(request.app.state.cosmos.database)
    return await service.revert_delivery(release_id, inspection_id, actor_id(request))


@router.post("/edit-block")
async def toggle_edit_block(request: Request, inspection_id: str, body: EditBlockBody) -> Inspection:
    service = build_release_service(request.app.state.cosmos.database)
    return await service.toggle_edit_block(inspection_id, body.blocked, actor_id(request))


@router.post("/completion")
async def set_completion(request: Request, inspection_id: str, body: CompletionBody) -> Inspection:
    service = build_release_service(request.app.state.cosmos.database)
    return await service.set_completion(inspection_id, body.completed, actor_id(request))
