"""Release and delivery state machine layered on the working copy.

A release is an immutable snapshot of the working copy. At most one release
per inspection is delivered at a time: delivering a second one while another
is active is rejected, the active one must be reverted first. The edit-block
flag and the completion status live on the canonical record and are
independent of the release lifecycle.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

from inspection_desk.exceptions import DeliveryConflictError, NotFoundError, ValidationError
from inspection_desk.models.inspection import InspectionStatus
from inspection_desk.models.release import Release

if TYPE_CHECKING:
    from inspection_desk.database.repositories.inspections import InspectionRepository
    from inspection_desk.database.repositories.releases import ReleaseRepository
    from inspection_desk.database.repositories.working_copies import WorkingCopyRepository
    from inspection_desk.models.inspection import Inspection

logger = logging.getLogger(__name__)


class ReleaseService:
    """Create, deliver and revert releases; toggle edit block and completion."""

    def __init__(
        self,
        inspections: InspectionRepository,
        working_copies: WorkingCopyRepository,
        releases: ReleaseRepository,
    ) -> None:
        self._inspections = inspections
        self._working_copies = working_copies
        self._releases = releases

    async def _require_release(self, release_id: str, inspection_id: str) -> Release:
        release = await self._releases.get_release(release_id, inspection_id)
        if release is None:
            raise NotFoundError(f"Release '{release_id}' not found for inspection '{inspection_id}'")
        return release

    async def _snapshot(
        self, inspection_id: str, current_state: BaseModel | Mapping[str, Any] | None
    ) -> dict[str, Any]:
        if isinstance(current_state, BaseModel):
            return current_state.model_dump(mode="json")
        if current_state is not None:
            return dict(current_state)
        copy = await self._working_copies.get_copy(inspection_id)
        if copy is None:
            raise NotFoundError(f"Inspection '{inspection_id}' has no working copy to release")
        return copy.model_dump(mode="json")

    async def list_releases(self, inspection_id: str) -> list[Release]:
        return await self._releases.list_by_inspection(inspection_id)

    async def create_release(
        self,
        inspection_id: str,
        current_state: BaseModel | Mapping[str, Any] | None,
        notes: str,
        actor_id: str,
    ) -> Release:
        """Snapshot the working copy as a new release and unblock field editing.

        ``current_state`` is the working copy as the manager sees it; when
        omitted the stored working copy is used.
        """
        if not notes or not notes.strip():
            raise ValidationError("Release notes are required")

        snapshot = await self._snapshot(inspection_id, current_state)
        release = Release(
            inspection_id=inspection_id,
            version=await self._releases.next_version(inspection_id),
            inspection_snapshot=snapshot,
            release_notes=notes.strip(),
            created_by=actor_id,
        )
        await self._releases.create(release)
        await self._inspections.set_edit_blocked(inspection_id, False, actor_id)
        logger.info(
            "Created release %d (%s) for inspection %s", release.version, release.id, inspection_id
        )
        return release

    async def deliver_release(self, release_id: str, inspection_id: str, actor_id: str) -> Release:
        """Mark a release as the client-facing deliverable."""
        release = await self._require_release(release_id, inspection_id)
        active = [r for r in await self._releases.list_delivered(inspection_id) if r.id != release_id]
        if active:
            raise DeliveryConflictError(
                f"Release {active[0].version} is already delivered; revert it before delivering"
                f" release {release.version}"
            )
        if release.is_delivered:
            return release

        now = datetime.now(UTC)
        release = await self._releases.set_delivery(
            release, delivered=True, actor_id=actor_id, delivered_at=now
        )
        await self._inspections.mark_delivered(inspection_id, release_id, actor_id, now)
        logger.info("Delivered release %s of inspection %s", release_id, inspection_id)
        return release

    async def revert_delivery(self, release_id: str, inspection_id: str, actor_id: str) -> Release:
        """Withdraw a delivery from the client.

        The inspection's delivery markers are only cleared when they point at
        this release.
        """
        release = await self._require_release(release_id, inspection_id)
        if not release.is_delivered:
            raise DeliveryConflictError(f"Release {release.version} is not delivered")
        release = await self._releases.set_delivery(release, delivered=False)
        inspection = await self._inspections.get_inspection(inspection_id)
        if inspection is not None and inspection.delivered_release_id in (None, release_id):
            await self._inspections.clear_delivered(inspection_id, actor_id)
        logger.info("Reverted delivery of release %s for inspection %s", release_id, inspection_id)
        return release

    async def toggle_edit_block(self, inspection_id: str, blocked: bool, actor_id: str) -> Inspection:
        inspection = await self._inspections.set_edit_blocked(inspection_id, blocked, actor_id)
        logger.info(
            "Field editing %s for inspection %s", "blocked" if blocked else "unblocked", inspection_id
        )
        return inspection

    async def set_completion(self, inspection_id: str, completed: bool, actor_id: str) -> Inspection:
        status = InspectionStatus.COMPLETED if completed else InspectionStatus.IN_PROGRESS
        inspection = await self._inspections.set_status(inspection_id, status, actor_id)
        logger.info("Inspection %s marked %s", inspection_id, status.value)
        return inspection
