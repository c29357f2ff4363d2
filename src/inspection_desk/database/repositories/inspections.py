"""Repository for the canonical inspections container (partitioned by /id).

The field app owns these documents; the services here only touch the
edit-block, delivery and completion markers.
"""

from __future__ import annotations

from datetime import UTC, datetime

from inspection_desk.database.repositories.base import BaseRepository
from inspection_desk.models.inspection import Inspection, InspectionStatus


class InspectionRepository(BaseRepository[Inspection]):
    container_name = "inspections"
    model_class = Inspection

    async def get_inspection(self, inspection_id: str) -> Inspection | None:
        return await self.get(inspection_id, inspection_id)

    async def _touch(self, inspection_id: str, actor_id: str, fields: dict) -> Inspection:
        return await self.patch(
            inspection_id,
            inspection_id,
            {**fields, "last_editor": actor_id, "updated_at": datetime.now(UTC)},
        )

    async def set_edit_blocked(
        self, inspection_id: str, blocked: bool, actor_id: str
    ) -> Inspection:
        """Allow or prevent further field-side edits."""
        return await self._touch(inspection_id, actor_id, {"inspection_edit_blocked": blocked})

    async def mark_delivered(
        self, inspection_id: str, release_id: str, actor_id: str, delivered_at: datetime
    ) -> Inspection:
        return await self._touch(
            inspection_id,
            actor_id,
            {
                "delivered": True,
                "delivered_at": delivered_at,
                "delivered_release_id": release_id,
            },
        )

    async def clear_delivered(self, inspection_id: str, actor_id: str) -> Inspection:
        return await self._touch(
            inspection_id,
            actor_id,
            {"delivered": False, "delivered_at": None, "delivered_release_id": None},
        )

    async def set_status(
        self, inspection_id: str, status: InspectionStatus, actor_id: str
    ) -> Inspection:
        """Move between in-progress and completed, stamping ``completed_at``."""
        completed_at = datetime.now(UTC) if status == InspectionStatus.COMPLETED else None
        return await self._touch(
            inspection_id,
            actor_id,
            {"status": status.value, "completed_at": completed_at},
        )
