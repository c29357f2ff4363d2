"""Repository for the working-copy container (inspections_data, partitioned by /id).

Documents share their id with the canonical inspection they were pulled from.
"""

from __future__ import annotations

from datetime import datetime

from inspection_desk.database.repositories.base import BaseRepository
from inspection_desk.models.working_copy import PulledCopy


class WorkingCopyRepository(BaseRepository[PulledCopy]):
    container_name = "inspections_data"
    model_class = PulledCopy

    async def get_copy(self, inspection_id: str) -> PulledCopy | None:
        return await self.get(inspection_id, inspection_id)

    async def replace_copy(self, copy: PulledCopy) -> PulledCopy:
        """Overwrite the working copy; earlier versions survive only as history rows."""
        return await self.upsert(copy)

    async def flag_changes(self, inspection_id: str, detected_at: datetime) -> PulledCopy:
        """Cache the drift flag shown in the dashboard."""
        return await self.patch(
            inspection_id,
            inspection_id,
            {"has_changes_available": True, "last_change_detected_at": detected_at},
        )
