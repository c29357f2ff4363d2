"""Repository for the releases container (partitioned by /inspection_id)."""

from __future__ import annotations

from datetime import datetime

from inspection_desk.database.repositories.base import BaseRepository
from inspection_desk.models.release import Release


class ReleaseRepository(BaseRepository[Release]):
    container_name = "inspection_releases"
    model_class = Release

    async def get_release(self, release_id: str, inspection_id: str) -> Release | None:
        return await self.get(release_id, inspection_id)

    async def list_by_inspection(self, inspection_id: str) -> list[Release]:
        """Fetch all releases of an inspection, newest first."""
        return await self.query(
            "SELECT * FROM c WHERE c.inspection_id = @inspection_id"
            " ORDER BY c.created_at DESC",
            [{"name": "@inspection_id", "value": inspection_id}],
        )

    async def list_delivered(self, inspection_id: str) -> list[Release]:
        return await self.query(
            "SELECT * FROM c WHERE c.inspection_id = @inspection_id"
            " AND c.is_delivered = true",
            [{"name": "@inspection_id", "value": inspection_id}],
        )

    async def next_version(self, inspection_id: str) -> int:
        """Return the display version for the next release of an inspection."""
        latest = 0
        async for value in self._container.query_items(
            query="SELECT VALUE MAX(c.version) FROM c WHERE c.inspection_id = @inspection_id",
            parameters=[{"name": "@inspection_id", "value": inspection_id}],
        ):
            if isinstance(value, int):
                latest = value
        return latest + 1

    async def set_delivery(
        self,
        release: Release,
        *,
        delivered: bool,
        actor_id: str | None = None,
        delivered_at: datetime | None = None,
    ) -> Release:
        """Flip the delivery markers; the only mutation a release ever sees."""
        return await self.patch(
            release.id,
            release.inspection_id,
            {
                "is_delivered": delivered,
                "delivered_at": delivered_at if delivered else None,
                "delivered_by": actor_id if delivered else None,
            },
        )
