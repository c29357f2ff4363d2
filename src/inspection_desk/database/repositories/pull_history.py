"""Repository for the pull-history container (partitioned by /inspection_id)."""

from __future__ import annotations

from inspection_desk.database.repositories.base import BaseRepository
from inspection_desk.models.pull_history import PullHistoryEntry


class PullHistoryRepository(BaseRepository[PullHistoryEntry]):
    container_name = "inspection_pull_history"
    model_class = PullHistoryEntry

    async def append(self, entry: PullHistoryEntry) -> PullHistoryEntry:
        return await self.create(entry)

    async def list_by_inspection(self, inspection_id: str) -> list[PullHistoryEntry]:
        """Fetch every pull and restore for an inspection, newest first."""
        return await self.query(
            "SELECT * FROM c WHERE c.inspection_id = @inspection_id"
            " ORDER BY c.pulled_at DESC",
            [{"name": "@inspection_id", "value": inspection_id}],
        )

    async def get_by_version(self, inspection_id: str, version: int) -> PullHistoryEntry | None:
        """Fetch the history row recorded for a given working-copy version."""
        results = await self.query(
            "SELECT * FROM c WHERE c.inspection_id = @inspection_id"
            " AND c.version = @version",
            [
                {"name": "@inspection_id", "value": inspection_id},
                {"name": "@version", "value": version},
            ],
        )
        return results[0] if results else None
