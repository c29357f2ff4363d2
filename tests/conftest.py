"""Shared fixtures: in-memory repositories standing in for the Cosmos containers."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from inspection_desk.exceptions import NotFoundError
from inspection_desk.models.inspection import Inspection, InspectionStatus
from inspection_desk.models.pull_history import PullHistoryEntry
from inspection_desk.models.release import Release
from inspection_desk.models.working_copy import PulledCopy
from inspection_desk.releases.service import ReleaseService
from inspection_desk.versioning.service import VersioningService

T0 = datetime(2026, 3, 2, 9, 0, tzinfo=UTC)
T1 = T0 + timedelta(hours=2)


def sample_topics() -> list[dict[str, Any]]:
    return [
        {
            "name": "Fachada",
            "observation": "Pintura desgastada",
            "media": [{"url": "https://cdn.example.com/f1.jpg", "type": "image"}],
            "items": [
                {
                    "name": "Revestimento",
                    "details": [
                        {"name": "Estado", "type": "select", "value": "Ruim", "is_damaged": True},
                        {
                            "name": "Fissuras",
                            "type": "boolean",
                            "value": True,
                            "non_conformities": [
                                {
                                    "description": "Fissura na platibanda",
                                    "severity": "Alta",
                                    "status": "pendente",
                                    "corrective_action": "Selar com mástique",
                                }
                            ],
                        },
                    ],
                },
                {"name": "Esquadrias", "details": []},
            ],
        },
        {
            "name": "Medições",
            "direct_details": True,
            "details": [
                {"name": "Altura", "type": "measure", "value": 3.2},
                {"name": "Largura", "type": "measure", "value": 12},
                {"name": "Foto", "type": "image"},
            ],
        },
    ]


def make_inspection(inspection_id: str = "insp-1", **overrides: Any) -> Inspection:
    data: dict[str, Any] = {
        "id": inspection_id,
        "title": "Vistoria Bloco A",
        "area": "Cobertura",
        "observation": "",
        "status": InspectionStatus.IN_PROGRESS,
        "topics": sample_topics(),
        "created_at": T0 - timedelta(days=1),
        "updated_at": T0,
    }
    data.update(overrides)
    return Inspection.model_validate(data)


class FakeInspectionRepository:
    def __init__(self) -> None:
        self.docs: dict[str, Inspection] = {}

    def put(self, inspection: Inspection) -> None:
        self.docs[inspection.id] = inspection

    def touch(self, inspection_id: str, updated_at: datetime, **fields: Any) -> None:
        """Simulate a field-side edit of the canonical record."""
        self.docs[inspection_id] = self.docs[inspection_id].model_copy(
            update={**fields, "updated_at": updated_at}
        )

    async def get_inspection(self, inspection_id: str) -> Inspection | None:
        return self.docs.get(inspection_id)

    async def _patch(self, inspection_id: str, actor_id: str, fields: dict[str, Any]) -> Inspection:
        if inspection_id not in self.docs:
            raise NotFoundError(f"Document '{inspection_id}' not found in 'inspections'")
        updated = self.docs[inspection_id].model_copy(
            update={**fields, "last_editor": actor_id, "updated_at": datetime.now(UTC)}
        )
        self.docs[inspection_id] = updated
        return updated

    async def set_edit_blocked(self, inspection_id: str, blocked: bool, actor_id: str) -> Inspection:
        return await self._patch(inspection_id, actor_id, {"inspection_edit_blocked": blocked})

    async def mark_delivered(
        self, inspection_id: str, release_id: str, actor_id: str, delivered_at: datetime
    ) -> Inspection:
        return await self._patch(
            inspection_id,
            actor_id,
            {"delivered": True, "delivered_at": delivered_at, "delivered_release_id": release_id},
        )

    async def clear_delivered(self, inspection_id: str, actor_id: str) -> Inspection:
        return await self._patch(
            inspection_id,
            actor_id,
            {"delivered": False, "delivered_at": None, "delivered_release_id": None},
        )

    async def set_status(
        self, inspection_id: str, status: InspectionStatus, actor_id: str
    ) -> Inspection:
        completed_at = datetime.now(UTC) if status == InspectionStatus.COMPLETED else None
        return await self._patch(
            inspection_id, actor_id, {"status": status, "completed_at": completed_at}
        )


class FakeWorkingCopyRepository:
    def __init__(self) -> None:
        self.docs: dict[str, PulledCopy] = {}
        self.writes: list[PulledCopy] = []
        self.read_error: Exception | None = None
        self.flag_error: Exception | None = None

    async def get_copy(self, inspection_id: str) -> PulledCopy | None:
        if self.read_error:
            raise self.read_error
        return self.docs.get(inspection_id)

    async def replace_copy(self, copy: PulledCopy) -> PulledCopy:
        self.docs[copy.id] = copy
        self.writes.append(copy)
        return copy

    async def flag_changes(self, inspection_id: str, detected_at: datetime) -> PulledCopy:
        if self.flag_error:
            raise self.flag_error
        updated = self.docs[inspection_id].model_copy(
            update={"has_changes_available": True, "last_change_detected_at": detected_at}
        )
        self.docs[inspection_id] = updated
        return updated


class FakePullHistoryRepository:
    def __init__(self) -> None:
        self.entries: list[PullHistoryEntry] = []
        self.read_error: Exception | None = None
        self.write_error: Exception | None = None

    async def append(self, entry: PullHistoryEntry) -> PullHistoryEntry:
        if self.write_error:
            raise self.write_error
        self.entries.append(entry)
        return entry

    async def list_by_inspection(self, inspection_id: str) -> list[PullHistoryEntry]:
        if self.read_error:
            raise self.read_error
        rows = [e for e in self.entries if e.inspection_id == inspection_id]
        return sorted(rows, key=lambda e: (e.pulled_at, e.version), reverse=True)

    async def get_by_version(self, inspection_id: str, version: int) -> PullHistoryEntry | None:
        return next(
            (e for e in self.entries if e.inspection_id == inspection_id and e.version == version),
            None,
        )


class FakeReleaseRepository:
    def __init__(self) -> None:
        self.docs: dict[str, Release] = {}

    async def get_release(self, release_id: str, inspection_id: str) -> Release | None:
        release = self.docs.get(release_id)
        return release if release and release.inspection_id == inspection_id else None

    async def create(self, release: Release) -> Release:
        self.docs[release.id] = release
        return release

    async def list_by_inspection(self, inspection_id: str) -> list[Release]:
        rows = [r for r in self.docs.values() if r.inspection_id == inspection_id]
        return sorted(rows, key=lambda r: r.version, reverse=True)

    async def list_delivered(self, inspection_id: str) -> list[Release]:
        return [r for r in await self.list_by_inspection(inspection_id) if r.is_delivered]

    async def next_version(self, inspection_id: str) -> int:
        versions = [r.version for r in self.docs.values() if r.inspection_id == inspection_id]
        return max(versions, default=0) + 1

    async def set_delivery(
        self,
        release: Release,
        *,
        delivered: bool,
        actor_id: str | None = None,
        delivered_at: datetime | None = None,
    ) -> Release:
        updated = release.model_copy(
            update={
                "is_delivered": delivered,
                "delivered_at": delivered_at if delivered else None,
                "delivered_by": actor_id if delivered else None,
            }
        )
        self.docs[release.id] = updated
        return updated

    def delivered(self, inspection_id: str) -> list[Release]:
        return [
            r for r in self.docs.values() if r.inspection_id == inspection_id and r.is_delivered
        ]


@pytest.fixture
def inspections() -> FakeInspectionRepository:
    repo = FakeInspectionRepository()
    repo.put(make_inspection())
    return repo


@pytest.fixture
def working_copies() -> FakeWorkingCopyRepository:
    return FakeWorkingCopyRepository()


@pytest.fixture
def pull_history() -> FakePullHistoryRepository:
    return FakePullHistoryRepository()


@pytest.fixture
def releases() -> FakeReleaseRepository:
    return FakeReleaseRepository()


@pytest.fixture
def versioning(
    inspections: FakeInspectionRepository,
    working_copies: FakeWorkingCopyRepository,
    pull_history: FakePullHistoryRepository,
) -> VersioningService:
    return VersioningService(inspections, working_copies, pull_history)  # type: ignore[arg-type]


@pytest.fixture
def release_service(
    inspections: FakeInspectionRepository,
    working_copies: FakeWorkingCopyRepository,
    releases: FakeReleaseRepository,
) -> ReleaseService:
    return ReleaseService(inspections, working_copies, releases)  # type: ignore[arg-type]
