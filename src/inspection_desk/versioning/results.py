"""Value objects returned by the versioning service."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field, computed_field

from inspection_desk.models.inspection import Inspection, InspectionStatistics
from inspection_desk.models.working_copy import PulledCopy


class SyncStatus(StrEnum):
    FIRST_PULL = "first-pull"
    HAS_CHANGES = "has-changes"
    UP_TO_DATE = "up-to-date"
    ERROR = "error"


class PullResult(BaseModel):
    version: int
    snapshot: PulledCopy


class RestoreResult(BaseModel):
    version: int
    restored_from_version: int
    snapshot: PulledCopy


class ChangeCheck(BaseModel):
    """Drift between the canonical record and the working copy."""

    inspection_id: str
    has_changes: bool
    is_first_pull: bool = False
    original_last_updated: datetime | None = None
    last_pulled: datetime | None = None
    current_version: int | None = None
    needs_store_setup: bool = False


class FieldChange(BaseModel):
    previous: Any = None
    updated: Any = None
    changed: bool = True


class ChangeSummary(BaseModel):
    """Coarse comparison used by the pull preview: header fields plus one structure flag."""

    general: dict[str, FieldChange] = Field(default_factory=dict)
    structure_changed: bool = False
    total_changes: int = 0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def has_general_changes(self) -> bool:
        return bool(self.general)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def has_structure_changes(self) -> bool:
        return self.structure_changed


class PreviewData(BaseModel):
    original: Inspection
    current: PulledCopy | None = None
    is_first_pull: bool
    changes: ChangeSummary | None = None
    statistics: InspectionStatistics
    needs_store_setup: bool = False
