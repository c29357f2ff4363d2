"""Working-copy document: the manager's pulled snapshot of an inspection."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from inspection_desk.models.base import utcnow
from inspection_desk.models.inspection import Inspection


class PulledCopy(Inspection):
    """Canonical content plus versioning metadata, keyed by the inspection id.

    Exactly one exists per inspection; each pull or restore overwrites it with
    ``version`` incremented by one.
    """

    version: int
    source_inspection_id: str
    source_last_updated: datetime | None = None
    pulled_at: datetime = Field(default_factory=utcnow)
    pulled_by: str
    pull_notes: str = ""
    has_changes_available: bool = False
    last_change_detected_at: datetime | None = None
    is_manager_copy: bool = True
    original_created_at: datetime | None = None
    manager_updated_at: datetime = Field(default_factory=utcnow)
    is_restore: bool = False
    restored_from_version: int | None = None
    restore_notes: str | None = None
