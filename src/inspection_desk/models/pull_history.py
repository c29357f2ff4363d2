"""Pull-history document: append-only log of pulls and restores."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import Field

from inspection_desk.models.base import DocumentBase, utcnow


class PullAction(StrEnum):
    PULL = "pull"
    RESTORE = "restore"


class PullHistoryEntry(DocumentBase):
    """Metadata of one pull or restore; holds no inspection body."""

    inspection_id: str
    version: int
    pulled_at: datetime = Field(default_factory=utcnow)
    pulled_by: str
    pull_notes: str = ""
    source_version_timestamp: datetime | None = None
    action: PullAction = PullAction.PULL
    restored_from_version: int | None = None
    restore_notes: str | None = None
