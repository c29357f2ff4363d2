"""Release document: immutable snapshot of a working copy, deliverable to a client."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import Field

from inspection_desk.models.base import DocumentBase


class Release(DocumentBase):
    inspection_id: str
    version: int
    inspection_snapshot: dict[str, Any] = Field(default_factory=dict)
    release_notes: str
    created_by: str | None = None
    is_delivered: bool = False
    delivered_at: datetime | None = None
    delivered_by: str | None = None
