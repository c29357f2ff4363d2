"""Resolve two version selectors to inspection bodies and diff them.

A selector is either ``"original"`` (the canonical record) or a working-copy
version number. History rows carry metadata only, so a numbered version other
than the current one resolves to the current working copy and is flagged with
``is_current_data_fallback``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field, computed_field

from inspection_desk.exceptions import ValidationError
from inspection_desk.models.pull_history import PullHistoryEntry
from inspection_desk.versioning.diff import Difference, compare_snapshots, count_by_type

if TYPE_CHECKING:
    from inspection_desk.versioning.service import VersioningService

logger = logging.getLogger(__name__)

ORIGINAL = "original"


class ResolvedSnapshot(BaseModel):
    selector: str
    label: str
    data: dict[str, Any] | None = None
    metadata: PullHistoryEntry | None = None
    is_current_data_fallback: bool = False


class ComparisonReport(BaseModel):
    base: ResolvedSnapshot
    target: ResolvedSnapshot
    differences: list[Difference] = Field(default_factory=list)
    totals: dict[str, int] = Field(default_factory=dict)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def uses_fallback(self) -> bool:
        return self.base.is_current_data_fallback or self.target.is_current_data_fallback


def _parse_version(selector: str | int) -> int:
    try:
        return int(selector)
    except (TypeError, ValueError) as exc:
        raise ValidationError(
            f"Invalid version selector '{selector}', expected '{ORIGINAL}' or a number"
        ) from exc


class ComparisonOrchestrator:
    """UI-facing entry point for version comparisons."""

    def __init__(self, versioning: VersioningService) -> None:
        self._versioning = versioning

    async def default_selectors(self, inspection_id: str) -> tuple[str, str]:
        """Pick (base, target): target is the current version; base is the
        canonical record when it drifted, otherwise the previous pull."""
        history = await self._versioning.get_pull_history(inspection_id)
        current = await self._versioning.get_current_version(inspection_id)
        if current is not None:
            target = str(current.version)
        elif history:
            target = str(history[0].version)
        else:
            target = ORIGINAL

        check = await self._versioning.check_for_changes(inspection_id)
        if check.has_changes:
            return ORIGINAL, target
        if len(history) > 1:
            return str(history[1].version), target
        return ORIGINAL, target

    async def resolve(self, inspection_id: str, selector: str | int) -> ResolvedSnapshot:
        if str(selector) == ORIGINAL:
            preview = await self._versioning.generate_preview_data(inspection_id)
            return ResolvedSnapshot(
                selector=ORIGINAL,
                label="Versão Original",
                data=preview.original.model_dump(mode="json"),
            )

        version = _parse_version(selector)
        entry = await self._versioning.get_version_snapshot(inspection_id, version)
        current = await self._versioning.get_current_version(inspection_id)
        fallback = current is None or current.version != entry.version
        if fallback:
            logger.info(
                "No stored body for version %d of inspection %s, using current data",
                version,
                inspection_id,
            )
        return ResolvedSnapshot(
            selector=str(version),
            label=f"Versão {version}",
            data=current.model_dump(mode="json") if current else None,
            metadata=entry,
            is_current_data_fallback=fallback,
        )

    async def compare(
        self, inspection_id: str, base: str | int, target: str | int
    ) -> ComparisonReport:
        """Diff ``base`` (old side) against ``target`` (new side)."""
        base_snapshot = await self.resolve(inspection_id, base)
        target_snapshot = await self.resolve(inspection_id, target)
        differences = compare_snapshots(base_snapshot.data, target_snapshot.data)
        return ComparisonReport(
            base=base_snapshot,
            target=target_snapshot,
            differences=differences,
            totals=count_by_type(differences),
        )
