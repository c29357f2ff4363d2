"""Pull, drift detection, history lookup and restore for inspection working copies.

Three containers take part: the canonical ``inspections`` (read-only here),
the ``inspections_data`` working copy (one document per inspection, overwritten
on every pull or restore) and the append-only ``inspection_pull_history`` log.

Pull and restore write the working copy first and the history row second.
The containers use different partition keys, so the two writes cannot share a
transactional batch; a failure between them leaves a working copy without a
matching history row. History is advisory, the working copy is authoritative.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from inspection_desk.exceptions import AuthorizationError, InspectionDeskError, NotFoundError
from inspection_desk.models.base import as_utc
from inspection_desk.models.pull_history import PullAction, PullHistoryEntry
from inspection_desk.models.working_copy import PulledCopy
from inspection_desk.versioning.results import (
    ChangeCheck,
    ChangeSummary,
    FieldChange,
    PreviewData,
    PullResult,
    RestoreResult,
    SyncStatus,
)

if TYPE_CHECKING:
    from inspection_desk.database.repositories.inspections import InspectionRepository
    from inspection_desk.database.repositories.pull_history import PullHistoryRepository
    from inspection_desk.database.repositories.working_copies import WorkingCopyRepository
    from inspection_desk.models.inspection import Inspection, InspectionTree

logger = logging.getLogger(__name__)

_SUMMARY_FIELDS = ("title", "area", "observation")


def compare_inspection_versions(original: InspectionTree, current: InspectionTree) -> ChangeSummary:
    """Compare canonical content against the working copy for the pull preview.

    Header fields are compared one by one; topics are compared as a whole, so a
    single edited detail only flips ``structure_changed``.
    """
    summary = ChangeSummary()
    for name in _SUMMARY_FIELDS:
        updated = getattr(original, name, None)
        previous = getattr(current, name, None)
        if updated != previous:
            summary.general[name] = FieldChange(previous=previous or "", updated=updated or "")
            summary.total_changes += 1

    original_topics = [topic.model_dump(mode="json") for topic in original.topics]
    current_topics = [topic.model_dump(mode="json") for topic in current.topics]
    if original_topics != current_topics:
        summary.structure_changed = True
        summary.total_changes += 1
    return summary


class VersioningService:
    """Synchronise canonical inspections into manager working copies."""

    def __init__(
        self,
        inspections: InspectionRepository,
        working_copies: WorkingCopyRepository,
        pull_history: PullHistoryRepository,
    ) -> None:
        self._inspections = inspections
        self._working_copies = working_copies
        self._pull_history = pull_history

    async def _require_canonical(self, inspection_id: str) -> Inspection:
        canonical = await self._inspections.get_inspection(inspection_id)
        if canonical is None:
            raise NotFoundError(f"Inspection '{inspection_id}' not found in the canonical store")
        return canonical

    @staticmethod
    def _build_copy(
        canonical: Inspection,
        *,
        version: int,
        actor_id: str,
        notes: str,
        now: datetime,
        restored_from_version: int | None = None,
    ) -> PulledCopy:
        body = canonical.model_dump()
        body.update(
            version=version,
            source_inspection_id=canonical.id,
            source_last_updated=canonical.updated_at,
            pulled_at=now,
            pulled_by=actor_id,
            pull_notes=notes,
            has_changes_available=False,
            last_change_detected_at=None,
            is_manager_copy=True,
            original_created_at=canonical.created_at,
            manager_updated_at=now,
            is_restore=restored_from_version is not None,
            restored_from_version=restored_from_version,
            restore_notes=notes if restored_from_version is not None else None,
        )
        return PulledCopy.model_validate(body)

    async def pull(self, inspection_id: str, actor_id: str, notes: str = "") -> PullResult:
        """Copy the canonical inspection into the working copy as the next version."""
        canonical = await self._require_canonical(inspection_id)
        existing = await self._working_copies.get_copy(inspection_id)
        version = (existing.version if existing else 0) + 1
        now = datetime.now(UTC)

        copy = self._build_copy(canonical, version=version, actor_id=actor_id, notes=notes, now=now)
        await self._working_copies.replace_copy(copy)
        await self._pull_history.append(
            PullHistoryEntry(
                inspection_id=inspection_id,
                version=version,
                pulled_at=now,
                pulled_by=actor_id,
                pull_notes=notes,
                source_version_timestamp=canonical.updated_at,
                action=PullAction.PULL,
            )
        )
        logger.info("Pulled inspection %s as version %d (by %s)", inspection_id, version, actor_id)
        return PullResult(version=version, snapshot=copy)

    async def restore_version(
        self,
        inspection_id: str,
        target_version: int,
        actor_id: str,
        notes: str = "",
    ) -> RestoreResult:
        """Re-pull canonical content and record it as a restore of ``target_version``.

        No historical body is stored, so the restored content is always the
        current canonical record; only the labels refer to the target version.
        """
        canonical = await self._require_canonical(inspection_id)
        existing = await self._working_copies.get_copy(inspection_id)
        if existing is None:
            raise NotFoundError(
                f"Inspection '{inspection_id}' has no pulled version to restore into"
            )
        version = existing.version + 1
        now = datetime.now(UTC)

        copy = self._build_copy(
            canonical,
            version=version,
            actor_id=actor_id,
            notes=notes,
            now=now,
            restored_from_version=target_version,
        )
        await self._working_copies.replace_copy(copy)
        await self._pull_history.append(
            PullHistoryEntry(
                inspection_id=inspection_id,
                version=version,
                pulled_at=now,
                pulled_by=actor_id,
                pull_notes=notes,
                source_version_timestamp=canonical.updated_at,
                action=PullAction.RESTORE,
                restored_from_version=target_version,
                restore_notes=notes,
            )
        )
        logger.info(
            "Restored inspection %s from version %d as version %d (by %s)",
            inspection_id,
            target_version,
            version,
            actor_id,
        )
        return RestoreResult(version=version, restored_from_version=target_version, snapshot=copy)

    async def check_for_changes(self, inspection_id: str) -> ChangeCheck:
        """Report whether the canonical record moved on since the last pull."""
        canonical = await self._require_canonical(inspection_id)
        original_last_updated = as_utc(canonical.updated_at)

        try:
            copy = await self._working_copies.get_copy(inspection_id)
        except AuthorizationError:
            logger.warning(
                "No access to working copies, treating %s as a first pull", inspection_id
            )
            return ChangeCheck(
                inspection_id=inspection_id,
                has_changes=True,
                is_first_pull=True,
                original_last_updated=original_last_updated,
                needs_store_setup=True,
            )
        if copy is None:
            return ChangeCheck(
                inspection_id=inspection_id,
                has_changes=True,
                is_first_pull=True,
                original_last_updated=original_last_updated,
            )

        last_pulled = as_utc(copy.source_last_updated)
        # A canonical record with no timestamp cannot be shown to have moved on
        has_changes = original_last_updated is not None and (
            last_pulled is None or original_last_updated > last_pulled
        )

        if has_changes and not copy.has_changes_available:
            try:
                await self._working_copies.flag_changes(inspection_id, datetime.now(UTC))
            except Exception:  # noqa: BLE001
                logger.warning(
                    "Could not cache change flag for inspection %s", inspection_id, exc_info=True
                )

        return ChangeCheck(
            inspection_id=inspection_id,
            has_changes=has_changes,
            is_first_pull=False,
            original_last_updated=original_last_updated,
            last_pulled=last_pulled,
            current_version=copy.version,
        )

    async def sync_status(self, inspection_id: str) -> SyncStatus:
        """Collapse a change check into a single badge state."""
        try:
            check = await self.check_for_changes(inspection_id)
        except InspectionDeskError:
            logger.warning("Change check failed for inspection %s", inspection_id, exc_info=True)
            return SyncStatus.ERROR
        if check.is_first_pull:
            return SyncStatus.FIRST_PULL
        if check.has_changes:
            return SyncStatus.HAS_CHANGES
        return SyncStatus.UP_TO_DATE

    async def get_pull_history(self, inspection_id: str) -> list[PullHistoryEntry]:
        """List pulls and restores newest first; empty when history is not readable."""
        try:
            return await self._pull_history.list_by_inspection(inspection_id)
        except AuthorizationError:
            logger.warning("No access to pull history for inspection %s", inspection_id)
            return []

    async def get_version_snapshot(self, inspection_id: str, version: int) -> PullHistoryEntry:
        """Return the history metadata for one version (no inspection body)."""
        entry = await self._pull_history.get_by_version(inspection_id, version)
        if entry is None:
            raise NotFoundError(f"Version {version} not found in history of '{inspection_id}'")
        return entry

    async def get_current_version(self, inspection_id: str) -> PulledCopy | None:
        """Return the working copy, or None when absent or not readable."""
        try:
            return await self._working_copies.get_copy(inspection_id)
        except AuthorizationError:
            logger.warning("No access to working copy of inspection %s", inspection_id)
            return None

    async def generate_preview_data(self, inspection_id: str) -> PreviewData:
        """Show what a pull would bring in, relative to the current working copy."""
        canonical = await self._require_canonical(inspection_id)
        needs_store_setup = False
        try:
            current = await self._working_copies.get_copy(inspection_id)
        except AuthorizationError:
            logger.warning(
                "No access to working copies, previewing %s as a first pull", inspection_id
            )
            current = None
            needs_store_setup = True

        return PreviewData(
            original=canonical,
            current=current,
            is_first_pull=current is None,
            changes=compare_inspection_versions(canonical, current) if current else None,
            statistics=canonical.statistics(),
            needs_store_setup=needs_store_setup,
        )
