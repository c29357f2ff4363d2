"""Working-copy versioning: pull, drift detection, history, restore and diffs."""

from inspection_desk.versioning.diff import Difference, DifferenceType, compare_snapshots
from inspection_desk.versioning.listener import ChangeListener
from inspection_desk.versioning.service import VersioningService, compare_inspection_versions

__all__ = [
    "ChangeListener",
    "Difference",
    "DifferenceType",
    "VersioningService",
    "compare_inspection_versions",
    "compare_snapshots",
]
