"""Data models for Cosmos DB document types."""

from inspection_desk.models.inspection import (
    DetailType,
    DirectDetailTopic,
    Inspection,
    InspectionStatistics,
    InspectionStatus,
    InspectionTree,
    InternalStatus,
    ItemizedTopic,
    NonConformityStatus,
    Severity,
    TopicKind,
)
from inspection_desk.models.pull_history import PullAction, PullHistoryEntry
from inspection_desk.models.release import Release
from inspection_desk.models.working_copy import PulledCopy

__all__ = [
    "DetailType",
    "DirectDetailTopic",
    "Inspection",
    "InspectionStatistics",
    "InspectionStatus",
    "InspectionTree",
    "InternalStatus",
    "ItemizedTopic",
    "NonConformityStatus",
    "PullAction",
    "PullHistoryEntry",
    "PulledCopy",
    "Release",
    "Severity",
    "TopicKind",
]
