"""Repository modules for each Cosmos DB container."""

from inspection_desk.database.repositories.inspections import InspectionRepository
from inspection_desk.database.repositories.pull_history import PullHistoryRepository
from inspection_desk.database.repositories.releases import ReleaseRepository
from inspection_desk.database.repositories.working_copies import WorkingCopyRepository

__all__ = [
    "InspectionRepository",
    "PullHistoryRepository",
    "ReleaseRepository",
    "WorkingCopyRepository",
]
