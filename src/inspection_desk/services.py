"""Wire services to repositories bound to a Cosmos database."""

from __future__ import annotations

from typing import TYPE_CHECKING

from inspection_desk.comparison.orchestrator import ComparisonOrchestrator
from inspection_desk.database.repositories import (
    InspectionRepository,
    PullHistoryRepository,
    ReleaseRepository,
    WorkingCopyRepository,
)
from inspection_desk.releases.service import ReleaseService
from inspection_desk.versioning.listener import ChangeListener
from inspection_desk.versioning.service import VersioningService

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable

    from azure.cosmos.aio import DatabaseProxy

    from inspection_desk.config import Settings
    from inspection_desk.versioning.results import ChangeCheck


def build_versioning_service(database: DatabaseProxy) -> VersioningService:
    return VersioningService(
        InspectionRepository(database),
        WorkingCopyRepository(database),
        PullHistoryRepository(database),
    )


def build_release_service(database: DatabaseProxy) -> ReleaseService:
    return ReleaseService(
        InspectionRepository(database),
        WorkingCopyRepository(database),
        ReleaseRepository(database),
    )


def build_comparison_orchestrator(database: DatabaseProxy) -> ComparisonOrchestrator:
    return ComparisonOrchestrator(build_versioning_service(database))


def build_change_listener(
    database: DatabaseProxy,
    settings: Settings,
    on_change: Callable[[ChangeCheck], Awaitable[None]],
    *,
    inspection_ids: Iterable[str] | None = None,
) -> ChangeListener:
    """Create an unstarted listener polling at the configured interval.

    The app lifespan starts one over every inspection when
    ``CHANGE_LISTENER_ENABLED`` is set; embedders may build scoped ones.
    """
    return ChangeListener(
        database,
        build_versioning_service(database),
        on_change,
        inspection_ids=inspection_ids,
        interval=settings.app.change_feed_interval,
    )
