"""Change listener: follows the canonical container's change feed and reports drift."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING, Any, Self

from inspection_desk.database.repositories.inspections import InspectionRepository

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable

    from azure.cosmos.aio import ContainerProxy, DatabaseProxy

    from inspection_desk.versioning.results import ChangeCheck
    from inspection_desk.versioning.service import VersioningService

logger = logging.getLogger(__name__)


class ChangeListener:
    """Re-run drift detection whenever a watched canonical inspection changes.

    A scoped handle: ``start()`` spawns the polling task and ``stop()`` cancels
    it; ``async with`` does both. Changes are handled sequentially.
    """

    def __init__(
        self,
        database: DatabaseProxy,
        versioning: VersioningService,
        on_change: Callable[[ChangeCheck], Awaitable[None]],
        *,
        inspection_ids: Iterable[str] | None = None,
        interval: float = 1.0,
    ) -> None:
        self._database = database
        self._versioning = versioning
        self._on_change = on_change
        self._watched = set(inspection_ids) if inspection_ids is not None else None
        self._interval = interval
        self._running = False
        self._task: asyncio.Task | None = None

    def watch(self, inspection_id: str) -> None:
        if self._watched is not None:
            self._watched.add(inspection_id)

    def unwatch(self, inspection_id: str) -> None:
        if self._watched is not None:
            self._watched.discard(inspection_id)

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Start polling the change feed in a background task."""
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._poll_loop())
        logger.info("Inspection change listener started")

    async def stop(self) -> None:
        """Stop the listener and wait for the polling task to finish."""
        self._running = False
        if self._task and not self._task.done():
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
        self._task = None
        logger.info("Inspection change listener stopped")

    async def __aenter__(self) -> Self:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()

    async def _poll_loop(self) -> None:
        container: ContainerProxy = self._database.get_container_client(
            InspectionRepository.container_name
        )
        token: str | None = None

        while self._running:
            try:
                token = await self._process_feed(container, token)
            except Exception:
                logger.exception("Error processing inspection change feed")

            await asyncio.sleep(self._interval)

    async def _process_feed(self, container: ContainerProxy, continuation_token: str | None) -> str | None:
        """Read one batch of canonical changes and check each watched inspection."""
        query_kwargs: dict[str, Any] = {"max_item_count": 100}
        if continuation_token:
            query_kwargs["continuation"] = continuation_token

        response = container.query_items_change_feed(**query_kwargs)
        new_token = continuation_token

        async for item in response:
            inspection_id = item.get("id")
            if not inspection_id or not self._is_watched(inspection_id):
                continue
            try:
                await self._handle_change(inspection_id)
            except Exception:
                logger.exception("Failed to check changes for inspection %s", inspection_id)

        if hasattr(response, "continuation_token"):
            token = response.continuation_token
            if isinstance(token, str):
                new_token = token

        return new_token

    def _is_watched(self, inspection_id: str) -> bool:
        return self._watched is None or inspection_id in self._watched

    async def _handle_change(self, inspection_id: str) -> None:
        check = await self._versioning.check_for_changes(inspection_id)
        if check.has_changes:
            logger.info("Drift detected for inspection %s", inspection_id)
            await self._on_change(check)
