"""FastAPI application factory and server entry point."""

from __future__ import annotations

import logging
import secrets
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

from inspection_desk.config import load_settings
from inspection_desk.database.client import CosmosClient
from inspection_desk.exceptions import (
    AuthorizationError,
    DeliveryConflictError,
    InspectionDeskError,
    NotFoundError,
    ValidationError,
)
from inspection_desk.health import check_emulator
from inspection_desk.logging import configure_logging
from inspection_desk.routes import comparison, releases, status as status_routes, versioning
from inspection_desk.services import build_change_listener

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from inspection_desk.versioning.results import ChangeCheck

logger = logging.getLogger(__name__)

_ERROR_STATUS: dict[type[InspectionDeskError], int] = {
    NotFoundError: 404,
    AuthorizationError: 403,
    ValidationError: 422,
    DeliveryConflictError: 409,
}


async def log_drift(check: ChangeCheck) -> None:
    """Report canonical edits not yet pulled into the working copy."""
    if check.has_changes and not check.is_first_pull:
        logger.info(
            "Inspection %s changed since version %s was pulled", check.inspection_id, check.current_version
        )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = app.state.settings
    configure_logging(settings.app.log_level)
    logger.info("Starting inspection desk (%s)", settings.app.env)

    if settings.app.is_development and not await check_emulator(settings):
        raise RuntimeError("Cosmos DB is not reachable")

    cosmos = CosmosClient(settings.cosmos)
    await cosmos.initialize()
    await cosmos.ensure_containers()
    app.state.cosmos = cosmos

    listener = None
    if settings.app.change_listener_enabled:
        listener = build_change_listener(cosmos.database, settings, log_drift)
        await listener.start()
    app.state.listener = listener
    try:
        yield
    finally:
        if listener is not None:
            await listener.stop()
        await cosmos.close()
        logger.info("Inspection desk stopped")


async def handle_domain_error(request: Request, exc: InspectionDeskError) -> JSONResponse:  # noqa: ARG001
    """Return the error message verbatim with a status matching its type."""
    code = _ERROR_STATUS.get(type(exc), 400)
    return JSONResponse(status_code=code, content={"detail": str(exc)})


def create_app() -> FastAPI:
    settings = load_settings()
    app = FastAPI(title="Inspection Desk", lifespan=lifespan)
    app.state.settings = settings
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.app.secret_key or secrets.token_urlsafe(32),
    )
    app.add_exception_handler(InspectionDeskError, handle_domain_error)
    app.include_router(status_routes.router)
    app.include_router(versioning.router)
    app.include_router(releases.router)
    app.include_router(comparison.router)
    return app


def main() -> None:
    """Run the API server."""
    import uvicorn  # noqa: PLC0415

    uvicorn.run("inspection_desk.app:create_app", factory=True, host="0.0.0.0", port=8000)  # noqa: S104


if __name__ == "__main__":
    main()
