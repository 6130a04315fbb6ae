"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from diet_journal.api.recommendation import (
    INVALID_BODY_MESSAGE,
    validation_error_response,
)
from diet_journal.api.recommendation import router as recommendation_router
from diet_journal.app_logging import configure_logging
from diet_journal.containers import AppContainer

logger = logging.getLogger(__name__)


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(recommendation_router)

    @app.exception_handler(RequestValidationError)
    async def invalid_request(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        if not request.url.path.startswith(recommendation_router.prefix):
            return await request_validation_exception_handler(request, exc)
        logger.info(
            "Rejected malformed request to %s: %s error(s)",
            request.url.path,
            len(exc.errors()),
        )
        return validation_error_response(INVALID_BODY_MESSAGE)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app
