"""FastAPI application entrypoint for the Phonebook service."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from phonebook.api.dependencies import build_person_service
from phonebook.api.middleware.logging import LoggingMiddleware
from phonebook.api.routes import health, persons
from phonebook.core.config import Settings, settings as default_settings
from phonebook.core.database import database_manager
from phonebook.core.exceptions import ApplicationError
from phonebook.core.logging_config import setup_logging
from phonebook.core.observability import setup_tracing
from phonebook.services.persons import CONTENT_MISSING

logger = logging.getLogger(__name__)


def create_app(config: Settings | None = None) -> FastAPI:
    """Assemble the application; the person service is built on startup."""

    config = config or default_settings
    setup_logging(config.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await database_manager.initialize(config)
        await database_manager.ensure_indexes()
        app.state.person_service = build_person_service(database_manager, config)
        try:
            yield
        finally:
            app.state.person_service = None
            await database_manager.close()

    app = FastAPI(
        title=config.API_TITLE,
        version=config.API_VERSION,
        debug=config.DEBUG,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(LoggingMiddleware)

    if config.TRACING_ENABLED:
        setup_tracing(app, config)

    app.include_router(persons.router, prefix="/api")
    app.include_router(health.router, prefix="/api")

    @app.exception_handler(ApplicationError)
    async def handle_application_error(_: Request, exc: ApplicationError):
        """Return standardized responses for application layer exceptions."""

        return JSONResponse(status_code=exc.status_code, content={"error": exc.message, "code": exc.code})

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(_: Request, exc: RequestValidationError):
        # A body that is not a JSON object carries no name or number.
        logger.debug("Rejected request payload: %s", exc.errors())
        return JSONResponse(status_code=400, content={"error": CONTENT_MISSING, "code": "content_missing"})

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"error": "Internal server error", "code": "internal_error"})

    return app


app = create_app()
