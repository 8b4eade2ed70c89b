"""FastAPI application factory."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from vesper import __version__
from vesper.api.routes import router
from vesper.api.schemas import ErrorResponse
from vesper.config import VesperSettings, get_logger, get_settings
from vesper.exceptions import ScriptNotFoundError, ValidationError, VesperError
from vesper.storage import SQLiteScriptStore
from vesper.storage.base import ScriptStore

logger = get_logger(__name__)

# Documented on every /api route; bodies come from the exception handlers
ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse, "description": "Invalid request"},
    404: {"model": ErrorResponse, "description": "Script not found"},
    500: {"model": ErrorResponse, "description": "Storage or processing failure"},
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    logger.info("Starting Vesper API")
    settings: VesperSettings = app.state.settings

    owns_store = app.state.store is None
    if owns_store:
        app.state.store = SQLiteScriptStore(
            settings.database_path, timeout=settings.database_timeout
        ).initialize()

    yield

    logger.info("Shutting down Vesper API")
    if owns_store:
        app.state.store.close()
        app.state.store = None


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content=ErrorResponse(error=message).model_dump()
    )


def create_app(
    store: ScriptStore | None = None, settings: VesperSettings | None = None
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        store: Store to serve from; a SQLite store at the configured path is
            opened on startup when omitted.
        settings: Settings to use instead of the global ones.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Vesper API",
        description="Screenplay analysis and outline generation",
        version=__version__,
        lifespan=lifespan,
        docs_url="/api/docs",
        openapi_url="/api/openapi.json",
    )
    app.state.settings = settings
    app.state.analysis_config = settings.analysis_config()
    app.state.store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ValidationError)
    async def validation_error_handler(
        _request: Request, exc: ValidationError
    ) -> JSONResponse:
        return _error(400, exc.message)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        _request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        first = exc.errors()[0] if exc.errors() else {}
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = first.get("msg", "Invalid request")
        return _error(400, f"{field}: {message}" if field else message)

    @app.exception_handler(ScriptNotFoundError)
    async def not_found_handler(
        _request: Request, exc: ScriptNotFoundError
    ) -> JSONResponse:
        return _error(404, exc.message)

    @app.exception_handler(VesperError)
    async def vesper_error_handler(_request: Request, exc: VesperError) -> JSONResponse:
        logger.error("Request failed", error=exc.message, details=exc.details)
        return _error(500, exc.message)

    app.include_router(router, prefix="/api", responses=ERROR_RESPONSES)

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint."""
        return {"message": "Vesper API", "version": __version__, "docs": "/api/docs"}

    return app
