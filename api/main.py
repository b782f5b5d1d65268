"""
FastAPI application entrypoint for the Press Kit Builder API.

This module sets up the FastAPI app, configures logging, registers route
handlers and maps every error onto the `{"message": ...}` response body.
"""

from __future__ import annotations

import logging
from uuid import uuid4

from dotenv import load_dotenv
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.routes import auth, press_kits
from shared.config import get_config
from shared.logging import (
    bind_request_context,
    clear_request_context,
    configure_logging,
    get_logger,
)

logger = get_logger(__name__)

# Path parameters whose parse failures get a dedicated message.
_PATH_PARAM_MESSAGES = {
    "press_kit_id": "Invalid press kit ID",
    "item_id": "Invalid item ID",
    "collection": "Unknown item collection",
}


def _field_label(name: str) -> str:
    return name[:1].upper() + name[1:]


def _path_error_message(exc: RequestValidationError) -> str | None:
    for error in exc.errors():
        loc = error.get("loc") or ()
        if len(loc) == 2 and loc[0] == "path" and loc[1] in _PATH_PARAM_MESSAGES:
            return _PATH_PARAM_MESSAGES[loc[1]]
    return None


def _validation_errors(exc: RequestValidationError) -> list[dict]:
    """Flatten pydantic errors into [{"field", "message"}] pairs."""
    errors = []
    for error in exc.errors():
        loc = error.get("loc") or ()
        field = str(loc[-1]) if loc else ""
        ctx_error = (error.get("ctx") or {}).get("error")

        if isinstance(ctx_error, ValueError):
            message = str(ctx_error)
        elif error.get("type") == "missing":
            message = f"{_field_label(field)} is required"
        else:
            message = error.get("msg", "Invalid value")
        errors.append({"field": field, "message": message})
    return errors


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        # A malformed path id is reported on its own, before any body errors.
        path_message = _path_error_message(exc)
        if path_message is not None:
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST,
                content={"message": path_message},
            )
        errors = _validation_errors(exc)
        logger.info("request_validation_failed", fields=[e["field"] for e in errors])
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"message": "Validation failed", "errors": errors},
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("unhandled_error", error_type=type(exc).__name__)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": "Internal server error"},
        )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    load_dotenv()
    config = get_config()

    # Configure structured logging
    log_level = logging.getLevelName(config.log_level.upper())
    configure_logging(level=log_level, log_file=config.log_file, log_stdout=config.log_stdout)

    app = FastAPI(
        title="Press Kit Builder API",
        description="API for musicians to build, publish and share electronic press kits",
        version="0.1.0",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.cors_allow_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        clear_request_context()
        request_id = request.headers.get("x-request-id") or str(uuid4())
        bind_request_context(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        logger.info("request_completed", status_code=response.status_code)
        return response

    _register_exception_handlers(app)

    # Register route handlers
    app.include_router(auth.router)
    app.include_router(auth.musicians_router)
    app.include_router(press_kits.router)

    @app.get("/health")
    def health_check():
        """Health check endpoint."""
        return {"status": "ok"}

    return app


# Create the app instance
app = create_app()
