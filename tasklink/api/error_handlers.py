"""Error Handlers: global exception handlers rendering the {message, data: null} envelope.

Invariants:
    - TaskLinkError -> its own http_status and message
    - RequestValidationError -> 400 naming the first offending field
    - HTTPException (unknown route, wrong method) -> same status, envelope body
    - Exception (catch-all) -> 500, never leaks internal details

Design Decisions:
    - Four-layer handler: domain, validation, HTTP, catch-all
    - Extracted from main.py (ADR: ExMA import fan-out < 10)
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from tasklink.core.errors import ErrorSeverity, TaskLinkError
from tasklink.schemas.envelope import envelope

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_tasklink_error_handler(app)
    _register_validation_error_handler(app)
    _register_http_error_handler(app)
    _register_generic_error_handler(app)


def _register_tasklink_error_handler(app: FastAPI) -> None:

    @app.exception_handler(TaskLinkError)
    async def tasklink_error_handler(request: Request, exc: TaskLinkError):
        log = logger.error if exc.severity in (
            ErrorSeverity.ERROR, ErrorSeverity.CRITICAL,
        ) else logger.info
        log(
            f"TaskLinkError: {exc.message}",
            extra={**exc.log_extra(), "path": request.url.path},
        )
        return JSONResponse(
            status_code=exc.http_status, content=exc.to_response(),
        )


def _register_validation_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        logger.warning(
            f"Validation error on {request.url.path}: {exc.errors()}",
            extra={"error_code": "VALIDATION_ERROR", "path": request.url.path},
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=envelope(_validation_message(exc)),
        )


def _register_http_error_handler(app: FastAPI) -> None:

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        message = exc.detail if isinstance(exc.detail, str) else "Request failed"
        return JSONResponse(
            status_code=exc.status_code,
            content=envelope(message),
            headers=getattr(exc, "headers", None),
        )


def _register_generic_error_handler(app: FastAPI) -> None:

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all: never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
            extra={"error_code": "INTERNAL_ERROR", "path": request.url.path},
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=envelope("Server Error"),
        )


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Bad Request: invalid request data"
    first = errors[0]
    # drop the "body"/"query" prefix: clients know fields, not FastAPI locations
    field = ".".join(str(loc) for loc in first["loc"][1:]) or str(first["loc"][0])
    return f"Bad Request: invalid value for '{field}': {first['msg']}"
