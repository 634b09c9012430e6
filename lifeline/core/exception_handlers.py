"""Centralized exception handlers for the FastAPI app.

Register with register_exception_handlers(app). Maps domain and storage
exceptions to HTTP responses by error_code.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from lifeline.core.config import get_settings
from lifeline.domain.exceptions import LifelineException

logger = logging.getLogger(__name__)

# Map error_code to HTTP status; anything unlisted is a 400
ERROR_CODE_STATUS: dict[str, int] = {
    "RESOURCE_NOT_FOUND": 404,
    "VALIDATION_ERROR": 400,
    "PERMISSION_DENIED": 403,
    "CREDENTIAL_ERROR": 500,
    "STORAGE_PROVIDER_DISABLED": 409,
    "STORAGE_OBJECT_NOT_FOUND": 404,
    "STORAGE_BACKEND_ERROR": 500,
    "UNSUPPORTED_PROVIDER_TYPE": 500,
    "STORAGE_NOT_SUPPORTED": 501,
}


def _lifeline_exception_handler(
    request: Request, exc: LifelineException
) -> JSONResponse:
    """Return JSON from LifelineException.to_dict() with the mapped status code."""
    status = ERROR_CODE_STATUS.get(exc.error_code, 400)
    if status >= 500:
        # The wrapped backend cause is named here only, never returned.
        cause = exc.__cause__
        logger.error(
            "%s on %s %s: %s (cause: %s)",
            exc.error_code,
            request.method,
            request.url.path,
            exc.message,
            type(cause).__name__ if cause is not None else "none",
        )
    return JSONResponse(
        status_code=status,
        content=exc.to_dict(),
    )


def _validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return 422 with validation error details."""
    return JSONResponse(
        status_code=422,
        content={
            "error": "VALIDATION_ERROR",
            "message": "Request validation failed",
            "details": exc.errors(),
        },
    )


def _http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Return JSON for Starlette HTTP exceptions (status + detail)."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": "HTTP_ERROR", "message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


def _generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return 500; include detail only when debug is True."""
    logger.exception("Unhandled exception: %s", type(exc).__name__)
    settings = get_settings()
    detail: Any = str(exc) if settings.debug else "Internal server error"
    return JSONResponse(
        status_code=500,
        content={"error": "INTERNAL_ERROR", "message": detail},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the FastAPI app.

    Handlers: LifelineException (and subclasses), RequestValidationError,
    StarletteHTTPException, generic Exception.
    """
    app.add_exception_handler(LifelineException, _lifeline_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _generic_exception_handler)
