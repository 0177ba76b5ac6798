"""
Domain exceptions and the global FastAPI exception handlers.

Every error response shares one JSON envelope::

    {
        "error": true,
        "message": "<human-readable description>",
        "details": [{"field": "...", "message": "..."}]   # validation only
    }

Services raise the exceptions below without importing FastAPI; the
handlers registered by :func:`add_exception_handlers` translate them.
"""

import logging
from typing import Any, Dict, Iterable, List

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from investpro.core.resilience import CircuitBreakerError

logger = logging.getLogger(__name__)


# ────────────────────────────────────────────────────────────────────────────
# Domain exceptions
# ────────────────────────────────────────────────────────────────────────────


class AppException(Exception):
    """Base exception for all application-level errors."""

    def __init__(self, status_code: int, message: str, details: Any = None):
        self.status_code = status_code
        self.message = message
        self.details = details
        super().__init__(message)


class NotFoundException(AppException):
    """Resource not found (404)."""

    def __init__(self, resource: str, identifier: Any):
        super().__init__(
            status_code=404,
            message=f"{resource} with id '{identifier}' not found",
        )


class ConflictException(AppException):
    """Resource already exists / unique-constraint violation (409)."""

    def __init__(self, message: str):
        super().__init__(status_code=409, message=message)


class BusinessRuleViolation(AppException):
    """Business rule was violated (422)."""

    def __init__(self, message: str):
        super().__init__(status_code=422, message=message)


class FormValidationError(AppException):
    """
    A submitted form failed field validation (422).

    ``details`` is the list of ``{field, message}`` errors produced by
    :mod:`investpro.services.validation`.
    """

    def __init__(self, errors: Iterable[Any]):
        details: List[Dict[str, str]] = []
        for err in errors:
            if hasattr(err, "model_dump"):
                err = err.model_dump()
            details.append({"field": err["field"], "message": err["message"]})
        super().__init__(status_code=422, message="Validation failed", details=details)


# ────────────────────────────────────────────────────────────────────────────
# FastAPI exception handler registration
# ────────────────────────────────────────────────────────────────────────────


def _error_body(message: str, details: Any = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {"error": True, "message": message}
    if details is not None:
        body["details"] = details
    return body


def add_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the FastAPI application instance."""

    @app.exception_handler(AppException)
    async def app_exception_handler(
        request: Request, exc: AppException
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.message, exc.details),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(str(exc.detail)),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Flatten pydantic errors into the same ``{field, message}`` shape."""
        errors = []
        for err in exc.errors():
            loc = " -> ".join(str(part) for part in err["loc"])
            errors.append({"field": loc, "message": err["msg"]})
        return JSONResponse(
            status_code=422,
            content=_error_body("Validation failed", errors),
        )

    @app.exception_handler(CircuitBreakerError)
    async def circuit_open_handler(
        request: Request, exc: CircuitBreakerError
    ) -> JSONResponse:
        logger.warning("Rejected %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=503,
            content=_error_body("Service temporarily unavailable. Please retry shortly."),
            headers={"Retry-After": str(int(exc.retry_after) + 1)},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        logger.exception(
            "Unhandled exception on %s %s", request.method, request.url.path
        )
        return JSONResponse(
            status_code=500,
            content=_error_body("Internal Server Error. Please contact support."),
        )
