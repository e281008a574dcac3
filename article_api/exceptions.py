"""
Error taxonomy for the API and the handlers that render it.

Every error leaves the application in the same JSON envelope as a
successful response::

    {"message": "...", "errors": {"field": ["..."]}}

``errors`` is only present for validation failures.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Base class for errors that map onto a specific HTTP response."""

    status_code: int = 500
    message: str = "Server Error"

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"message": self.message}


class AuthenticationFailure(ApiError):
    status_code = 401
    message = "Unauthenticated."


class ResourceNotFound(ApiError):
    status_code = 404
    message = "Resource not found"


class ValidationFailure(ApiError):
    """Carries a field -> list-of-messages mapping."""

    status_code = 422
    message = "Validation error"

    def __init__(self, errors: dict[str, list[str]], message: str | None = None) -> None:
        super().__init__(message)
        self.errors = errors

    def to_dict(self) -> dict:
        return {"message": self.message, "errors": self.errors}


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------

async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    headers = None
    if isinstance(exc, AuthenticationFailure):
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(exc.to_dict(), status_code=exc.status_code, headers=headers)


def _error_field(loc: tuple) -> str:
    # ("body", "name") -> "name"; a whole-body error has no field part
    parts = [str(p) for p in loc if p not in ("body", "query", "path")]
    return ".".join(parts) or "body"


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Re-shape FastAPI's request parsing errors (bad JSON, wrong query types)."""
    errors: dict[str, list[str]] = {}
    for error in exc.errors():
        errors.setdefault(_error_field(tuple(error.get("loc", ()))), []).append(error["msg"])
    logger.warning("Request could not be parsed: %s %s", request.method, request.url.path)
    return JSONResponse(
        {"message": "Validation error", "errors": errors},
        status_code=422,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        {"message": exc.detail},
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        {"message": "Server Error"},
        status_code=500,
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
