"""Centralized error classification and rendering.

Every exception raised while handling a request ends up here. ``classify``
turns it into an ``AppError`` (status, code, operational flag) and
``render_error`` builds the response body:

    {"status": "fail" | "error", "message": "..."}

``error`` and ``stack`` keys are added only when settings allow exposing error
details (APP_ENV=dev and DEBUG=true). Non-operational errors never reach the
client with their real message otherwise.
"""

import logging
import traceback

import jwt
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from starlette.exceptions import HTTPException as StarletteHTTPException

from caveworld.core.errors import (
    AppError,
    AuthenticationError,
    CastError,
    ConflictError,
    PersistenceError,
    UnknownError,
    ValidationError,
)

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Something went very wrong!"
INVALID_TOKEN_MESSAGE = "Invalid token. Please log in again!"


def _first_field(exc: RequestValidationError) -> str | None:
    for error in exc.errors():
        names = [str(part) for part in error.get("loc", ()) if isinstance(part, str)]
        names = [n for n in names if n != "body"]
        if names:
            return ".".join(names)
    return None


def classify(exc: Exception) -> AppError:  # NOQA: PLR0911
    """Map any exception to an AppError. Unrecognized errors become UnknownError."""
    if isinstance(exc, AppError):
        return exc
    if isinstance(exc, CastError):
        return ValidationError(f"Invalid {exc.field}: {exc.value}.", field=exc.field)
    if isinstance(exc, RequestValidationError):
        field = _first_field(exc)
        if field is None:
            return ValidationError("Invalid request body.")
        return ValidationError(f"Invalid {field}.", field=field)
    if isinstance(exc, jwt.PyJWTError):
        return AuthenticationError(INVALID_TOKEN_MESSAGE)
    if isinstance(exc, StarletteHTTPException):
        return AppError(str(exc.detail), status_code=exc.status_code)
    if isinstance(exc, IntegrityError):
        return ConflictError("Resource already exists")
    if isinstance(exc, (OperationalError, PoolTimeoutError)):
        return PersistenceError(
            "Database unavailable. Please try again later.", retryable=True
        )
    if isinstance(exc, SQLAlchemyError):
        return PersistenceError("Database error")
    return UnknownError(GENERIC_ERROR_MESSAGE)


def render_error(err: AppError, original: Exception, expose_details: bool) -> JSONResponse:
    """Build the JSON error response for a classified error."""
    content: dict[str, object] = {
        "status": err.status,
        "message": err.message if err.is_operational else GENERIC_ERROR_MESSAGE,
    }
    if expose_details:
        content["message"] = err.message if err.is_operational else str(original)
        content["error"] = {
            "type": type(original).__name__,
            "code": err.code,
            "detail": str(original),
            "field": err.field,
            "is_operational": err.is_operational,
        }
        content["stack"] = "".join(traceback.format_exception(original))
    headers = {"WWW-Authenticate": "Bearer"} if err.status_code == 401 else None
    return JSONResponse(status_code=err.status_code, content=content, headers=headers)


async def handle_exception(request: Request, exc: Exception) -> JSONResponse:
    """Classify, log and render one exception raised while serving ``request``."""
    err = classify(exc)
    if err.is_operational:
        logger.warning(
            "%s on %s %s: %s (status=%s)",
            err.code,
            request.method,
            request.url.path,
            err.message,
            err.status_code,
        )
    else:
        logger.error(
            "Unhandled error on %s %s",
            request.method,
            request.url.path,
            exc_info=exc,
        )
    return render_error(err, exc, request.app.state.settings.expose_error_details)


def setup_exception_handlers(app: FastAPI) -> None:
    """Route every exception through classify/render_error.

    Starlette runs the ``Exception`` handler outside all user middleware, so
    ``create_app`` also catches unexpected errors in its own middleware; the
    registration here covers anything raised by the middleware itself.
    """
    for exc_class in (
        AppError,
        CastError,
        RequestValidationError,
        jwt.PyJWTError,
        StarletteHTTPException,
        SQLAlchemyError,
        Exception,
    ):
        app.add_exception_handler(exc_class, handle_exception)
