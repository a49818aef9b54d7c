"""Domain exceptions and the handlers that turn them into JSON responses.

Every error body carries ``detail`` and the correlation ``request_id``.
Field-level validation failures additionally carry ``errors``, a mapping of
field name to the list of messages for that field.
"""

from typing import Any

from asgi_correlation_id import correlation_id
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.codestack.core.logging import get_logger
from src.codestack.core.rate_limit import rate_limit_exceeded_handler

logger = get_logger(__name__)


class SnippetError(Exception):
    """Base class for errors raised by the snippet service."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidArgumentError(SnippetError):
    """Malformed identifier, malformed request, or an update with nothing to change."""

    status_code = status.HTTP_400_BAD_REQUEST


class ValidationFailedError(SnippetError):
    """One or more fields violate their constraints."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, errors: dict[str, list[str]], message: str = "Validation failed"):
        super().__init__(message)
        self.errors = errors


class ForbiddenError(SnippetError):
    """The supplied modification code does not match."""

    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(SnippetError):
    """No snippet with the requested id (or it vanished during a write)."""

    status_code = status.HTTP_404_NOT_FOUND


class ResourceExhaustedError(SnippetError):
    """The snippet cap has been reached."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class InternalError(SnippetError):
    """Storage failure or an inconsistency that should not normally occur."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


def validation_errors_to_fields(errors: list[Any]) -> dict[str, list[str]]:
    """Group pydantic error entries by top-level field name.

    ``("tags", 2)`` and ``("tags",)`` both land under ``"tags"``; errors on the
    body as a whole land under ``"body"``.
    """
    fields: dict[str, list[str]] = {}
    for error in errors:
        loc = [part for part in error.get("loc", ()) if part != "body"]
        field = str(loc[0]) if loc else "body"
        message = error.get("msg", "Invalid value")
        if len(loc) > 1 and isinstance(loc[1], int):
            message = f"Item {loc[1]}: {message}"
        fields.setdefault(field, []).append(message)
    return fields


def _error_body(detail: Any, **extra: Any) -> dict[str, Any]:
    return {"detail": detail, **extra, "request_id": correlation_id.get()}


def setup_exception_handlers(app: FastAPI) -> None:
    """Configure exception handlers that include request_id in responses."""

    @app.exception_handler(SnippetError)
    async def snippet_error_handler(request: Request, exc: SnippetError) -> JSONResponse:
        if isinstance(exc, ValidationFailedError):
            content = _error_body(exc.message, errors=exc.errors)
        else:
            content = _error_body(exc.message)
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_error_body(
                "Malformed request",
                errors=validation_errors_to_fields(list(exc.errors())),
            ),
        )

    @app.exception_handler(StarletteHTTPException)
    async def starlette_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc.detail))

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc.detail))

    app.add_exception_handler(
        RateLimitExceeded, rate_limit_exceeded_handler  # type: ignore[arg-type]
    )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "Unhandled exception",
            exc_info=exc,
            request_id=correlation_id.get(),
            path=request.url.path,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body("Internal server error"),
        )
