"""Domain errors and the JSON error envelope."""

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class BookshelfError(Exception):
    """Base class for domain errors raised by the data layer."""


class BookNotFoundError(BookshelfError):
    """No book is stored under the given ISBN."""

    def __init__(self, isbn: str) -> None:
        super().__init__(f"Book with isbn '{isbn}' not found")
        self.isbn = isbn


class DuplicateIsbnError(BookshelfError):
    """A book with the given ISBN already exists."""

    def __init__(self, isbn: str) -> None:
        super().__init__(f"Book with isbn '{isbn}' already exists")
        self.isbn = isbn


def error_response(
    status_code: int,
    message: Any,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Render the error envelope shared by every failing response."""
    return JSONResponse(
        status_code=status_code,
        content={"error": {"message": message, "status": status_code}},
        headers=headers,
    )


def _format_request_error(error: dict[str, Any]) -> str:
    location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
    if location:
        return f"{location}: {error['msg']}"
    return error["msg"]


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle HTTP exceptions raised by routes and by routing itself."""
    return error_response(exc.status_code, exc.detail, headers=getattr(exc, "headers", None))


async def request_validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed requests (e.g. unparseable JSON) as 400."""
    messages = [_format_request_error(error) for error in exc.errors()]
    return error_response(status.HTTP_400_BAD_REQUEST, messages)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Hide internals of unexpected failures behind an opaque 500."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error")


def register_exception_handlers(app: FastAPI) -> None:
    """Install the error envelope handlers on the application."""
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
