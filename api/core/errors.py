"""
Error taxonomy and its HTTP mapping.

- ValidationError: out-of-range or blank input (400)
- NotFoundError: identifier absent from the store or the mirror (404)
- ConsistencyError: mirror diverges from what a write just produced (500)
- StorageError: counter/mirror I/O failure or unreachable store (500)

Services raise these; `register_exception_handlers` turns them into a
`{timestamp, status, error, message, path}` JSON body.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator

import asyncpg
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AwardsError(RuntimeError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error = "Internal Server Error"


class ValidationError(AwardsError):
    status_code = status.HTTP_400_BAD_REQUEST
    error = "Bad Request"


class NotFoundError(AwardsError):
    status_code = status.HTTP_404_NOT_FOUND
    error = "Not Found"


class ConsistencyError(AwardsError):
    pass


class StorageError(AwardsError):
    pass


@contextmanager
def storage_errors(message: str) -> Iterator[None]:
    """
    Re-raise store driver failures as StorageError.
    """
    try:
        yield
    except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as exc:
        raise StorageError(message) from exc


def error_body(*, status_code: int, error: str, message: str, path: str) -> dict:
    return {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "status": status_code,
        "error": error,
        "message": message,
        "path": path,
    }


def _format_validation_errors(exc: RequestValidationError) -> str:
    parts: list[str] = []
    for item in exc.errors():
        location = ".".join(str(p) for p in item.get("loc", ()) if p != "body")
        msg = str(item.get("msg") or "invalid value")
        parts.append(f"{location}: {msg}" if location else msg)
    return "; ".join(parts) or "Invalid request."


async def _handle_awards_error(request: Request, exc: AwardsError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("request_failed path=%s error=%s message=%s", request.url.path, type(exc).__name__, exc)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(
            status_code=exc.status_code,
            error=exc.error,
            message=str(exc) or exc.error,
            path=request.url.path,
        ),
    )


async def _handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(
            status_code=status.HTTP_400_BAD_REQUEST,
            error="Bad Request",
            message=_format_validation_errors(exc),
            path=request.url.path,
        ),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AwardsError, _handle_awards_error)
    app.add_exception_handler(RequestValidationError, _handle_request_validation)
