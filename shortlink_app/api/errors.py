"""
Exception handlers mapping service errors to HTTP responses.

Every error body uses the same envelope as successful responses:
{"message": ..., "status_code": ...} plus "data" for validation failures.
"""

import logging
from typing import Dict

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from shortlink_app.exceptions import LinkServiceError, StorageError
from shortlink_app.schemas.response import envelope


logger = logging.getLogger(__name__)

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred"


def _field_errors(exc: RequestValidationError) -> Dict[str, str]:
    """Collapse pydantic errors into {field: message}, first message per field"""
    errors: Dict[str, str] = {}
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        field = loc[-1] if loc else "request"
        message = error.get("msg", "Invalid value")
        # Messages raised from our own validators come prefixed by pydantic
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.setdefault(field, message)
    return errors


async def link_service_error_handler(request: Request, exc: LinkServiceError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=envelope(exc.message, exc.status_code),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=envelope("Validation failed", status.HTTP_400_BAD_REQUEST, _field_errors(exc)),
    )


async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=envelope(UNEXPECTED_ERROR_MESSAGE, status.HTTP_500_INTERNAL_SERVER_ERROR),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=envelope(UNEXPECTED_ERROR_MESSAGE, status.HTTP_500_INTERNAL_SERVER_ERROR),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(LinkServiceError, link_service_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StorageError, storage_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
