"""
Exception handlers for the API

Every error leaves the API in the same JSON envelope: an error id that
also appears in the log line, the status, a machine-readable type and a
message fit for the upload form.
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException
from datetime import datetime
import logging
import uuid

from app.core.exceptions import CsvValidationError, MissingColumnsError

logger = logging.getLogger(__name__)


def error_response(request: Request, status_code: int, error_type: str, message,
                   error_id: str = None, headers=None, **extra) -> JSONResponse:
    """Build the JSON error envelope."""
    body = {
        "error_id": error_id or str(uuid.uuid4()),
        "timestamp": datetime.utcnow().isoformat(),
        "status": status_code,
        "type": error_type,
        "message": message,
        "path": request.url.path,
    }
    body.update(extra)
    return JSONResponse(status_code=status_code, content=body, headers=headers)


async def csv_validation_exception_handler(request: Request, exc: CsvValidationError):
    """Report a rejected upload with its error code"""
    extra = {"error_code": exc.error_code}
    if isinstance(exc, MissingColumnsError):
        extra["missing_columns"] = exc.missing
        extra["found_columns"] = exc.found

    logger.warning(f"Upload rejected on {request.url.path}: {exc.error_code} - {exc.message}")
    return error_response(request, status.HTTP_400_BAD_REQUEST, "csv_validation_error", exc.message, **extra)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Flatten request validation errors into field, message pairs"""
    errors = [
        {
            "field": ".".join(str(part) for part in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]
    logger.warning(f"Invalid request on {request.url.path}: {errors}")
    return error_response(
        request, status.HTTP_422_UNPROCESSABLE_ENTITY, "validation_error",
        "Request validation failed", errors=errors,
    )


async def http_exception_handler(request: Request, exc: HTTPException):
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.detail}")
    return error_response(
        request, exc.status_code, "http_error", exc.detail,
        headers=getattr(exc, "headers", None),
    )


async def general_exception_handler(request: Request, exc: Exception):
    """Hide unexpected failures behind an error id that points at the log"""
    error_id = str(uuid.uuid4())
    logger.exception(f"Unhandled error {error_id} on {request.method} {request.url.path}: {str(exc)}")
    return error_response(
        request, status.HTTP_500_INTERNAL_SERVER_ERROR, "server_error",
        "An unexpected error occurred", error_id=error_id,
    )


def add_exception_handlers(app: FastAPI):
    """
    Register the handlers on the application

    Args:
        app: FastAPI application
    """
    app.add_exception_handler(CsvValidationError, csv_validation_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
