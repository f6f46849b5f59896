"""Typed failures raised by the booking core.

Each error carries the HTTP status it maps to and whether a caller may retry.
Only Conflict (after re-reading availability) and StorageTimeout are retryable.
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class BookingError(Exception):
    """Base class for all booking core failures"""

    code = "BOOKING_ERROR"
    status_code = 400
    retryable = False
    default_detail = "Booking request failed"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class InvalidRange(BookingError):
    code = "INVALID_RANGE"
    status_code = 400
    default_detail = "End time must be after start time"


class ValidationFailed(BookingError):
    code = "VALIDATION_ERROR"
    status_code = 400
    default_detail = "Invalid input"


class NotFound(BookingError):
    code = "NOT_FOUND"
    status_code = 404
    default_detail = "Resource not found"


class Forbidden(BookingError):
    code = "FORBIDDEN"
    status_code = 403
    default_detail = "Forbidden"


class Locked(BookingError):
    code = "LOCKED"
    status_code = 409
    default_detail = "Time slot is held by a live appointment; resolve the appointment first"


class Conflict(BookingError):
    code = "CONFLICT"
    status_code = 409
    retryable = True
    default_detail = "Requested time is no longer available"


class Overlap(Conflict):
    code = "OVERLAP"
    default_detail = "Time slot overlaps with a blocked slot"


class InvalidTransition(BookingError):
    code = "INVALID_TRANSITION"
    status_code = 409
    default_detail = "Appointment status transition is not allowed"


class StorageTimeout(BookingError):
    code = "TIMEOUT"
    status_code = 503
    retryable = True
    default_detail = "Storage did not respond in time, please retry"


async def booking_error_handler(request: Request, exc: BookingError) -> JSONResponse:
    """Render a BookingError as {code, detail, retryable} with its HTTP status"""
    if exc.status_code >= 500:
        logger.error(f"❌ {request.method} {request.url.path} - {exc.code}: {exc.detail}")
    else:
        logger.info(f"{request.method} {request.url.path} - {exc.code}: {exc.detail}")

    headers = {"Retry-After": "1"} if isinstance(exc, StorageTimeout) else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"code": exc.code, "detail": exc.detail, "retryable": exc.retryable},
        headers=headers,
    )
