"""
Error taxonomy and the JSON error envelope.

Services raise ``VenueBookingError`` subclasses; routers raise
``HTTPException`` for request-level checks.  Both end up as
``{"error": "<message>"}`` with the matching status code.  Anything else
is logged with its traceback and reported as a bare 500.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException

logger = logging.getLogger(__name__)


class VenueBookingError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def body(self) -> dict:
        return {"error": self.message}


class ValidationFailed(VenueBookingError):
    """Missing or malformed input. ``fields`` names the offending fields."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, fields: list[str] | None = None) -> None:
        super().__init__(message)
        self.fields = fields or []

    def body(self) -> dict:
        body = super().body()
        if self.fields:
            body["fields"] = self.fields
        return body


class NotAuthenticated(VenueBookingError):
    """No session, wrong role, or not the owner of the resource."""

    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)


class NotFound(VenueBookingError):
    status_code = status.HTTP_404_NOT_FOUND


class Conflict(VenueBookingError):
    status_code = status.HTTP_409_CONFLICT


class LinkInvalid(VenueBookingError):
    """Token mismatch or link not active."""

    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Invalid or inactive link") -> None:
        super().__init__(message)


class LinkExpired(VenueBookingError):
    """Token matches an active link whose expiry has passed."""

    status_code = status.HTTP_410_GONE

    def __init__(self, message: str = "Link has expired") -> None:
        super().__init__(message)


# ── Handlers ──────────────────────────────────────────────────────────────


async def _domain_error_handler(request: Request, exc: VenueBookingError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.body())


async def _http_error_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("Validation error for %s: %s", request.url.path, exc.errors())
    details = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            "message": err.get("msg", ""),
        }
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=jsonable_encoder({"error": "Validation failed", "details": details}),
    )


async def _rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning("Rate limit exceeded for %s on %s", request.client, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={"error": f"Rate limit exceeded: {exc.detail}"},
    )


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"},
    )


def register_error_handlers(app: FastAPI) -> None:
    """Install the JSON error envelope on ``app``."""
    app.add_exception_handler(VenueBookingError, _domain_error_handler)
    app.add_exception_handler(HTTPException, _http_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(RateLimitExceeded, _rate_limit_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
