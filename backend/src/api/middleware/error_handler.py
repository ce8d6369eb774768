"""
Error Handler

Maps every failure leaving a handler onto one JSON envelope:

    {"error": {"code": "INVALID_CURSOR", "message": "...", "details": {...}}}

Mapping:
========
    AnchorException          → its own status_code / error_code / details
    RequestValidationError   → 400 INVALID_QUERY, one entry per bad field
    Starlette HTTPException  → its status (unknown route, wrong method)
    anything else            → 500 INTERNAL_ERROR, logged with traceback

A feed request never returns partial results: if enrichment fails halfway
the whole response becomes an error.
"""

from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.shared.core.exceptions import AnchorException, InvalidQueryError
from src.shared.core.logging import get_logger

logger = get_logger(__name__)

HTTP_ERROR_CODES = {
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
}


def error_response(
    status_code: int,
    code: str,
    message: str,
    details: Optional[dict[str, Any]] = None,
    headers: Optional[dict[str, str]] = None,
) -> JSONResponse:
    """Build the error envelope response."""
    body: dict[str, Any] = {"code": code, "message": message}
    if details:
        body["details"] = details
    return JSONResponse(status_code=status_code, content={"error": body}, headers=headers)


async def handle_anchor_exception(request: Request, exc: AnchorException) -> JSONResponse:
    log = logger.error if exc.status_code >= 500 else logger.info
    log(
        "Request rejected",
        error_code=exc.error_code,
        status_code=exc.status_code,
        method=request.method,
        path=request.url.path,
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    # limit=abc, a malformed anchor id, a body missing "action"
    error = InvalidQueryError.from_errors(exc.errors(), message="Request validation failed")
    logger.info("Invalid request", errors=error.details.get("errors"), path=request.url.path)
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(
        exc.status_code,
        HTTP_ERROR_CODES.get(exc.status_code, "HTTP_ERROR"),
        str(exc.detail),
        headers=getattr(exc, "headers", None),
    )


async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled error",
        error_type=type(exc).__name__,
        method=request.method,
        path=request.url.path,
        exc_info=exc,
    )
    return error_response(500, "INTERNAL_ERROR", "An unexpected error occurred")


def setup_exception_handlers(app: FastAPI) -> None:
    """Register the envelope handlers on ``app``."""
    app.add_exception_handler(AnchorException, handle_anchor_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(Exception, handle_unexpected)
