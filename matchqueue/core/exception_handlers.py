"""
Exception handlers for the matchmaking API.
"""
import logging
from fastapi import Request, FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from matchqueue.core.config import settings
from matchqueue.core.exceptions import (
    MatchmakingException, InvalidQueueRequest, QueueEntryNotFound
)

logger = logging.getLogger(__name__)


def create_error_response(status_code: int, detail: str, error_code: str, request: Request) -> JSONResponse:
    """Create a standardized error response."""
    return JSONResponse(
        status_code=status_code,
        content={
            "detail": detail,
            "error_code": error_code,
            "request_id": getattr(request.state, 'request_id', None)
        }
    )


async def invalid_queue_request_handler(request: Request, exc: InvalidQueueRequest) -> JSONResponse:
    """Handle malformed join requests."""
    return create_error_response(400, str(exc), "INVALID_QUEUE_REQUEST", request)


async def queue_entry_not_found_handler(request: Request, exc: QueueEntryNotFound) -> JSONResponse:
    """Handle lookups for players that are not queued."""
    return create_error_response(404, str(exc), "NOT_IN_QUEUE", request)


async def matchmaking_exception_handler(request: Request, exc: MatchmakingException) -> JSONResponse:
    """Handle generic matchmaking exceptions."""
    return create_error_response(400, str(exc), "MATCHMAKING_ERROR", request)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle validation errors with better formatting."""
    errors = []
    for error in exc.errors():
        errors.append({
            "field": ".".join(str(x) for x in error["loc"][1:]),
            "message": error["msg"],
            "type": error["type"]
        })

    return JSONResponse(
        status_code=422,
        content={
            "detail": "Validation error",
            "errors": errors,
            "error_code": "VALIDATION_ERROR",
            "request_id": getattr(request.state, 'request_id', None)
        }
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle generic HTTP exceptions."""
    return create_error_response(exc.status_code, exc.detail, f"HTTP_{exc.status_code}", request)


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.error(f"Unexpected error: {exc}", exc_info=True)

    # Don't expose internal errors in production
    if settings.DEBUG:
        detail = str(exc)
    else:
        detail = "An unexpected error occurred"

    return create_error_response(500, detail, "INTERNAL_ERROR", request)


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app."""
    app.add_exception_handler(InvalidQueueRequest, invalid_queue_request_handler)
    app.add_exception_handler(QueueEntryNotFound, queue_entry_not_found_handler)
    app.add_exception_handler(MatchmakingException, matchmaking_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
