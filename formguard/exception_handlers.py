"""Global exception handlers for the FastAPI application."""

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
import sentry_sdk

from formguard.logging_config import get_logger, log_error

logger = get_logger()


async def not_found_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle 404 Not Found errors with a JSON body."""
    logger.warning(f"404 error: {request.url} - {exc.detail}")

    return JSONResponse(status_code=404, content={"detail": exc.detail})


async def internal_server_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle 500 Internal Server Error, reporting the exception to Sentry."""
    log_error(exc, request, context="unhandled")
    sentry_sdk.capture_exception(exc)

    return JSONResponse(status_code=500, content={"detail": "Internal server error"})
