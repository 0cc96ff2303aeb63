"""Main FastAPI application entry point.

This module initializes formguard, a small JSON service that sanitizes
submitted form values and validates date picker input against the element's
format and restrictions.
"""

from contextlib import asynccontextmanager
import os

from fastapi import FastAPI
import sentry_sdk

from formguard import __version__
from formguard.config import get_charset, get_default_language, get_max_iterations, is_testing
from formguard.exception_handlers import internal_server_error_handler, not_found_handler
from formguard.logging_config import get_logger
from formguard.middleware import LoggingMiddleware, SecurityHeadersMiddleware
from formguard.routes import dates, sanitize

sentry_dsn = os.getenv("SENTRY_DSN")
if sentry_dsn and not is_testing():
    sentry_sdk.init(dsn=sentry_dsn, release=f"formguard@{__version__}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan context manager.

    Reads the configuration once on startup so a bad environment fails fast.
    """
    logger = get_logger()
    logger.info(
        f"Starting formguard (charset={get_charset()}, language={get_default_language()}, "
        f"max_iterations={get_max_iterations()})"
    )

    yield

    logger.info("Shutting down formguard")


app = FastAPI(
    title="formguard",
    description="Form input sanitization and date restriction service",
    version=__version__,
    lifespan=lifespan,
)

# Add middleware (order matters - last added runs first)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(LoggingMiddleware)

# Exception handlers
app.add_exception_handler(404, not_found_handler)
app.add_exception_handler(500, internal_server_error_handler)
app.add_exception_handler(Exception, internal_server_error_handler)


# Health check endpoint for monitoring
@app.get("/health")
def health_check():
    """Fast health check endpoint for load balancers and monitoring."""
    return {"status": "ok", "service": "formguard"}


# Include routers
app.include_router(sanitize.router)
app.include_router(dates.router)
