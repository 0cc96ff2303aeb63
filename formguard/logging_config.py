"""Centralized logging configuration for formguard."""

import logging
import os
import sys
from typing import Optional

from fastapi import Request

LOGGER_NAME = "formguard"


def setup_logging(log_level: str = "INFO") -> logging.Logger:
    """Configure and return the application logger.

    Module loggers (``logging.getLogger(__name__)`` inside the ``formguard``
    package) are children of this logger and share its handler.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(LOGGER_NAME)

    if logger.handlers:
        return logger

    # Set log level
    level = getattr(logging, log_level.upper(), logging.INFO)
    logger.setLevel(level)

    # Create formatter
    formatter = logging.Formatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
    )

    # Console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # Prevent duplicate logs
    logger.propagate = False

    return logger


def get_logger() -> logging.Logger:
    """Get the application logger instance."""
    return logging.getLogger(LOGGER_NAME)


def _client_ip(request: Request) -> str:
    return getattr(request.client, "host", "unknown") if request.client else "unknown"


def log_request(request: Request, extra_data: Optional[dict] = None) -> None:
    """Log incoming HTTP request details.

    Args:
        request: FastAPI request object
        extra_data: Optional additional data to log
    """
    logger = get_logger()

    log_data = {
        "method": request.method,
        "path": request.url.path,
        "client_ip": _client_ip(request),
        "user_agent": request.headers.get("user-agent", "unknown"),
    }

    if extra_data:
        log_data.update(extra_data)

    logger.info(f"Request: {log_data}")


def log_sanitize_event(request: Request, field_count: int, changed: bool) -> None:
    """Log the outcome of a sanitization request.

    Submitted values are never logged, only their count and whether the
    sanitizer had to rewrite any of them.

    Args:
        request: FastAPI request object
        field_count: Number of scalar values sanitized
        changed: Whether the output differs from the input
    """
    logger = get_logger()

    log_data = {
        "event_type": "sanitize",
        "field_count": field_count,
        "changed": changed,
        "client_ip": _client_ip(request),
    }

    level = logging.WARNING if changed else logging.INFO
    logger.log(level, f"Sanitize event: {log_data}")


def log_date_event(
    event_type: str,
    request: Request,
    date_format: str,
    success: bool,
    reason: Optional[str] = None,
) -> None:
    """Log date range and date validation events.

    Args:
        event_type: Type of date event (range, disabled, validate)
        request: FastAPI request object
        date_format: The date format the element uses
        success: Whether the submitted value was accepted
        reason: Optional rejection reason
    """
    logger = get_logger()

    log_data = {
        "event_type": event_type,
        "format": date_format,
        "success": success,
        "client_ip": _client_ip(request),
    }

    if reason:
        log_data["reason"] = reason

    logger.info(f"Date event: {log_data}")


def log_error(error: Exception, request: Request, context: Optional[str] = None) -> None:
    """Log application errors.

    Args:
        error: Exception that occurred
        request: FastAPI request object
        context: Optional context description
    """
    logger = get_logger()

    log_data = {
        "error_type": type(error).__name__,
        "error_message": str(error),
        "path": request.url.path,
        "method": request.method,
        "client_ip": _client_ip(request),
    }

    if context:
        log_data["context"] = context

    logger.error(f"Application error: {log_data}", exc_info=True)


# Initialize logging on import
_log_level = os.getenv("LOG_LEVEL", "INFO")
setup_logging(_log_level)
