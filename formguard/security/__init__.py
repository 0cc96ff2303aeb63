"""Security module for XSS prevention on submitted form data."""

from .rules import DEFAULT_CONFIG, SanitizerConfig
from .sanitizer import XSSSanitizer, get_sanitizer, sanitize

__all__ = ["DEFAULT_CONFIG", "SanitizerConfig", "XSSSanitizer", "get_sanitizer", "sanitize"]
