"""formguard: sanitization and date validation for submitted form data."""

__version__ = "0.1.0"
