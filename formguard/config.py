import codecs
from functools import lru_cache
import os

from dotenv import load_dotenv

load_dotenv()

DEFAULT_CHARSET = "UTF-8"
DEFAULT_LANGUAGE = "english"
DEFAULT_MAX_ITERATIONS = 32


@lru_cache()
def get_charset() -> str:
    """Get the character set used to decode submitted bytes and percent-escapes."""
    charset = os.getenv("FORMGUARD_CHARSET", DEFAULT_CHARSET).strip()

    # Validation: ensure the codec actually exists before anything relies on it
    try:
        codecs.lookup(charset)
    except LookupError:
        raise ValueError(f"Invalid FORMGUARD_CHARSET: {charset}. Unknown codec")

    return charset


@lru_cache()
def get_default_language() -> str:
    """Get the name of the language used for day and month names."""
    return os.getenv("FORMGUARD_LANGUAGE", DEFAULT_LANGUAGE).strip().lower()


@lru_cache()
def get_max_iterations() -> int:
    """Get the cap applied to every fixed-point loop of the sanitizer."""
    raw = os.getenv("FORMGUARD_MAX_ITERATIONS", str(DEFAULT_MAX_ITERATIONS))

    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"Invalid FORMGUARD_MAX_ITERATIONS: {raw}. Must be an integer")

    if value < 1:
        raise ValueError(f"Invalid FORMGUARD_MAX_ITERATIONS: {raw}. Must be at least 1")

    return value


def is_testing() -> bool:
    """Whether the process runs under the test suite."""
    return os.getenv("TESTING", "").lower() in ("true", "1", "yes")
