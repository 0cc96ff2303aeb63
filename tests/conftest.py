import os
import sys

import httpx
from httpx import AsyncClient
import pytest
import pytest_asyncio

# Set testing environment variable
os.environ["TESTING"] = "1"

# Add the project root to the path so imports work
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from formguard import config
from formguard.security import sanitizer
from main import app


@pytest.fixture
def clear_config_cache():
    """Reset the cached environment settings around a test."""
    getters = (
        config.get_charset,
        config.get_default_language,
        config.get_max_iterations,
        sanitizer.get_sanitizer,
    )
    for getter in getters:
        getter.cache_clear()
    yield
    for getter in getters:
        getter.cache_clear()


@pytest_asyncio.fixture
async def client():
    """Create a test client bound to the ASGI app."""
    async with AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
