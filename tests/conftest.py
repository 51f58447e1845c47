from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from services.tool_engine.engine import ToolEngine

TOOLS_DIR = Path(__file__).resolve().parents[1] / "assets" / "tools"


@pytest.fixture(autouse=True)
def redis_off():
    """
    Runs every test without Redis: the cache decorator and the rate limiter
    both fall through to the live call. Tests that need Redis patch get_redis
    themselves.
    """
    no_redis = AsyncMock(return_value=None)
    with patch("src.cache.connection.get_redis", new=no_redis), \
            patch("src.middleware.rate_limit.get_redis", new=no_redis):
        yield no_redis


@pytest.fixture(scope="session")
def tool_engine() -> ToolEngine:
    """The engine loaded from the shipped rule tables."""
    return ToolEngine(str(TOOLS_DIR))
