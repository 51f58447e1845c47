import logging
from functools import wraps

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from config.settings import redis_settings

_log = logging.getLogger(__name__)


def _once(fn):
    """
    Remembers the first non-None result of an async factory. A None result
    is not remembered, so the next call retries; ``reset`` forgets the
    remembered value and hands it back.
    """
    result = None

    @wraps(fn)
    async def wrapper():
        nonlocal result
        if result is None:
            result = await fn()
        return result

    async def reset():
        nonlocal result
        previous, result = result, None
        return previous

    wrapper.reset = reset # type: ignore
    return wrapper


@_once
async def _create_redis_connection() -> aioredis.Redis | None:
    url = redis_settings.url
    _log.info(f"Creating Redis client for {url}")
    try:
        return aioredis.from_url(
            url,
            decode_responses=False,
            socket_connect_timeout=1,   # 1-second TCP connect cap
            socket_timeout=2,           # 2-second op cap
        )
    except (RedisError, ValueError) as exc:
        _log.error(f"Failed to create Redis client for {url}, cache disabled ({exc})")
        return None

async def get_redis() -> aioredis.Redis | None:
    """
    Returns the shared Redis client, creating it on first use.
    Returns None when no client can be built; callers then run uncached.
    """
    return await _create_redis_connection()

async def close_redis() -> None:
    """Close and discard the cached client."""
    client_to_close = await _create_redis_connection.reset() # type: ignore
    if client_to_close:
        _log.info("Closing Redis connection pool...")
        try:
            await client_to_close.aclose()
        except RedisError as e:
            _log.warning(f"Error closing Redis connection: {e}")
