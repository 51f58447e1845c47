import asyncio
import functools
import hashlib
import inspect
import logging
import pickle
from typing import Any, Callable, Coroutine, TypeVar

from redis.exceptions import RedisError

from src.cache import connection

# Every key this service writes starts with the namespace
NAMESPACE = "gtm:"

REDIS_OP_TIMEOUT = 2.0

logger = logging.getLogger(__name__)

R = TypeVar('R')


def _cache_key(func: Callable, key_prefix: str, args: tuple, kwargs: dict) -> str:
    arg_key_part = pickle.dumps((args, kwargs), protocol=5)
    hashed_args = hashlib.sha1(arg_key_part).hexdigest()
    return f"{NAMESPACE}{key_prefix}{func.__module__}.{func.__qualname__}:{hashed_args}"


def redis_cache(ttl: int = 300, key_prefix: str = "", method: bool = False) -> Callable[[Callable[..., Coroutine[Any, Any, R]]], Callable[..., Coroutine[Any, Any, R]]]:
    """
    Asynchronous caching decorator using Redis.

    Args:
        ttl: Time-to-live for the cache entry in seconds. If <= 0, caching is skipped.
        key_prefix: Prefix inside the namespace, used by ``invalidate`` (e.g. "content:").
        method: Leave ``self`` out of the cache key for instance methods.
    """
    def decorator(func: Callable[..., Coroutine[Any, Any, R]]) -> Callable[..., Coroutine[Any, Any, R]]:
        if not inspect.iscoroutinefunction(func):
            raise TypeError("The decorated function must be an async function.")

        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> R:
            if ttl <= 0:
                return await func(*args, **kwargs)

            redis_conn = await connection.get_redis()
            if not redis_conn:
                logger.debug(f"Redis unavailable, executing live function {func.__qualname__}")
                return await func(*args, **kwargs)

            key_args = args[1:] if method else args
            try:
                cache_key = _cache_key(func, key_prefix, key_args, kwargs)
            except (pickle.PicklingError, TypeError, AttributeError) as e:
                logger.warning(f"Failed to pickle arguments for {func.__qualname__}: {e}. Executing live function.")
                return await func(*args, **kwargs)

            try:
                cached_result = await asyncio.wait_for(redis_conn.get(cache_key), timeout=REDIS_OP_TIMEOUT)
            except (asyncio.TimeoutError, RedisError) as e:
                logger.warning(f"Redis GET failed for {func.__qualname__}: {e}. Executing live function.")
                return await func(*args, **kwargs)

            if cached_result is not None:
                try:
                    logger.debug(f"Cache hit for {func.__qualname__} with key {cache_key}")
                    return pickle.loads(cached_result) # type: ignore
                except (pickle.UnpicklingError, TypeError, EOFError, AttributeError) as e:
                    logger.warning(f"Failed to unpickle cached data for key {cache_key}: {e}. Fetching live data.")

            logger.debug(f"Cache miss for {func.__qualname__} with key {cache_key}")
            result = await func(*args, **kwargs)

            try:
                serialized_result = pickle.dumps(result, protocol=5)
                await asyncio.wait_for(redis_conn.setex(cache_key, ttl, serialized_result), timeout=REDIS_OP_TIMEOUT)
            except (pickle.PicklingError, TypeError, AttributeError) as e:
                logger.warning(f"Failed to pickle result for {func.__qualname__}: {e}. Result not cached.")
            except (asyncio.TimeoutError, RedisError) as e:
                logger.warning(f"Redis SETEX failed for key {cache_key}: {e}. Result not cached.")

            return result

        return wrapper
    return decorator


async def _unlink_all(redis_conn, match_pattern: str) -> int:
    """Scans and unlinks keys matching a pattern. Stops at the first Redis failure."""
    deleted_count = 0
    try:
        async for key in redis_conn.scan_iter(match=match_pattern, count=100):
            try:
                deleted_count += await asyncio.wait_for(redis_conn.unlink(key), timeout=REDIS_OP_TIMEOUT)
            except (asyncio.TimeoutError, RedisError) as e:
                logger.warning(f"Redis unlink failed for key {key!r}: {e}. Stopping scan.")
                break
    except RedisError as e:
        logger.error(f"Redis error during SCAN for pattern '{match_pattern}': {e}")
    return deleted_count


async def invalidate(pattern: str) -> int:
    """
    Deletes cache keys matching ``pattern`` (namespace added automatically,
    trailing wildcard implied). Returns the number of keys removed, 0 when
    Redis is unavailable.
    """
    redis_conn = await connection.get_redis()
    if not redis_conn:
        logger.warning("Redis unavailable, cannot invalidate cache.")
        return 0

    full_pattern = f"{NAMESPACE}{pattern.removeprefix(NAMESPACE)}"
    if not full_pattern.endswith('*'):
        full_pattern += '*'

    deleted_count = await _unlink_all(redis_conn, full_pattern)
    logger.info(f"Invalidation complete for pattern '{full_pattern}'. Deleted {deleted_count} keys.")
    return deleted_count
