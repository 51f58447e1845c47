import asyncio
import logging
import time
from typing import Iterable, Optional, Tuple

import redis.asyncio as redis
from fastapi import Request, Response
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from src.cache.connection import get_redis
from src.cache.decorators import NAMESPACE

logger = logging.getLogger(__name__)

WINDOW_SIZE_SECONDS = 60 # Per minute window
DEFAULT_LIMIT = 20
# Only public write endpoints are limited: signups and tool submissions
LIMITED_PATH_PREFIXES: Tuple[str, ...] = ("/api/v1/newsletter", "/api/v1/tools")
LIMITED_METHODS = frozenset({"POST", "PUT"})

# Lua script for an atomic fixed window increment
LUA_SCRIPT = """
local key = KEYS[1]
local expiry = tonumber(ARGV[1])
local count = redis.call("INCR", key)
if count == 1 then
    redis.call("EXPIRE", key, expiry)
end
return count
"""
_lua_sha: Optional[str] = None
_lua_sha_lock = asyncio.Lock()

async def get_lua_sha(redis_conn: redis.Redis) -> Optional[str]:
    """Loads the Lua script into Redis and returns its SHA."""
    global _lua_sha
    async with _lua_sha_lock:
        if _lua_sha is None:
            try:
                _lua_sha = await redis_conn.script_load(LUA_SCRIPT)
                logger.info(f"Loaded rate limiting Lua script with SHA: {_lua_sha}")
            except RedisError as e:
                logger.error(f"Failed to load Lua script into Redis: {e}")
                _lua_sha = None
        return _lua_sha


def client_identifier(request: Request) -> str:
    """First X-Forwarded-For hop when behind a proxy, else the socket peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host
    return "unknown"


class RateLimitingMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, limit: int = DEFAULT_LIMIT, path_prefixes: Iterable[str] = LIMITED_PATH_PREFIXES):
        super().__init__(app)
        self.limit = limit
        self.path_prefixes = tuple(path_prefixes)

    def _applies(self, request: Request) -> bool:
        return request.method in LIMITED_METHODS and request.url.path.startswith(self.path_prefixes)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if not self._applies(request):
            return await call_next(request)

        redis_conn = await get_redis()
        if not redis_conn:
            logger.warning("Redis unavailable, skipping rate limiting.")
            return await call_next(request)

        client_id = client_identifier(request)
        current_window = int(time.time() // WINDOW_SIZE_SECONDS)
        key = f"{NAMESPACE}rl:{client_id}:{current_window}"
        expiry_seconds = WINDOW_SIZE_SECONDS * 2

        try:
            sha = await get_lua_sha(redis_conn)
            if sha:
                current_count = await redis_conn.evalsha(sha, 1, key, str(expiry_seconds))
            else:
                logger.warning("Lua script SHA not available, using EVAL.")
                current_count = await redis_conn.eval(LUA_SCRIPT, 1, key, str(expiry_seconds))
            current_count = int(current_count)
        except RedisError as e:
            logger.error(f"Redis error during rate limiting for client {client_id}: {e}. Allowing request.")
            return await call_next(request)

        if current_count > self.limit:
            retry_after = WINDOW_SIZE_SECONDS - int(time.time() % WINDOW_SIZE_SECONDS)
            logger.warning(f"Rate limit exceeded for client {client_id}. Count: {current_count}, Limit: {self.limit}")
            return JSONResponse(
                status_code=429,
                content={"detail": f"Rate limit exceeded. Limit: {self.limit} requests per minute."},
                headers={
                    "x-ratelimit-limit": str(self.limit),
                    "x-ratelimit-remaining": "0",
                    "retry-after": str(retry_after),
                },
            )

        response = await call_next(request)
        response.headers["x-ratelimit-limit"] = str(self.limit)
        response.headers["x-ratelimit-remaining"] = str(max(0, self.limit - current_count))
        return response
