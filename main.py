import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from redis.exceptions import RedisError

from config.settings import app_settings, backend_settings
from services.tool_engine.engine import SessionStore, ToolEngine
from src.backend.client import BackendClient
from src.cache.connection import close_redis, get_redis
from src.core.logging_config import setup_logging
from src.middleware.rate_limit import RateLimitingMiddleware
from src.routers import admin as admin_router
from src.routers import analytics as analytics_router
from src.routers import content as content_router
from src.routers import newsletter as newsletter_router
from src.routers import seo as seo_router
from src.routers import tools as tools_router

setup_logging(app_settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Creates the backend client and the tool engine once per process."""
    app.state.tool_engine = ToolEngine(app_settings.tools_dir)
    app.state.sessions = SessionStore(app.state.tool_engine)
    app.state.backend = BackendClient(backend_settings.url, backend_settings.key, timeout=backend_settings.timeout)
    if not backend_settings.key:
        logger.warning("BACKEND_KEY is not set; backend requests will be anonymous.")
    logger.info("GTM Cookbook API started.")
    try:
        yield
    finally:
        await app.state.backend.aclose()
        await close_redis()
        logger.info("GTM Cookbook API stopped.")


app = FastAPI(title="GTM Cookbook API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=app_settings.cors_origin_list(),
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RateLimitingMiddleware, limit=app_settings.rate_limit_per_minute)

# --- Include Routers ---
app.include_router(tools_router.router, prefix="/api/v1", tags=["tools"])
app.include_router(content_router.router, prefix="/api/v1", tags=["content"])
app.include_router(newsletter_router.router, prefix="/api/v1", tags=["newsletter"])
app.include_router(analytics_router.router, prefix="/api/v1", tags=["analytics"])
app.include_router(admin_router.router, prefix="/api/v1", tags=["admin"])
app.include_router(seo_router.router, tags=["seo"])


@app.get("/health", tags=["Health Check"])
async def health():
    """Liveness plus a cache probe; the API keeps serving without Redis."""
    redis_conn = await get_redis()
    cache = "unavailable"
    if redis_conn is not None:
        try:
            await redis_conn.ping()
            cache = "ok"
        except (RedisError, OSError) as e:
            logger.warning(f"Cache health check failed: {e}")
    return {"status": "ok", "cache": cache}
