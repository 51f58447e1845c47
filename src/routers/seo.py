from datetime import date
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse, Response

from config.settings import AppSettings
from services.tool_engine.engine import ToolEngine
from src.backend.client import BackendError, BackendUnavailableError
from src.content.service import ContentService
from src.content.sitemap import build_robots_txt, build_sitemap
from src.core.errors import backend_http_error
from src.dependencies import get_content_service, get_tool_engine
from src.middleware.auth import get_app_settings

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/sitemap.xml", include_in_schema=False)
async def sitemap(
    content: ContentService = Depends(get_content_service),
    engine: ToolEngine = Depends(get_tool_engine),
    settings: AppSettings = Depends(get_app_settings),
):
    try:
        articles = await content.published_articles()
    except (BackendError, BackendUnavailableError) as e:
        raise backend_http_error(e)
    tool_slugs = [config.slug for config in engine.list_tools()]
    xml = build_sitemap(settings.base_url, articles, tool_slugs, date.today())
    return Response(content=xml, media_type="application/xml")


@router.get("/robots.txt", include_in_schema=False, response_class=PlainTextResponse)
async def robots(settings: AppSettings = Depends(get_app_settings)):
    return build_robots_txt(settings.base_url)
