from pathlib import Path

from fastapi import FastAPI
from fastapi.testclient import TestClient
from unittest.mock import AsyncMock, MagicMock

from config.settings import AppSettings
from services.tool_engine.engine import ToolEngine
from src.backend.client import BackendUnavailableError
from src.content.service import ContentService
from src.dependencies import get_content_service, get_tool_engine
from src.middleware.auth import get_app_settings
from src.routers.seo import router as seo_router
from src.schemas.content import Article, PillarRef

TOOLS_DIR = Path(__file__).resolve().parents[2] / "assets" / "tools"

app = FastAPI()
app.include_router(seo_router)

client = TestClient(app)

SETTINGS = AppSettings(base_url="https://cookbook.test")


def _override(content):
    app.dependency_overrides[get_content_service] = lambda: content
    app.dependency_overrides[get_tool_engine] = lambda: ToolEngine(str(TOOLS_DIR))
    app.dependency_overrides[get_app_settings] = lambda: SETTINGS


def test_sitemap_lists_articles_and_tools():
    content = MagicMock(spec=ContentService)
    content.published_articles = AsyncMock(return_value=[
        Article(id="a1", title="Launch Week", slug="launch-week", status="published", pillar=PillarRef(slug="ship-it")),
    ])
    _override(content)
    response = client.get("/sitemap.xml")
    app.dependency_overrides.clear()

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/xml")
    assert "<loc>https://cookbook.test/articles/ship-it/launch-week</loc>" in response.text
    assert "<loc>https://cookbook.test/tools/customer-plan</loc>" in response.text


def test_sitemap_backend_down():
    content = MagicMock(spec=ContentService)
    content.published_articles = AsyncMock(side_effect=BackendUnavailableError("down"))
    _override(content)
    response = client.get("/sitemap.xml")
    app.dependency_overrides.clear()

    assert response.status_code == 503


def test_robots_txt():
    app.dependency_overrides[get_app_settings] = lambda: SETTINGS
    response = client.get("/robots.txt")
    app.dependency_overrides.clear()

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert "Sitemap: https://cookbook.test/sitemap.xml" in response.text
