# src/dependencies.py
# Request-scoped accessors for the objects created in the application lifespan.
# Tests swap any of them through app.dependency_overrides.

from fastapi import Depends, Request

from services.tool_engine.engine import SessionStore, ToolEngine
from src.admin.service import AdminService
from src.analytics.service import AnalyticsService
from src.backend.client import BackendClient
from src.content.service import ContentService
from src.newsletter.service import NewsletterService


def get_backend(request: Request) -> BackendClient:
    return request.app.state.backend


def get_tool_engine(request: Request) -> ToolEngine:
    return request.app.state.tool_engine


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.sessions


def get_content_service(backend: BackendClient = Depends(get_backend)) -> ContentService:
    return ContentService(backend)


def get_newsletter_service(backend: BackendClient = Depends(get_backend)) -> NewsletterService:
    return NewsletterService(backend)


def get_analytics_service(backend: BackendClient = Depends(get_backend)) -> AnalyticsService:
    return AnalyticsService(backend)


def get_admin_service(backend: BackendClient = Depends(get_backend)) -> AdminService:
    return AdminService(backend)
