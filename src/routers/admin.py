from fastapi import APIRouter, HTTPException, Depends, Query, status
from typing import Any, Dict, List, Literal, Optional
import logging

from src.admin.service import AdminService, RecordNotFoundError
from src.analytics.service import AnalyticsService
from src.backend.client import BackendError, BackendUnavailableError, ConflictError
from src.core.errors import backend_http_error
from src.dependencies import get_admin_service, get_analytics_service, get_newsletter_service
from src.middleware.auth import require_admin
from src.newsletter.service import NewsletterService
from src.schemas.admin import (
    ArticleCreate,
    ArticleUpdate,
    DeleteResult,
    PillarCreate,
    PillarUpdate,
    ToolCreate,
    ToolUpdate,
    WorkflowCreate,
    WorkflowUpdate,
)
from src.schemas.analytics import AnalyticsSummary
from src.schemas.newsletter import Subscriber

router = APIRouter(prefix="/admin", dependencies=[Depends(require_admin)])
logger = logging.getLogger(__name__)

Resource = Literal["articles", "tools", "pillars", "workflows"]


async def _run(call):
    """Awaits an admin service call, translating its failures to HTTP errors."""
    try:
        return await call
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=e.message)
    except (BackendError, BackendUnavailableError) as e:
        raise backend_http_error(e)


# --- Articles ---

@router.post("/articles", status_code=status.HTTP_201_CREATED)
async def create_article(article: ArticleCreate, admin: AdminService = Depends(get_admin_service)) -> Dict[str, Any]:
    return await _run(admin.create_article(article))


@router.patch("/articles/{article_id}")
async def update_article(article_id: str, changes: ArticleUpdate, admin: AdminService = Depends(get_admin_service)) -> Dict[str, Any]:
    return await _run(admin.update_article(article_id, changes))


@router.post("/articles/{article_id}/publish")
async def publish_article(article_id: str, admin: AdminService = Depends(get_admin_service)) -> Dict[str, Any]:
    return await _run(admin.publish_article(article_id))


# --- Tools ---

@router.post("/tools", status_code=status.HTTP_201_CREATED)
async def create_tool(tool: ToolCreate, admin: AdminService = Depends(get_admin_service)) -> Dict[str, Any]:
    return await _run(admin.create_tool(tool))


@router.patch("/tools/{tool_id}")
async def update_tool(tool_id: str, changes: ToolUpdate, admin: AdminService = Depends(get_admin_service)) -> Dict[str, Any]:
    return await _run(admin.update("tools", tool_id, changes.model_dump(exclude_none=True)))


# --- Pillars ---

@router.post("/pillars", status_code=status.HTTP_201_CREATED)
async def create_pillar(pillar: PillarCreate, admin: AdminService = Depends(get_admin_service)) -> Dict[str, Any]:
    return await _run(admin.create_pillar(pillar))


@router.patch("/pillars/{pillar_id}")
async def update_pillar(pillar_id: str, changes: PillarUpdate, admin: AdminService = Depends(get_admin_service)) -> Dict[str, Any]:
    return await _run(admin.update("pillars", pillar_id, changes.model_dump(exclude_none=True)))


# --- Workflows ---

@router.post("/workflows", status_code=status.HTTP_201_CREATED)
async def create_workflow(workflow: WorkflowCreate, admin: AdminService = Depends(get_admin_service)) -> Dict[str, Any]:
    return await _run(admin.create_workflow(workflow))


@router.patch("/workflows/{workflow_id}")
async def update_workflow(workflow_id: str, changes: WorkflowUpdate, admin: AdminService = Depends(get_admin_service)) -> Dict[str, Any]:
    return await _run(admin.update("workflows", workflow_id, changes.model_dump(exclude_none=True)))


# --- Audience ---

@router.get("/subscribers", response_model=List[Subscriber])
async def list_subscribers(
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    newsletter: NewsletterService = Depends(get_newsletter_service),
):
    return await _run(newsletter.list_subscribers(limit, offset))


@router.get("/analytics", response_model=AnalyticsSummary)
async def analytics_summary(
    range_key: str = Query(default="7d", alias="range"),
    analytics: AnalyticsService = Depends(get_analytics_service),
):
    return await _run(analytics.summarize(range_key))


# Generic routes last: /{resource} would otherwise capture /subscribers and /analytics

@router.get("/{resource}", response_model=List[Dict[str, Any]])
async def list_records(
    resource: Resource,
    status_filter: Optional[str] = Query(default=None, alias="status"),
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    admin: AdminService = Depends(get_admin_service),
):
    return await _run(admin.list(resource, status_filter, limit, offset))


@router.delete("/{resource}/{record_id}", response_model=DeleteResult)
async def delete_record(resource: Resource, record_id: str, admin: AdminService = Depends(get_admin_service)):
    return DeleteResult(deleted=await _run(admin.delete(resource, record_id)))
