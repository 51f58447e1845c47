from fastapi import APIRouter, HTTPException, Depends, Query
from typing import Dict, List, Optional
import logging

from src.backend.client import BackendError, BackendUnavailableError
from src.content.service import ContentService
from src.core.errors import backend_http_error
from src.dependencies import get_content_service
from src.schemas.content import (
    Article,
    ArticleFilters,
    ArticlePage,
    Pillar,
    ReadTimeBucket,
    RelatedContent,
    SearchHit,
    ToolListing,
)

router = APIRouter()
logger = logging.getLogger(__name__)

BACKEND_ERRORS = (BackendError, BackendUnavailableError)


@router.get("/articles", response_model=ArticlePage)
async def list_articles(
    pillar: Optional[str] = None,
    difficulty: Optional[str] = None,
    search: Optional[str] = None,
    limit: int = Query(default=10, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    content: ContentService = Depends(get_content_service),
):
    filters = ArticleFilters(pillar=pillar, difficulty=difficulty, search=search, limit=limit, offset=offset)
    try:
        return await content.list_articles(filters)
    except BACKEND_ERRORS as e:
        raise backend_http_error(e)


@router.get("/articles/browse", response_model=List[Article])
async def browse_articles(
    category: Optional[str] = None,
    difficulty: Optional[str] = None,
    read_time: Optional[ReadTimeBucket] = None,
    tags: Optional[List[str]] = Query(default=None),
    content: ContentService = Depends(get_content_service),
):
    try:
        return await content.browse(category, difficulty, read_time, tags)
    except BACKEND_ERRORS as e:
        raise backend_http_error(e)


@router.get("/articles/tags", response_model=Dict[str, List[str]])
async def article_tags(
    limit: int = Query(default=10, ge=1, le=50),
    content: ContentService = Depends(get_content_service),
):
    try:
        return await content.tag_index(limit)
    except BACKEND_ERRORS as e:
        raise backend_http_error(e)


# Declared before /articles/{pillar}/{slug}, which would otherwise capture it
@router.get("/articles/{article_id}/related", response_model=List[RelatedContent])
async def related_content(
    article_id: str,
    limit: int = Query(default=3, ge=1, le=20),
    content: ContentService = Depends(get_content_service),
):
    try:
        return await content.related_content(article_id, limit)
    except BACKEND_ERRORS as e:
        raise backend_http_error(e)


@router.get("/articles/{pillar_slug}/{article_slug}", response_model=Article)
async def get_article(pillar_slug: str, article_slug: str, content: ContentService = Depends(get_content_service)):
    try:
        article = await content.get_article(pillar_slug, article_slug)
    except BACKEND_ERRORS as e:
        raise backend_http_error(e)
    if article is None:
        raise HTTPException(status_code=404, detail=f"Article '{pillar_slug}/{article_slug}' not found")
    return article


@router.get("/articles/{pillar_slug}/{article_slug}/similar", response_model=List[Article])
async def similar_articles(
    pillar_slug: str,
    article_slug: str,
    limit: int = Query(default=3, ge=1, le=20),
    content: ContentService = Depends(get_content_service),
):
    try:
        similar = await content.similar_articles(pillar_slug, article_slug, limit)
    except BACKEND_ERRORS as e:
        raise backend_http_error(e)
    if similar is None:
        raise HTTPException(status_code=404, detail=f"Article '{pillar_slug}/{article_slug}' not found")
    return similar


@router.get("/pillars", response_model=List[Pillar])
async def list_pillars(content: ContentService = Depends(get_content_service)):
    try:
        return await content.list_pillars()
    except BACKEND_ERRORS as e:
        raise backend_http_error(e)


@router.get("/tool-listings", response_model=List[ToolListing])
async def list_tool_listings(pillar: Optional[str] = None, content: ContentService = Depends(get_content_service)):
    try:
        return await content.list_tools(pillar)
    except BACKEND_ERRORS as e:
        raise backend_http_error(e)


@router.get("/tool-listings/{slug}", response_model=ToolListing)
async def get_tool_listing(slug: str, content: ContentService = Depends(get_content_service)):
    try:
        listing = await content.get_tool(slug)
    except BACKEND_ERRORS as e:
        raise backend_http_error(e)
    if listing is None:
        raise HTTPException(status_code=404, detail=f"Tool '{slug}' not found")
    return listing


@router.get("/search", response_model=List[SearchHit])
async def search(
    q: str = Query(..., min_length=1, max_length=200),
    limit: int = Query(default=10, ge=1, le=50),
    content: ContentService = Depends(get_content_service),
):
    try:
        return await content.search(q, limit)
    except BACKEND_ERRORS as e:
        raise backend_http_error(e)
