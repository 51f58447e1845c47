import logging
from typing import Any, Dict, List, Optional, Sequence

from config.settings import redis_settings
from src.backend.client import BackendClient
from src.cache.decorators import invalidate, redis_cache
from src.content import catalog
from src.schemas.content import (
    Article,
    ArticleFilters,
    ArticlePage,
    Pagination,
    Pillar,
    RelatedContent,
    SearchHit,
    ToolListing,
)

logger = logging.getLogger(__name__)

CACHE_PREFIX = "content:"
CACHE_TTL = redis_settings.cache_ttl

ARTICLE_COLUMNS = (
    "*,content_pillars(id,name,slug,color_theme),"
    "article_tags(tag:tags(id,name,slug))"
)
ARTICLE_BY_PILLAR_COLUMNS = (
    "*,content_pillars!inner(id,name,slug,color_theme),"
    "article_tags(tag:tags(id,name,slug))"
)
TOOL_COLUMNS = "*,content_pillars(id,name,slug,color_theme)"
SEARCH_COLUMNS = "id,title,subtitle,slug,reading_time,content_pillars(name,slug,color_theme)"
SEARCHABLE = ("title", "subtitle", "meta_description")


class ContentService:
    """
    Read side of the published content. Every read is cached in Redis
    under the ``content:`` prefix; admin writes call ``invalidate_cache``.
    """

    def __init__(self, backend: BackendClient):
        self.backend = backend

    @redis_cache(ttl=CACHE_TTL, key_prefix=CACHE_PREFIX, method=True)
    async def list_articles(self, filters: ArticleFilters) -> ArticlePage:
        query_filters: Dict[str, Any] = {"status": "published"}
        if filters.pillar:
            query_filters["pillar_id"] = filters.pillar
        if filters.difficulty:
            query_filters["difficulty_level"] = filters.difficulty

        result = await self.backend.select(
            "articles",
            columns=ARTICLE_COLUMNS,
            filters=query_filters,
            order="published_at",
            ascending=False,
            limit=filters.limit,
            offset=filters.offset,
            search=(SEARCHABLE, filters.search) if filters.search else None,
            count=True,
        )
        total = result.total or 0
        return ArticlePage(
            data=[Article.from_row(row) for row in result.rows],
            pagination=Pagination(
                total=total,
                limit=filters.limit,
                offset=filters.offset,
                has_more=total > filters.offset + filters.limit,
            ),
        )

    @redis_cache(ttl=CACHE_TTL, key_prefix=CACHE_PREFIX, method=True)
    async def get_article(self, pillar_slug: str, article_slug: str) -> Optional[Article]:
        row = await self.backend.select_one(
            "articles",
            columns=ARTICLE_BY_PILLAR_COLUMNS,
            filters={"slug": article_slug, "content_pillars.slug": pillar_slug, "status": "published"},
        )
        return Article.from_row(row) if row else None

    @redis_cache(ttl=CACHE_TTL, key_prefix=CACHE_PREFIX, method=True)
    async def published_articles(self) -> List[Article]:
        """Every published article, newest first. Feeds the sitemap and the catalog views."""
        result = await self.backend.select(
            "articles",
            columns=ARTICLE_COLUMNS,
            filters={"status": "published"},
            order="published_at",
            ascending=False,
        )
        return [Article.from_row(row) for row in result.rows]

    async def browse(
        self,
        category: Optional[str] = None,
        difficulty: Optional[str] = None,
        read_time: Optional[str] = None,
        tags: Optional[Sequence[str]] = None,
    ) -> List[Article]:
        articles = await self.published_articles()
        return catalog.filter_articles(articles, category, difficulty, read_time, tags)

    async def tag_index(self, limit: int = 10) -> Dict[str, List[str]]:
        articles = await self.published_articles()
        return {
            "all": catalog.all_tags(articles),
            "popular": catalog.popular_tags(articles, limit),
        }

    async def similar_articles(self, pillar_slug: str, article_slug: str, limit: int = 3) -> Optional[List[Article]]:
        article = await self.get_article(pillar_slug, article_slug)
        if article is None:
            return None
        return catalog.related_articles(article, await self.published_articles(), limit)

    @redis_cache(ttl=CACHE_TTL, key_prefix=CACHE_PREFIX, method=True)
    async def list_pillars(self) -> List[Pillar]:
        result = await self.backend.select(
            "content_pillars", filters={"is_active": True}, order="order_index", ascending=True
        )
        return [Pillar.model_validate(row) for row in result.rows]

    @redis_cache(ttl=CACHE_TTL, key_prefix=CACHE_PREFIX, method=True)
    async def list_tools(self, pillar: Optional[str] = None) -> List[ToolListing]:
        filters: Dict[str, Any] = {"status": "published"}
        if pillar:
            filters["pillar_id"] = pillar
        result = await self.backend.select(
            "tools", columns=TOOL_COLUMNS, filters=filters, order="created_at", ascending=False
        )
        return [ToolListing.from_row(row) for row in result.rows]

    @redis_cache(ttl=CACHE_TTL, key_prefix=CACHE_PREFIX, method=True)
    async def get_tool(self, slug: str) -> Optional[ToolListing]:
        row = await self.backend.select_one(
            "tools", columns=TOOL_COLUMNS, filters={"slug": slug, "status": "published"}
        )
        return ToolListing.from_row(row) if row else None

    @redis_cache(ttl=CACHE_TTL, key_prefix=CACHE_PREFIX, method=True)
    async def related_content(self, article_id: str, limit: int = 3) -> List[RelatedContent]:
        result = await self.backend.select(
            "content_relationships",
            columns="target_id,target_type,relationship_type,strength",
            filters={"source_id": article_id, "source_type": "article"},
            order="strength",
            ascending=False,
            limit=limit,
        )
        return [RelatedContent.model_validate(row) for row in result.rows]

    @redis_cache(ttl=CACHE_TTL, key_prefix=CACHE_PREFIX, method=True)
    async def search(self, query: str, limit: int = 10) -> List[SearchHit]:
        if not query.strip():
            return []
        result = await self.backend.select(
            "articles",
            columns=SEARCH_COLUMNS,
            filters={"status": "published"},
            search=(SEARCHABLE, query),
            limit=limit,
        )
        return [SearchHit.from_row(row) for row in result.rows]


async def invalidate_cache() -> int:
    """Drops every cached content read."""
    return await invalidate(CACHE_PREFIX)
