import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from src.backend.client import BackendClient
from src.content import catalog
from src.content.service import invalidate_cache
from src.schemas.admin import (
    ArticleCreate,
    ArticleUpdate,
    PillarCreate,
    ToolCreate,
    WorkflowCreate,
)

logger = logging.getLogger(__name__)

# URL resource name -> backend table
RESOURCES = {
    "articles": "articles",
    "tools": "tools",
    "pillars": "content_pillars",
    "workflows": "content_workflows",
}

# Default ordering for back-office listings
_LIST_ORDER = {
    "articles": ("created_at", False),
    "tools": ("created_at", False),
    "content_pillars": ("order_index", True),
    "content_workflows": ("created_at", False),
}


class RecordNotFoundError(LookupError):
    def __init__(self, resource: str, record_id: str):
        super().__init__(f"No {resource} record with id '{record_id}'")
        self.resource = resource
        self.record_id = record_id


def article_body(content: str) -> Dict[str, Any]:
    """Stored block structure for a plain text body."""
    return {"blocks": [{"type": "paragraph", "content": content}]}


def article_metrics(content: str) -> Dict[str, int]:
    return {"word_count": catalog.word_count(content), "reading_time": catalog.reading_time(content)}


class AdminService:
    """Back-office writes. Every successful write drops the cached content reads."""

    def __init__(self, backend: BackendClient):
        self.backend = backend

    @staticmethod
    def _table(resource: str) -> str:
        try:
            return RESOURCES[resource]
        except KeyError:
            raise ValueError(f"Unknown admin resource '{resource}'") from None

    async def _written(self, resource: str, action: str, record: Any) -> Any:
        await invalidate_cache()
        logger.info(f"Admin {action} on {resource}")
        return record

    async def list(self, resource: str, status: Optional[str] = None, limit: int = 100, offset: int = 0) -> List[Dict[str, Any]]:
        table = self._table(resource)
        order, ascending = _LIST_ORDER[table]
        result = await self.backend.select(
            table,
            filters={"status": status} if status else None,
            order=order,
            ascending=ascending,
            limit=limit,
            offset=offset,
        )
        return result.rows

    async def update(self, resource: str, record_id: str, values: Dict[str, Any]) -> Dict[str, Any]:
        table = self._table(resource)
        if not values:
            row = await self.backend.select_one(table, filters={"id": record_id})
            if row is None:
                raise RecordNotFoundError(resource, record_id)
            return row
        rows = await self.backend.update(table, {"id": record_id}, values)
        if not rows:
            raise RecordNotFoundError(resource, record_id)
        return await self._written(resource, "update", rows[0])

    async def delete(self, resource: str, record_id: str) -> int:
        deleted = await self.backend.delete(self._table(resource), {"id": record_id})
        if not deleted:
            raise RecordNotFoundError(resource, record_id)
        return await self._written(resource, "delete", deleted)

    # --- Articles ---

    async def create_article(self, article: ArticleCreate) -> Dict[str, Any]:
        row = article.model_dump(exclude_none=True)
        row.update(article_metrics(article.content))
        row["slug"] = catalog.slugify(article.title)
        row["content"] = article_body(article.content)
        if article.status == "published":
            row["published_at"] = datetime.now(timezone.utc).isoformat()
        created = await self.backend.insert("articles", row)
        return await self._written("articles", "create", created)

    async def update_article(self, article_id: str, changes: ArticleUpdate) -> Dict[str, Any]:
        # The slug is fixed at creation so published URLs survive title edits
        values = changes.model_dump(exclude_none=True)
        if changes.content is not None:
            values.update(article_metrics(changes.content))
            values["content"] = article_body(changes.content)
        return await self.update("articles", article_id, values)

    async def publish_article(self, article_id: str, now: Optional[datetime] = None) -> Dict[str, Any]:
        now = now or datetime.now(timezone.utc)
        return await self.update("articles", article_id, {"status": "published", "published_at": now.isoformat()})

    # --- Tools, pillars, workflows ---

    async def create_tool(self, tool: ToolCreate) -> Dict[str, Any]:
        row = tool.model_dump(exclude={"input_fields", "output_fields"})
        row["config"] = {"type": tool.tool_type, "settings": {}}
        row["input_schema"] = {"fields": [field.model_dump() for field in tool.input_fields]}
        row["output_schema"] = {"fields": [field.model_dump() for field in tool.output_fields]}
        created = await self.backend.insert("tools", row)
        return await self._written("tools", "create", created)

    async def create_pillar(self, pillar: PillarCreate) -> Dict[str, Any]:
        existing = await self.backend.select("content_pillars", columns="id", count=True)
        row = pillar.model_dump(exclude_none=True)
        row["slug"] = catalog.slugify(pillar.name)
        row["order_index"] = (existing.total if existing.total is not None else len(existing.rows)) + 1
        created = await self.backend.insert("content_pillars", row)
        return await self._written("pillars", "create", created)

    async def create_workflow(self, workflow: WorkflowCreate) -> Dict[str, Any]:
        created = await self.backend.insert("content_workflows", workflow.model_dump(exclude_none=True))
        return await self._written("workflows", "create", created)
