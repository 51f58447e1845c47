import logging
import uuid
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from src.backend.client import BackendClient
from src.content.catalog import slugify
from src.schemas.analytics import AnalyticsSummary, ArticleStat, ToolStat

logger = logging.getLogger(__name__)

RANGE_DAYS = {"1d": 1, "7d": 7, "30d": 30, "90d": 90}
DEFAULT_RANGE = "7d"
TOP_N = 5


def anonymous_identifier() -> str:
    return f"anon_{uuid.uuid4().hex}"


def range_start(range_key: str, now: datetime) -> datetime:
    return now - timedelta(days=RANGE_DAYS.get(range_key, RANGE_DAYS[DEFAULT_RANGE]))


class AnalyticsService:
    def __init__(self, backend: BackendClient):
        self.backend = backend

    async def track_event(
        self,
        event_type: str,
        content_type: str,
        content_id: str,
        user_identifier: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> str:
        """Records one analytics event and returns the identifier it was attributed to."""
        user_identifier = user_identifier or anonymous_identifier()
        await self.backend.insert("analytics_events", {
            "event_type": event_type,
            "content_type": content_type,
            "content_id": content_id,
            "user_identifier": user_identifier,
            "metadata": metadata or {},
        })
        return user_identifier

    async def track_tool_usage(
        self,
        email: str,
        tool_name: str,
        inputs: Optional[Dict[str, Any]] = None,
        output_helpful: Optional[bool] = None,
    ) -> Dict[str, Any]:
        row: Dict[str, Any] = {"email": email, "tool_name": tool_name, "inputs_provided": inputs or {}}
        if output_helpful is not None:
            row["output_helpful"] = output_helpful
        return await self.backend.insert("tool_usage", row)

    async def track_content_interaction(self, interaction: Dict[str, Any]) -> Dict[str, Any]:
        return await self.backend.insert("content_data", interaction)

    async def summarize(self, range_key: str = DEFAULT_RANGE, now: Optional[datetime] = None) -> AnalyticsSummary:
        """
        Dashboard numbers for the given range ("1d", "7d", "30d", "90d";
        anything else is treated as "7d").
        """
        if range_key not in RANGE_DAYS:
            range_key = DEFAULT_RANGE
        now = now or datetime.now(timezone.utc)
        since = range_start(range_key, now).isoformat()

        events = await self.backend.select(
            "analytics_events", gte={"created_at": since}, order="created_at", ascending=False
        )
        articles = await self.backend.select(
            "articles", columns="title,slug,view_count", filters={"status": "published"},
            order="view_count", ascending=False, limit=TOP_N,
        )
        usage = await self.backend.select("tool_usage", columns="tool_name", gte={"usage_date": since})

        events_by_type = Counter(event["event_type"] for event in events.rows if event.get("event_type"))
        visitors = {event.get("user_identifier") for event in events.rows if event.get("user_identifier")}
        tool_counts = Counter(row["tool_name"] for row in usage.rows if row.get("tool_name"))
        top_tools = sorted(tool_counts.items(), key=lambda item: -item[1])[:TOP_N]

        return AnalyticsSummary(
            range=range_key,
            page_views=events_by_type.get("page_view", 0),
            unique_visitors=len(visitors),
            events_by_type=dict(events_by_type),
            top_tools=[ToolStat(name=name, usage=count, slug=slugify(name)) for name, count in top_tools],
            top_articles=[
                ArticleStat(title=row.get("title", ""), slug=row.get("slug", ""), views=row.get("view_count") or 0)
                for row in articles.rows
            ],
        )
