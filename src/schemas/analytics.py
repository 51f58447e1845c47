from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, field_validator

from src.schemas.newsletter import normalize_email


class EventRequest(BaseModel):
    event_type: str = Field(..., min_length=1, max_length=100, examples=["page_view"])
    content_type: str = Field(..., min_length=1, max_length=50, examples=["article"])
    content_id: str = Field(..., min_length=1, max_length=200)
    user_identifier: Optional[str] = Field(default=None, max_length=100)
    metadata: Dict[str, Any] = Field(default_factory=dict)


class EventAccepted(BaseModel):
    user_identifier: str


class ContentInteractionRequest(BaseModel):
    email: str
    article_slug: str = Field(..., min_length=1)
    actually_implemented: Optional[bool] = None
    resulted_in_customers: Optional[bool] = None
    what_worked: Optional[str] = None
    what_didnt: Optional[str] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        return normalize_email(value)


class ToolStat(BaseModel):
    name: str
    usage: int
    slug: str


class ArticleStat(BaseModel):
    title: str
    slug: str
    views: int


class AnalyticsSummary(BaseModel):
    range: str
    page_views: int
    unique_visitors: int
    events_by_type: Dict[str, int]
    top_tools: List[ToolStat]
    top_articles: List[ArticleStat]
