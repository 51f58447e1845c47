from datetime import datetime
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, Field

ReadTimeBucket = Literal["short", "medium", "long"]


class PillarRef(BaseModel):
    id: Optional[str] = None
    name: Optional[str] = None
    slug: Optional[str] = None
    color_theme: Optional[str] = None


class Article(BaseModel):
    """A published (or draft) article as stored by the backend, with embedded pillar and tags flattened."""
    id: str
    title: str
    slug: str
    subtitle: Optional[str] = None
    meta_description: Optional[str] = None
    content: Any = None
    status: str = "draft"
    difficulty_level: Optional[str] = None
    word_count: Optional[int] = None
    reading_time: Optional[int] = None
    view_count: int = 0
    published_at: Optional[datetime] = None
    pillar_id: Optional[str] = None
    pillar: Optional[PillarRef] = None
    tags: List[str] = Field(default_factory=list)
    related_slugs: List[str] = Field(default_factory=list)

    @property
    def category(self) -> Optional[str]:
        return self.pillar.slug if self.pillar else None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Article":
        data = dict(row)
        pillar = data.pop("content_pillars", None)
        if isinstance(pillar, list):
            pillar = pillar[0] if pillar else None
        if pillar:
            data["pillar"] = pillar
        tag_links = data.pop("article_tags", None)
        if tag_links and not data.get("tags"):
            data["tags"] = [
                link["tag"]["slug"] for link in tag_links
                if isinstance(link, dict) and link.get("tag") and link["tag"].get("slug")
            ]
        return cls.model_validate(data)


class Pillar(BaseModel):
    id: str
    name: str
    slug: str
    description: Optional[str] = None
    color_theme: Optional[str] = None
    icon_name: Optional[str] = None
    content_percentage: Optional[int] = None
    order_index: int = 0
    is_active: bool = True


class ToolListing(BaseModel):
    id: str
    name: str
    slug: str
    description: Optional[str] = None
    tool_type: Optional[str] = None
    status: str = "draft"
    pillar_id: Optional[str] = None
    pillar: Optional[PillarRef] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    can_embed: bool = False
    created_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "ToolListing":
        data = dict(row)
        pillar = data.pop("content_pillars", None)
        if pillar:
            data["pillar"] = pillar
        return cls.model_validate(data)


class Pagination(BaseModel):
    total: int
    limit: int
    offset: int
    has_more: bool


class ArticlePage(BaseModel):
    data: List[Article]
    pagination: Pagination


class ArticleFilters(BaseModel):
    pillar: Optional[str] = None # pillar id
    difficulty: Optional[str] = None
    search: Optional[str] = None
    limit: int = Field(default=10, ge=1, le=100)
    offset: int = Field(default=0, ge=0)


class RelatedContent(BaseModel):
    target_id: str
    target_type: str
    relationship_type: Optional[str] = None
    strength: float = 0.0


class SearchHit(BaseModel):
    id: str
    title: str
    slug: str
    subtitle: Optional[str] = None
    reading_time: Optional[int] = None
    pillar: Optional[PillarRef] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "SearchHit":
        data = dict(row)
        pillar = data.pop("content_pillars", None)
        if pillar:
            data["pillar"] = pillar
        return cls.model_validate(data)
