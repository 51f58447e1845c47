from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, Field, field_validator

ToolStatus = Literal["draft", "published", "archived"]
ArticleStatus = Literal["draft", "review", "published", "archived"]


class ArticleCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=300)
    subtitle: Optional[str] = None
    content: str = Field(..., description="Plain text or markdown body.")
    pillar_id: str
    status: ArticleStatus = "draft"
    difficulty_level: Optional[str] = None
    meta_description: Optional[str] = Field(default=None, max_length=320)


class ArticleUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=300)
    subtitle: Optional[str] = None
    content: Optional[str] = None
    pillar_id: Optional[str] = None
    status: Optional[ArticleStatus] = None
    difficulty_level: Optional[str] = None
    meta_description: Optional[str] = Field(default=None, max_length=320)


class FieldSpec(BaseModel):
    name: str
    type: str
    required: bool = False


class ToolCreate(BaseModel):
    name: str = Field(..., min_length=1)
    slug: str = Field(..., min_length=1)
    description: Optional[str] = None
    tool_type: str = Field(default="calculator", min_length=1)
    status: ToolStatus = "draft"
    pillar_id: Optional[str] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    can_embed: bool = False
    input_fields: List[FieldSpec] = Field(default_factory=list)
    output_fields: List[FieldSpec] = Field(default_factory=list)


class ToolUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    status: Optional[ToolStatus] = None
    pillar_id: Optional[str] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    can_embed: Optional[bool] = None


class PillarCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    content_percentage: Optional[int] = Field(default=None, ge=0, le=100)
    color_theme: Optional[str] = None
    icon_name: Optional[str] = None


class PillarUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    content_percentage: Optional[int] = Field(default=None, ge=0, le=100)
    color_theme: Optional[str] = None
    icon_name: Optional[str] = None
    order_index: Optional[int] = None
    is_active: Optional[bool] = None


def _check_stages(stages: Optional[List[str]]) -> Optional[List[str]]:
    if stages is None:
        return None
    cleaned = [stage.strip() for stage in stages]
    if not cleaned or any(not stage for stage in cleaned):
        raise ValueError("A workflow needs at least one stage and stage names cannot be blank")
    if len(set(cleaned)) != len(cleaned):
        raise ValueError("Workflow stage names must be unique")
    return cleaned


class WorkflowCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    stages: List[str] = Field(default_factory=lambda: ["Draft", "Review", "Published"])

    @field_validator("stages")
    @classmethod
    def check_stages(cls, value: List[str]) -> List[str]:
        return _check_stages(value)


class WorkflowUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    stages: Optional[List[str]] = None
    is_active: Optional[bool] = None

    @field_validator("stages")
    @classmethod
    def check_stages(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        return _check_stages(value)


class DeleteResult(BaseModel):
    deleted: int
