from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, field_validator

from services.tool_engine.models import Question, ToolConfig
from src.schemas.newsletter import normalize_email


class ToolSummary(BaseModel):
    slug: str
    name: str
    description: str
    version: str
    time_to_complete: Optional[str] = None
    question_count: int

    @classmethod
    def from_config(cls, config: ToolConfig) -> "ToolSummary":
        return cls(
            slug=config.slug,
            name=config.name,
            description=config.description,
            version=config.version,
            time_to_complete=config.time_to_complete,
            question_count=len(config.questions),
        )


class ToolDetail(ToolSummary):
    questions: List[Question]

    @classmethod
    def from_config(cls, config: ToolConfig) -> "ToolDetail":
        summary = ToolSummary.from_config(config)
        return cls(**summary.model_dump(), questions=config.questions)


class EvaluateRequest(BaseModel):
    answers: Dict[str, str]  # question_id -> option value or free text
    email: Optional[str] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        return normalize_email(value)


class AnswerRequest(BaseModel):
    value: str = Field(..., description="Option value for choice questions, free text otherwise.")


class SessionState(BaseModel):
    session_id: str
    tool: str
    step: int
    total_steps: int
    progress: int
    can_advance: bool
    is_complete: bool
    current_question: Optional[Question] = None
    answers: Dict[str, str]
    result: Optional[Dict[str, Any]] = None
