import re
from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, Field, field_validator

ProjectStage = Literal[
    "Just an idea",
    "Building in secret",
    "80% done",
    "Launched to crickets",
    "Making some money",
]

_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def normalize_email(value: str) -> str:
    """Lower-cases and strips an address, rejecting anything without a user@domain.tld shape."""
    email = value.strip().lower()
    if not _EMAIL.match(email):
        raise ValueError("Invalid email address")
    return email


class SignupRequest(BaseModel):
    email: str = Field(..., description="Subscriber email address.", examples=["engineer@example.com"])
    current_mrr: Optional[float] = Field(default=None, ge=0, description="Current monthly recurring revenue in USD.")
    project_stage: Optional[ProjectStage] = None
    biggest_gtm_blocker: Optional[str] = Field(default=None, max_length=500)
    hours_per_week_available: Optional[int] = Field(default=None, ge=0, le=168)
    has_customers: Optional[bool] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        return normalize_email(value)


class Subscriber(BaseModel):
    id: str
    email: str
    current_mrr: Optional[float] = None
    project_stage: Optional[str] = None
    biggest_gtm_blocker: Optional[str] = None
    hours_per_week_available: Optional[int] = None
    has_customers: Optional[bool] = None
    created_at: Optional[datetime] = None
