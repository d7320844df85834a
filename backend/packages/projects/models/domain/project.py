from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from packages.billing.models.domain.enums import UsageType


class Project(BaseModel):
    id: int
    user_id: int
    name: str
    description: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class ProjectCreateModel(BaseModel):
    user_id: int
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None


class ProjectWithUsage(Project):
    """Project plus its all-time credit consumption per usage type."""

    credits_by_type: dict[UsageType, int]
    total_credits: int
