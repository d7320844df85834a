from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from packages.billing.models.domain.enums import UsageType


class ProjectCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None


class ProjectResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class ProjectWithUsageResponse(ProjectResponse):
    credits_by_type: dict[UsageType, int]
    total_credits: int
