from collections import defaultdict
from typing import List, Optional

from common.core.otel_axiom_exporter import trace_span, get_logger
from packages.billing.models.domain.enums import UsageType
from packages.billing.repositories.usage_repository import UsageEventRepository
from packages.projects.models.domain.project import (
    Project,
    ProjectCreateModel,
    ProjectWithUsage,
)
from packages.projects.repositories.project_repository import ProjectRepository

logger = get_logger(__name__)


class ProjectService:
    """Service for projects and their per-type usage stats."""

    def __init__(self):
        self.project_repo = ProjectRepository()
        self.usage_repo = UsageEventRepository()

    @trace_span
    async def create_project(
        self, user_id: int, name: str, description: Optional[str] = None
    ) -> Project:
        project = await self.project_repo.create(
            ProjectCreateModel(user_id=user_id, name=name, description=description)
        )
        logger.info(
            f"Created project {project.id}",
            extra={"project_id": project.id, "user_id": user_id},
        )
        return project

    @trace_span
    async def list_projects(self, user_id: int) -> List[ProjectWithUsage]:
        """User's projects, each with credits per usage type (zero-filled)."""
        projects = await self.project_repo.get_by_user(user_id)
        totals = defaultdict(dict)
        for project_id, usage_type, credits in (
            await self.usage_repo.get_credits_by_project_and_type(user_id)
        ):
            totals[project_id][usage_type] = credits

        results = []
        for project in projects:
            by_type = {
                usage_type: totals[project.id].get(usage_type, 0)
                for usage_type in UsageType
            }
            results.append(
                ProjectWithUsage(
                    **project.model_dump(),
                    credits_by_type=by_type,
                    total_credits=sum(by_type.values()),
                )
            )
        return results
