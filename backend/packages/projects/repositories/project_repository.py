from typing import List, Optional
from sqlalchemy import select

from common.repositories.base import BaseRepository
from common.core.otel_axiom_exporter import trace_span
from packages.projects.models.database.project import ProjectEntity
from packages.projects.models.domain.project import Project


class ProjectRepository(BaseRepository[ProjectEntity, Project]):
    def __init__(self, db_session=None):
        super().__init__(ProjectEntity, Project, db_session)

    @trace_span
    async def get_by_user(self, user_id: int) -> List[Project]:
        """All projects of a user, oldest first."""
        async with self._get_session() as session:
            result = await session.execute(
                select(ProjectEntity)
                .where(ProjectEntity.user_id == user_id)
                .order_by(ProjectEntity.created_at, ProjectEntity.id)
            )
            return self._entities_to_domain(result.scalars().all())

    @trace_span
    async def get_for_user(self, project_id: int, user_id: int) -> Optional[Project]:
        """Project by id, only if owned by user."""
        async with self._get_session() as session:
            result = await session.execute(
                select(ProjectEntity).where(
                    ProjectEntity.id == project_id,
                    ProjectEntity.user_id == user_id,
                )
            )
            entity = result.scalar_one_or_none()
            return self._entity_to_domain(entity) if entity else None
