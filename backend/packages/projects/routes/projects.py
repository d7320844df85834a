from typing import List
from fastapi import APIRouter, Depends, status

from packages.auth.dependencies import get_current_active_user
from packages.auth.models.domain.authenticated_user import AuthenticatedUser
from packages.projects.models.schemas.project import (
    ProjectCreateRequest,
    ProjectResponse,
    ProjectWithUsageResponse,
)
from packages.projects.services.project_service import ProjectService

router = APIRouter()


def get_project_service() -> ProjectService:
    return ProjectService()


@router.get("", response_model=List[ProjectWithUsageResponse])
async def list_projects(
    current_user: AuthenticatedUser = Depends(get_current_active_user),
    project_service: ProjectService = Depends(get_project_service),
):
    """The caller's projects with credits used per usage type."""
    projects = await project_service.list_projects(current_user.user_id)
    return [ProjectWithUsageResponse.model_validate(p, from_attributes=True) for p in projects]


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(
    request: ProjectCreateRequest,
    current_user: AuthenticatedUser = Depends(get_current_active_user),
    project_service: ProjectService = Depends(get_project_service),
):
    project = await project_service.create_project(
        current_user.user_id, request.name, request.description
    )
    return ProjectResponse.model_validate(project, from_attributes=True)
