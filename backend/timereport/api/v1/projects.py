"""Project endpoints.

All endpoints run against the caller's own store, so a project id from
another user simply does not exist here.

Endpoints:
- GET /projects: list projects with totals
- GET /projects/{project_id}: one project with totals
- POST /projects: create
- PATCH /projects/{project_id}: partial update
- DELETE /projects/{project_id}: delete with its time entries
"""

import uuid

from fastapi import APIRouter, Response, status

from timereport.api.deps import UserStoreSession
from timereport.core.errors import NotFoundError
from timereport.core.responses import DataResponse
from timereport.schemas.project import (
    CreateProjectRequest,
    ProjectResponse,
    UpdateProjectRequest,
)
from timereport.services.project_service import ProjectService

router = APIRouter()


@router.get("")
async def list_projects(
    db: UserStoreSession,
    include_inactive: bool = False,
) -> DataResponse[list[ProjectResponse]]:
    """List projects newest first.

    Inactive projects are hidden unless ``include_inactive`` is set.
    """
    projects = await ProjectService(db).list_projects(
        include_inactive=include_inactive
    )
    return DataResponse(data=[ProjectResponse.from_stats(p) for p in projects])


@router.get("/{project_id}")
async def get_project(
    project_id: uuid.UUID,
    db: UserStoreSession,
) -> DataResponse[ProjectResponse]:
    """Get one project.

    Raises:
        NotFoundError: If the project does not exist.
    """
    project = await ProjectService(db).get_project(project_id)
    if project is None:
        raise NotFoundError("Project", str(project_id))
    return DataResponse(data=ProjectResponse.from_stats(project))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_project(
    body: CreateProjectRequest,
    db: UserStoreSession,
) -> DataResponse[ProjectResponse]:
    """Create a project."""
    project = await ProjectService(db).create_project(**body.model_dump())
    return DataResponse(data=ProjectResponse.from_stats(project))


@router.patch("/{project_id}")
async def update_project(
    project_id: uuid.UUID,
    body: UpdateProjectRequest,
    db: UserStoreSession,
) -> DataResponse[ProjectResponse]:
    """Update the fields present in the body.

    Raises:
        NotFoundError: If the project does not exist.
    """
    fields = body.model_dump(exclude_unset=True)
    project = await ProjectService(db).update_project(project_id, **fields)
    if project is None:
        raise NotFoundError("Project", str(project_id))
    return DataResponse(data=ProjectResponse.from_stats(project))


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(
    project_id: uuid.UUID,
    db: UserStoreSession,
) -> Response:
    """Delete a project and all of its time entries.

    Raises:
        NotFoundError: If the project does not exist.
    """
    deleted = await ProjectService(db).delete_project(project_id)
    if not deleted:
        raise NotFoundError("Project", str(project_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
