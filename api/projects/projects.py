from typing import Annotated

from fastapi import Query

from shoreline_server.api.dependencies import AdminUser, MediaLibrary, ProjectID
from shoreline_server.api.responses import EmptyResponse, ResponseFactory
from shoreline_server.projects.models import (
    ProjectListModel,
    ProjectModel,
    ProjectPatchModel,
    ProjectPostModel,
)
from shoreline_server.projects.projects import (
    create_project,
    delete_project,
    get_project,
    get_project_years,
    list_projects,
    update_project,
)

from .router import router


@router.get("")
async def get_projects(
    tag: Annotated[
        str | None,
        Query(description="Tag name, or 'none' for projects without tags"),
    ] = None,
    featured: Annotated[str | None, Query(description="'true' or 'false'")] = None,
    year: Annotated[str | None, Query(description="Four digit year")] = None,
    limit: Annotated[
        str | None,
        Query(description="Page size (max 100). Returns a page object when set."),
    ] = None,
    offset: Annotated[
        str | None,
        Query(description="Number of skipped projects"),
    ] = None,
) -> list[ProjectModel] | ProjectListModel:
    """List projects, newest first"""
    return await list_projects(
        tag=tag,
        featured=featured,
        year=year,
        limit=limit,
        offset=offset,
    )


@router.get("/years")
async def get_years() -> list[int]:
    """List years with at least one project, newest first"""
    return await get_project_years()


@router.post("", status_code=201, responses={400: ResponseFactory.error(400)})
async def post_project(user: AdminUser, payload: ProjectPostModel) -> ProjectModel:
    """Create a new project.

    Images are uploaded by the browser to the media library first
    (see /api/cloudinary-config) and passed here as `uploadedImages`.
    """
    _ = user
    return await create_project(payload)


@router.get("/{project_id}", responses={404: ResponseFactory.error(404)})
async def get_single_project(project_id: ProjectID) -> ProjectModel:
    return await get_project(project_id)


@router.patch("/{project_id}")
async def patch_project(
    user: AdminUser,
    media: MediaLibrary,
    project_id: ProjectID,
    payload: ProjectPatchModel,
) -> ProjectModel:
    """Update a project.

    Existing images not listed in `keepPublicIds` are deleted
    from the media library.
    """
    _ = user
    return await update_project(project_id, payload, media)


@router.delete("/{project_id}", status_code=204)
async def remove_project(
    user: AdminUser,
    media: MediaLibrary,
    project_id: ProjectID,
) -> EmptyResponse:
    """Delete a project and its images"""
    _ = user
    await delete_project(project_id, media)
    return EmptyResponse()
