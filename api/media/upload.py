"""Signed parameters for direct browser uploads.

The admin UI uploads images straight to the media library (with real
progress reporting) and only sends the resulting public ids to the
project endpoints. The upload has to be signed by the server.
"""

from datetime import UTC, date, datetime
from typing import Annotated, Literal

from fastapi import Query

from shoreline_server.api.dependencies import AdminUser, MediaLibrary
from shoreline_server.api.responses import ResponseFactory
from shoreline_server.exceptions import BadRequestException
from shoreline_server.media.cloudinary import SignedUploadParams
from shoreline_server.media.folders import (
    LANDING_FOLDER,
    folder_from_datetime,
    generate_project_folder,
    is_reusable_folder,
)
from shoreline_server.projects.projects import (
    get_project_media_folder,
    get_used_media_folders,
    resolve_date_folder,
)
from shoreline_server.types import ENTITY_ID_REGEX

from .router import router


async def resolve_upload_folder(
    purpose: str | None = None,
    folder: str | None = None,
    project_id: str | None = None,
    year: int | None = None,
    month: int | None = None,
    day: int | None = None,
) -> str:
    """Pick the folder the browser uploads to.

    In order of precedence:

    - an existing upload folder passed back by the client
    - the landing page folder
    - the folder of an edited project
    - a free folder on an explicit project date
    - a new folder named after the current time
    """
    if folder and is_reusable_folder(folder):
        return folder.strip()

    if purpose == "landing":
        return LANDING_FOLDER

    if project_id:
        if project_folder := await get_project_media_folder(project_id):
            return project_folder

    elif year is not None and month is not None:
        try:
            project_date = date(year, month, day or 1)
        except ValueError:
            raise BadRequestException("Invalid project date")
        if project_date > datetime.now(UTC).date():
            raise BadRequestException("Project date cannot be in the future")
        result, _ = await resolve_date_folder(project_date)
        return result

    now = datetime.now(UTC)
    used = await get_used_media_folders(folder_from_datetime(now))
    return generate_project_folder(now, used)


@router.get(
    "/cloudinary-config",
    responses={400: ResponseFactory.error(400)},
)
async def get_upload_config(
    user: AdminUser,
    media: MediaLibrary,
    purpose: Annotated[Literal["landing"] | None, Query()] = None,
    folder: Annotated[
        str | None,
        Query(description="Upload folder returned by a previous call"),
    ] = None,
    project_id: Annotated[
        str | None,
        Query(alias="projectId", pattern=ENTITY_ID_REGEX),
    ] = None,
    year: Annotated[int | None, Query(ge=1970)] = None,
    month: Annotated[int | None, Query(ge=1, le=12)] = None,
    day: Annotated[int | None, Query(ge=1, le=31)] = None,
) -> SignedUploadParams:
    """Return signed upload parameters.

    Uploads of one project go to one folder. Pass `folder` to keep
    adding images to the folder of a previous call, `projectId` when
    editing a project, or `year`/`month`/`day` to upload to a folder
    of an explicit project date.
    """
    _ = user
    upload_folder = await resolve_upload_folder(
        purpose=purpose,
        folder=folder,
        project_id=project_id,
        year=year,
        month=month,
        day=day,
    )
    return media.signed_upload_params(upload_folder)
