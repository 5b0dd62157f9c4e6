"""Request dependencies."""

from collections.abc import AsyncGenerator, Awaitable, Callable
from typing import Annotated

import httpx
from fastapi import Depends, Path, Request

from shoreline_server.auth.models import UserModel
from shoreline_server.auth.scheduler import is_scheduler_authorized
from shoreline_server.config import shorelineconfig
from shoreline_server.exceptions import (
    ForbiddenException,
    RemoteUnavailableException,
    ServerMisconfiguredException,
    UnauthorizedException,
)
from shoreline_server.logging import logger
from shoreline_server.media.cloudinary import CloudinaryClient
from shoreline_server.projects.projects import get_known_media_folders
from shoreline_server.types import ENTITY_ID_EXAMPLE, ENTITY_ID_REGEX

#
# Users
#


async def dep_current_user(request: Request) -> UserModel:
    """Return the currently logged-in user.

    The user is resolved from the access token by the auth middleware.
    Raise an `UnauthorizedException` if there is no valid session.
    """
    user = getattr(request.state, "user", None)
    if not user:
        reason = getattr(request.state, "unauthorized_reason", None)
        raise UnauthorizedException(reason or "Unauthorized")
    return user


CurrentUser = Annotated[UserModel, Depends(dep_current_user)]


async def dep_current_user_optional(request: Request) -> UserModel | None:
    try:
        return await dep_current_user(request=request)
    except UnauthorizedException:
        return None


CurrentUserOptional = Annotated[UserModel | None, Depends(dep_current_user_optional)]


async def dep_admin_user(request: Request) -> UserModel:
    """Return the current user if it is an administrator.

    401 without a session, 403 for other users.
    """
    user = await dep_current_user(request)
    if not user.is_admin:
        raise ForbiddenException("Administrator access required")
    return user


AdminUser = Annotated[UserModel, Depends(dep_admin_user)]


async def dep_cleanup_caller(request: Request) -> str:
    """Authorize a media cleanup request.

    Accept either the scheduler shared secret as a bearer token
    or an administrator session. Return a name of the caller
    for logging.
    """
    if is_scheduler_authorized(
        request.headers.get("Authorization"),
        shorelineconfig.cron_secret,
        shorelineconfig.cron_secret_min_length,
    ):
        return "scheduler"

    try:
        user = await dep_admin_user(request)
    except (UnauthorizedException, ForbiddenException) as e:
        logger.warning(f"Rejected media cleanup request: {e.detail}")
        raise UnauthorizedException(
            "Administrator session or scheduler token required"
        ) from e
    return user.email


CleanupCaller = Annotated[str, Depends(dep_cleanup_caller)]


#
# External services
#


async def dep_http_client() -> AsyncGenerator[httpx.AsyncClient, None]:
    async with httpx.AsyncClient(timeout=shorelineconfig.http_timeout) as client:
        yield client


HttpClient = Annotated[httpx.AsyncClient, Depends(dep_http_client)]


async def dep_media_library() -> CloudinaryClient:
    try:
        return CloudinaryClient.from_config()
    except ServerMisconfiguredException as e:
        logger.error(e.detail)
        raise RemoteUnavailableException("Media library is not configured") from e


MediaLibrary = Annotated[CloudinaryClient, Depends(dep_media_library)]


KnownFoldersLoader = Callable[[], Awaitable[set[str]]]


async def dep_known_folders_loader() -> KnownFoldersLoader:
    """Return the function loading media folders referenced by projects"""
    return get_known_media_folders


KnownFolders = Annotated[KnownFoldersLoader, Depends(dep_known_folders_loader)]


#
# Path parameters
#


async def dep_project_id(
    project_id: str = Path(
        ...,
        title="Project ID",
        pattern=ENTITY_ID_REGEX,
        examples=[ENTITY_ID_EXAMPLE],
    ),
) -> str:
    """Validate and return a project id specified in an endpoint path."""
    return project_id


ProjectID = Annotated[str, Depends(dep_project_id)]


async def dep_tag_id(
    tag_id: str = Path(
        ...,
        title="Tag ID",
        pattern=ENTITY_ID_REGEX,
        examples=[ENTITY_ID_EXAMPLE],
    ),
) -> str:
    """Validate and return a tag id specified in an endpoint path."""
    return tag_id


TagID = Annotated[str, Depends(dep_tag_id)]
