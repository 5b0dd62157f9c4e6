from shoreline_server.api.dependencies import CleanupCaller, KnownFolders, MediaLibrary
from shoreline_server.logging import logger
from shoreline_server.media.reconciler import (
    ORPHANED_FOLDER_AGE,
    cleanup_orphaned_folders,
)
from shoreline_server.types import Field, OPModel

from .router import router


class CleanupResponseModel(OPModel):
    ok: bool = Field(True, title="Cleanup finished")
    deleted: list[str] = Field(
        default_factory=list,
        title="Deleted folders",
        examples=[["projects/20260213-214530"]],
    )
    failed: list[str] = Field(
        default_factory=list,
        title="Folders which failed to delete",
        description="They will be retried by the next cleanup",
    )
    message: str = Field(..., examples=["Deleted 1 orphaned folder(s)."])


@router.get("/cloudinary-cleanup")
async def cleanup_media_folders(
    caller: CleanupCaller,
    load_known_folders: KnownFolders,
    media: MediaLibrary,
) -> CleanupResponseModel:
    """Delete orphaned project folders from the media library.

    A folder is orphaned when no project references it, typically after
    the admin uploaded images and closed the page without saving the
    project. Only folders whose oldest asset is older than one hour
    are deleted.

    Requires an administrator session or the scheduler secret
    (`Authorization: Bearer <SHORELINE_CRON_SECRET>`).
    """

    logger.info(f"Media cleanup requested by {caller}")
    result = await cleanup_orphaned_folders(
        media,
        load_known_folders,
        age_threshold=ORPHANED_FOLDER_AGE,
    )
    logger.info(result.message)

    return CleanupResponseModel(
        ok=True,
        deleted=result.deleted,
        failed=result.failed,
        message=result.message,
    )
