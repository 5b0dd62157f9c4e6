import asyncio

from shoreline_server.background.background_worker import BackgroundWorker
from shoreline_server.config import shorelineconfig
from shoreline_server.exceptions import (
    ServerMisconfiguredException,
    ServiceUnavailableException,
)
from shoreline_server.logging import logger
from shoreline_server.media.cloudinary import CloudinaryClient
from shoreline_server.media.reconciler import cleanup_orphaned_folders
from shoreline_server.projects.projects import get_known_media_folders


class MediaCleaner(BackgroundWorker):
    """Periodically delete orphaned project folders from the media library.

    This is an alternative to calling the cleanup endpoint
    from an external scheduler. Disabled unless
    `media_cleanup_interval` is set.
    """

    @property
    def enabled(self) -> bool:
        return shorelineconfig.media_cleanup_interval > 0

    async def run_once(self) -> None:
        try:
            media = CloudinaryClient.from_config()
        except ServerMisconfiguredException as e:
            logger.warning(f"Skipping media cleanup: {e.detail}")
            return

        try:
            result = await cleanup_orphaned_folders(media, get_known_media_folders)
        except ServiceUnavailableException as e:
            logger.warning(f"Media cleanup failed: {e.detail}")
            return

        if result.deleted or result.failed:
            logger.info(result.message)

    async def run(self):
        # Let the server settle down first
        await asyncio.sleep(60)
        while True:
            await self.run_once()
            await asyncio.sleep(shorelineconfig.media_cleanup_interval)


media_cleaner = MediaCleaner()
