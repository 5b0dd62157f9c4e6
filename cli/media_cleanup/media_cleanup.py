import typer

from shoreline_server.cli import app
from shoreline_server.exceptions import ShorelineException
from shoreline_server.lib.postgres import Postgres
from shoreline_server.logging import logger
from shoreline_server.media.cloudinary import CloudinaryClient
from shoreline_server.media.reconciler import cleanup_orphaned_folders
from shoreline_server.projects.projects import get_known_media_folders


@app.command()
async def cleanup_media(dry_run: bool = False) -> None:
    """Delete media folders no project refers to.

    With --dry-run, only list the folders which would be deleted.
    """

    await Postgres.connect()
    try:
        media = CloudinaryClient.from_config()
        result = await cleanup_orphaned_folders(
            media,
            get_known_media_folders,
            dry_run=dry_run,
        )
    except ShorelineException as e:
        logger.error(f"Media cleanup failed: {e.detail}")
        raise typer.Exit(1)
    finally:
        await Postgres.shutdown()

    for folder in result.deleted:
        logger.info(f"{'Orphaned' if dry_run else 'Deleted'}: {folder}")
    for folder in result.failed:
        logger.warning(f"Failed to delete: {folder}")
    logger.info(result.message)

    if result.failed:
        raise typer.Exit(1)
