"""Orphaned media folder cleanup.

Images of a new project are uploaded straight from the browser to the media
library before the project itself is saved. When the admin closes the page
instead of saving, the upload folder stays in the library with nothing
pointing to it. The reconciler finds such folders and deletes them.

A folder is deleted only when

- no project references it, and
- its oldest asset is older than the age threshold (or it has no assets).

The threshold keeps folders of uploads that are still in progress.
"""

import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable, Iterable
from datetime import UTC, datetime, timedelta
from typing import Protocol

from shoreline_server.exceptions import (
    DeleteFailedException,
    RemoteUnavailableException,
)
from shoreline_server.logging import log_traceback, logger
from shoreline_server.media.folders import PROJECTS_FOLDER
from shoreline_server.types import OPModel

ORPHANED_FOLDER_AGE = timedelta(hours=1)

Clock = Callable[[], datetime]


class MediaStore(Protocol):
    def list_folders(self, root: str) -> AsyncIterator[str]: ...

    async def get_oldest_asset_time(self, folder: str) -> datetime | None: ...

    async def delete_folder(self, folder: str) -> None: ...


def utc_now() -> datetime:
    return datetime.now(UTC)


class OrphanReconciler:
    """Delete media folders no project references.

    Folder lookups run concurrently, at most `concurrency` at a time.
    Deletions run one after another.
    """

    def __init__(
        self,
        media: MediaStore,
        clock: Clock = utc_now,
        concurrency: int = 4,
    ) -> None:
        self.media = media
        self.clock = clock
        self.concurrency = max(1, concurrency)
        self.failed: list[str] = []

    async def list_remote_folders(self) -> list[str]:
        """Return all project folders of the media library (every page)."""
        folders: dict[str, None] = {}
        async for folder in self.media.list_folders(PROJECTS_FOLDER):
            folders[folder] = None
        return list(folders)

    async def _folder_age(
        self,
        folder: str,
        now: datetime,
        semaphore: asyncio.Semaphore,
    ) -> timedelta | None:
        async with semaphore:
            oldest = await self.media.get_oldest_asset_time(folder)
        if oldest is None:
            return None
        if oldest.tzinfo is None:
            oldest = oldest.replace(tzinfo=UTC)
        return now - oldest

    async def find_orphans(
        self,
        known: Iterable[str],
        age_threshold: timedelta,
    ) -> list[str]:
        """Return folders which are eligible for deletion.

        Raises RemoteUnavailableException if the library cannot be listed
        or any folder lookup fails. Nothing is returned in that case.
        """
        known_folders = frozenset(known)
        remote = await self.list_remote_folders()
        candidates = [folder for folder in remote if folder not in known_folders]
        if not candidates:
            return []

        now = self.clock()
        if now.tzinfo is None:
            now = now.replace(tzinfo=UTC)

        semaphore = asyncio.Semaphore(self.concurrency)
        tasks = [
            asyncio.create_task(self._folder_age(folder, now, semaphore))
            for folder in candidates
        ]
        try:
            ages = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            raise

        result = []
        for folder, age in zip(candidates, ages, strict=True):
            if age is None:
                logger.debug(f"Orphaned folder {folder} is empty")
                result.append(folder)
            elif age > age_threshold:
                logger.debug(f"Orphaned folder {folder} is {age} old")
                result.append(folder)
            else:
                logger.debug(f"Keeping recent folder {folder} ({age} old)")
        return result

    async def reconcile(
        self,
        known: Iterable[str],
        age_threshold: timedelta = ORPHANED_FOLDER_AGE,
        dry_run: bool = False,
    ) -> list[str]:
        """Delete orphaned folders and return the deleted ones.

        Folders which failed to delete are not returned,
        they are listed in `self.failed` instead.
        With `dry_run`, return the folders which would be deleted.
        """
        self.failed = []
        targets = await self.find_orphans(known, age_threshold)
        if dry_run or not targets:
            return targets

        deleted: list[str] = []
        for folder in targets:
            # A deletion which already started is allowed to finish
            # even if the run is cancelled meanwhile
            task = asyncio.create_task(self.media.delete_folder(folder))
            try:
                await asyncio.shield(task)
            except (DeleteFailedException, RemoteUnavailableException) as e:
                logger.error(f"Unable to delete orphaned folder {folder}: {e.detail}")
                self.failed.append(folder)
                continue
            except Exception:
                log_traceback(f"Unable to delete orphaned folder {folder}")
                self.failed.append(folder)
                continue
            logger.info(f"Deleted orphaned media folder {folder}")
            deleted.append(folder)
        return deleted


class CleanupResult(OPModel):
    deleted: list[str]
    failed: list[str]
    dry_run: bool = False

    @property
    def message(self) -> str:
        if self.dry_run:
            return f"Found {len(self.deleted)} orphaned folder(s)."
        if self.deleted:
            message = f"Deleted {len(self.deleted)} orphaned folder(s)."
        else:
            message = "No orphaned folders to delete."
        if self.failed:
            message += f" Failed to delete {len(self.failed)} folder(s)."
        return message


async def cleanup_orphaned_folders(
    media: MediaStore,
    load_known_folders: Callable[[], Awaitable[set[str]]],
    age_threshold: timedelta = ORPHANED_FOLDER_AGE,
    clock: Clock = utc_now,
    dry_run: bool = False,
) -> CleanupResult:
    """Load the known folders and run the reconciler.

    Known folders are loaded first, so when the database is not
    available, the media library is not contacted at all.
    """
    known = await load_known_folders()
    reconciler = OrphanReconciler(media, clock=clock)
    deleted = await reconciler.reconcile(known, age_threshold, dry_run=dry_run)
    return CleanupResult(deleted=deleted, failed=reconciler.failed, dry_run=dry_run)
