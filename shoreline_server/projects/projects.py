import asyncio
import re
from collections import defaultdict
from datetime import UTC, date, datetime, time, timedelta
from typing import Any

from shoreline_server.exceptions import (
    BadRequestException,
    DeleteFailedException,
    NotFoundException,
    ServiceUnavailableException,
    ShorelineException,
    StoreUnavailableException,
)
from shoreline_server.helpers.tags import set_project_tags
from shoreline_server.lib.postgres import Connection, Postgres
from shoreline_server.logging import logger
from shoreline_server.media.cloudinary import display_url
from shoreline_server.media.folders import (
    date_to_folder_prefix,
    folder_from_datetime,
    folder_of_public_id,
    known_folder_set,
    next_folder_for_date_prefix,
    parse_folder_created_at,
)
from shoreline_server.projects.models import (
    ProjectDateFields,
    ProjectImageModel,
    ProjectListModel,
    ProjectModel,
    ProjectPatchModel,
    ProjectPostModel,
)
from shoreline_server.utils import create_uuid

MAX_PAGE_SIZE = 100

PROJECT_QUERY = """
    SELECT
        p.*,
        COALESCE(
            (
                SELECT array_agg(t.name ORDER BY t.name)
                FROM project_tags pt
                JOIN tags t ON t.id = pt.tag_id
                WHERE pt.project_id = p.id
            ),
            '{}'
        ) AS tags
    FROM projects p
"""


def day_bounds(dt: datetime) -> tuple[datetime, datetime]:
    """Return the start and the end of the (UTC) day of a timestamp"""
    start = datetime.combine(dt.astimezone(UTC).date(), time(0), tzinfo=UTC)
    return start, start + timedelta(days=1)


def clamp_index(index: int, length: int) -> int:
    return min(max(0, index), max(0, length - 1))


def explicit_date(payload: ProjectDateFields) -> date | None:
    """Return the project date picked by the admin, if any.

    Raises BadRequestException for impossible or future dates.
    """
    if not payload.has_explicit_date:
        return None
    assert payload.project_date_year is not None
    assert payload.project_date_month is not None
    try:
        result = date(
            payload.project_date_year,
            payload.project_date_month,
            payload.project_date_day or 1,
        )
    except ValueError:
        raise BadRequestException("Invalid project date")
    if result > datetime.now(UTC).date():
        raise BadRequestException("Project date cannot be in the future")
    return result


#
# Reading
#


def _project_from_record(
    record: Any,
    images: list[ProjectImageModel] | None = None,
    for_display: bool = False,
) -> ProjectModel:
    data = dict(record)
    data["tags"] = list(data.get("tags") or [])
    data["images"] = images or []
    if for_display:
        data["image_url"] = display_url(data.get("image_url"))
        for image in data["images"]:
            image.image_url = display_url(image.image_url) or image.image_url
    return ProjectModel(**data)


async def _get_images(project_ids: list[str]) -> dict[str, list[ProjectImageModel]]:
    result: dict[str, list[ProjectImageModel]] = defaultdict(list)
    if not project_ids:
        return result
    res = await Postgres.fetch(
        """
        SELECT id, project_id, image_url, image_public_id, sort_order
        FROM project_images
        WHERE project_id = ANY($1::text[])
        ORDER BY sort_order ASC
        """,
        project_ids,
    )
    for row in res:
        result[row["project_id"]].append(
            ProjectImageModel(
                id=row["id"],
                image_url=row["image_url"],
                image_public_id=row["image_public_id"],
                sort_order=row["sort_order"],
            )
        )
    return result


async def list_projects(
    tag: str | None = None,
    featured: str | None = None,
    year: str | None = None,
    limit: str | None = None,
    offset: str | None = None,
) -> list[ProjectModel] | ProjectListModel:
    """List projects, newest first.

    Query values are taken as they come from the query string.
    Values which do not parse are ignored. When `limit` is set,
    a page with a `has_more` flag is returned instead of a list.
    """
    conditions: list[str] = []
    args: list[Any] = []

    if tag and tag.strip():
        if tag.strip().lower() == "none":
            conditions.append(
                "NOT EXISTS (SELECT 1 FROM project_tags pt WHERE pt.project_id = p.id)"
            )
        else:
            args.append(tag.strip())
            conditions.append(
                f"""EXISTS (
                    SELECT 1 FROM project_tags pt
                    JOIN tags t ON t.id = pt.tag_id
                    WHERE pt.project_id = p.id AND lower(t.name) = lower(${len(args)})
                )"""
            )

    if featured:
        args.append(featured == "true")
        conditions.append(f"p.featured = ${len(args)}")

    if year and re.fullmatch(r"\d{4}", year.strip()):
        y = int(year.strip())
        args.append(datetime(y, 1, 1, tzinfo=UTC))
        conditions.append(f"p.created_at >= ${len(args)}")
        args.append(datetime(y + 1, 1, 1, tzinfo=UTC))
        conditions.append(f"p.created_at < ${len(args)}")

    page_size: int | None = None
    if limit and re.fullmatch(r"\d+", limit):
        page_size = min(int(limit), MAX_PAGE_SIZE)
    skip = int(offset) if offset and re.fullmatch(r"\d+", offset) else 0

    query = PROJECT_QUERY
    if conditions:
        query += " WHERE " + " AND ".join(conditions)
    query += " ORDER BY p.created_at DESC, p.display_order ASC"
    if page_size is not None:
        # one extra row tells whether there is another page
        query += f" LIMIT {page_size + 1} OFFSET {skip}"

    records = await Postgres.fetch(query, *args)
    has_more = page_size is not None and len(records) > page_size
    if has_more:
        records = records[:page_size]

    images = await _get_images([r["id"] for r in records])
    projects = [
        _project_from_record(r, images.get(r["id"]), for_display=True)
        for r in records
    ]

    if page_size is not None:
        return ProjectListModel(projects=projects, has_more=has_more)
    return projects


async def get_project(project_id: str, for_display: bool = False) -> ProjectModel:
    record = await Postgres.fetchrow(f"{PROJECT_QUERY} WHERE p.id = $1", project_id)
    if record is None:
        raise NotFoundException("Project not found")
    images = await _get_images([project_id])
    return _project_from_record(record, images.get(project_id), for_display)


async def get_project_years() -> list[int]:
    res = await Postgres.fetch(
        """
        SELECT DISTINCT extract(year FROM created_at AT TIME ZONE 'UTC')::int AS year
        FROM projects
        ORDER BY year DESC
        """
    )
    return [row["year"] for row in res]


#
# Media folders
#


async def get_known_media_folders() -> set[str]:
    """Return media folders referenced by projects.

    Raises StoreUnavailableException when the database cannot be read.
    """
    try:
        res = await Postgres.fetch(
            "SELECT media_folder FROM projects WHERE media_folder IS NOT NULL"
        )
    except (
        Postgres.PostgresError,
        Postgres.InterfaceError,
        OSError,
        asyncio.TimeoutError,
        ServiceUnavailableException,
    ) as e:
        logger.error(f"Unable to load project media folders: {e}")
        raise StoreUnavailableException("Unable to read projects") from e
    return known_folder_set(row["media_folder"] for row in res)


async def get_media_folders_with_prefix(
    prefix: str,
    exclude_project_id: str | None = None,
) -> list[str]:
    res = await Postgres.fetch(
        """
        SELECT media_folder FROM projects
        WHERE starts_with(media_folder, $1)
        AND ($2::text IS NULL OR id != $2)
        """,
        prefix,
        exclude_project_id,
    )
    return [row["media_folder"] for row in res]


async def is_media_folder_used(folder: str) -> bool:
    res = await Postgres.fetchrow(
        "SELECT id FROM projects WHERE media_folder = $1 LIMIT 1", folder
    )
    return res is not None


def effective_media_folder(media_folder: str | None, created_at: datetime) -> str:
    if media_folder:
        return media_folder
    return folder_from_datetime(created_at.astimezone(UTC))


async def get_project_media_folder(project_id: str) -> str | None:
    """Return the media folder of a project.

    Older projects have no folder stored, their folder is derived
    from the project timestamp. Return None for unknown projects.
    """
    res = await Postgres.fetchrow(
        "SELECT media_folder, created_at FROM projects WHERE id = $1",
        project_id,
    )
    if res is None:
        return None
    return effective_media_folder(res["media_folder"], res["created_at"])


async def get_used_media_folders(base: str) -> set[str]:
    """Return used folders equal to `base` or `base` with a numeric suffix"""
    res = await Postgres.fetch(
        "SELECT media_folder FROM projects WHERE media_folder = $1 "
        "OR starts_with(media_folder, $1 || '-')",
        base,
    )
    return {row["media_folder"] for row in res}


async def resolve_date_folder(
    project_date: date,
    exclude_project_id: str | None = None,
) -> tuple[str, datetime]:
    """Return a free folder for the given day and its timestamp"""
    prefix = date_to_folder_prefix(
        project_date.year, project_date.month, project_date.day
    )
    existing = await get_media_folders_with_prefix(prefix, exclude_project_id)
    folder = next_folder_for_date_prefix(prefix, existing)
    created_at = parse_folder_created_at(folder)
    assert created_at is not None
    return folder, created_at.replace(tzinfo=UTC)


#
# Ordering
#


async def _next_display_order(conn: Connection, created_at: datetime) -> int:
    start, end = day_bounds(created_at)
    value = await conn.fetchval(
        """
        SELECT max(display_order) FROM projects
        WHERE created_at >= $1 AND created_at < $2
        """,
        start,
        end,
    )
    return 0 if value is None else value + 1


async def _make_room_in_day(
    conn: Connection,
    project_id: str,
    created_at: datetime,
) -> int:
    """Find the display order of a project moved to a new date.

    Projects of that day listed after the moved one are shifted
    down by one. Return the display order of the moved project.
    """
    start, end = day_bounds(created_at)
    insert_index = await conn.fetchval(
        """
        SELECT count(*) FROM projects
        WHERE id != $1 AND created_at >= $2 AND created_at < $3
        AND created_at > $4
        """,
        project_id,
        start,
        end,
        created_at,
    )
    await conn.execute(
        """
        UPDATE projects SET display_order = display_order + 1
        WHERE id != $1 AND created_at >= $2 AND created_at < $3
        AND display_order >= $4
        """,
        project_id,
        start,
        end,
        insert_index,
    )
    return insert_index


def order_timestamps(
    projects: list[tuple[str, datetime]],
) -> list[tuple[str, datetime]]:
    """Assign new timestamps so projects are listed in the given order.

    Projects are grouped by day. Within a day the first project gets
    the latest timestamp (midnight + n-1 seconds), the last one gets
    midnight.
    """
    by_day: dict[date, list[str]] = {}
    for project_id, created_at in projects:
        day = created_at.astimezone(UTC).date()
        by_day.setdefault(day, []).append(project_id)

    result: list[tuple[str, datetime]] = []
    for day, ids in by_day.items():
        midnight = datetime.combine(day, time(0), tzinfo=UTC)
        count = len(ids)
        for i, project_id in enumerate(ids):
            result.append((project_id, midnight + timedelta(seconds=count - 1 - i)))
    return result


async def reorder_projects(ordered_ids: list[str]) -> None:
    ids = [i.strip() for i in ordered_ids if isinstance(i, str) and i.strip()]
    if not ids:
        raise BadRequestException(
            "orderedIds must contain at least one valid project ID"
        )

    async with Postgres.transaction() as conn:
        res = await conn.fetch(
            "SELECT id, created_at FROM projects WHERE id = ANY($1::text[])",
            ids,
        )
        created = {row["id"]: row["created_at"] for row in res}
        ordered = [(i, created[i]) for i in dict.fromkeys(ids) if i in created]
        updates = order_timestamps(ordered)
        await conn.executemany(
            "UPDATE projects SET created_at = $2, updated_at = now() WHERE id = $1",
            updates,
        )
    logger.info(f"Reordered {len(updates)} projects")


#
# Writing
#


async def _insert_images(
    conn: Connection,
    project_id: str,
    images: list[tuple[str, str]],
    start: int = 0,
) -> None:
    await conn.executemany(
        """
        INSERT INTO project_images
        (id, project_id, image_url, image_public_id, sort_order)
        VALUES ($1, $2, $3, $4, $5)
        """,
        [
            (create_uuid(), project_id, url, public_id, start + i)
            for i, (url, public_id) in enumerate(images)
        ],
    )


async def create_project(payload: ProjectPostModel) -> ProjectModel:
    title = payload.title.strip()
    if not title:
        raise BadRequestException("Title is required")

    if not payload.uploaded_images:
        raise BadRequestException("At least one image is required")

    images = [(i.secure_url, i.public_id) for i in payload.uploaded_images]
    thumbnail_url, thumbnail_id = images[
        clamp_index(payload.thumbnail_index, len(images))
    ]

    media_folder = payload.media_folder.strip() if payload.media_folder else None
    if not media_folder:
        # the folder the browser uploaded the images to
        media_folder = next(
            filter(None, (folder_of_public_id(pid) for _, pid in images)), None
        )
    if not media_folder:
        raise BadRequestException("Upload folder is required")
    date_is_month_only = bool(payload.date_is_month_only)

    parsed = parse_folder_created_at(media_folder)
    created_at: datetime | None = None
    if project_date := explicit_date(payload):
        if parsed and parsed.date() == project_date:
            # folder picked for this date by the upload config
            created_at = parsed.replace(tzinfo=UTC)
        else:
            created_at = datetime.combine(project_date, time(12), tzinfo=UTC)
    elif parsed:
        created_at = parsed.replace(tzinfo=UTC)
    else:
        date_is_month_only = False
    created_at = created_at or datetime.now(UTC)

    description = (payload.description or "").strip() or None
    project_id = create_uuid()

    async with Postgres.transaction() as conn:
        display_order = await _next_display_order(conn, created_at)
        await conn.execute(
            """
            INSERT INTO projects (
                id, title, description, featured,
                image_url, image_public_id, media_folder,
                display_order, date_is_month_only,
                created_at, updated_at
            )
            VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, now())
            """,
            project_id,
            title,
            description,
            payload.featured,
            thumbnail_url,
            thumbnail_id,
            media_folder,
            display_order,
            date_is_month_only,
            created_at,
        )
        await _insert_images(conn, project_id, images)
        await set_project_tags(conn, project_id, payload.tags)

    logger.info(f"Created project {title} ({project_id})")
    return await get_project(project_id)


async def update_project(
    project_id: str,
    payload: ProjectPatchModel,
    media: Any,
) -> ProjectModel:
    """Update a project.

    Images not listed in `keep_public_ids` are deleted from the media
    library before the database is touched. If that fails, the project
    stays unchanged.
    """
    existing = await get_project(project_id)
    # stored even when derived, uploads of the edit went there
    media_folder = effective_media_folder(existing.media_folder, existing.created_at)

    title = payload.title.strip()
    if not title:
        raise BadRequestException("Title is required")

    new_created_at: datetime | None = None
    date_is_month_only = existing.date_is_month_only
    if project_date := explicit_date(payload):
        _, new_created_at = await resolve_date_folder(project_date, project_id)
        if payload.date_is_month_only is not None:
            date_is_month_only = payload.date_is_month_only
        else:
            date_is_month_only = payload.project_date_day is None

    if payload.keep_public_ids is None:
        kept = list(existing.images)
    else:
        keep = set(payload.keep_public_ids)
        kept = [i for i in existing.images if i.image_public_id in keep]
    removed = [i for i in existing.images if i not in kept]

    images = [(i.image_url, i.image_public_id) for i in kept]
    images += [(i.secure_url, i.public_id) for i in payload.uploaded_images]
    if not images:
        raise BadRequestException("At least one image is required")

    to_delete = {i.image_public_id for i in removed}
    if existing.image_public_id and existing.image_public_id not in {
        public_id for _, public_id in images
    }:
        to_delete.add(existing.image_public_id)

    for public_id in sorted(to_delete):
        try:
            await media.delete_image(public_id)
        except DeleteFailedException as e:
            logger.error(f"Unable to delete image {public_id}: {e.detail}")
            raise ShorelineException("Failed to delete existing image") from e

    thumbnail_url, thumbnail_id = images[
        clamp_index(payload.thumbnail_index, len(images))
    ]
    description = (payload.description or "").strip() or None

    async with Postgres.transaction() as conn:
        if new_created_at is not None:
            display_order = await _make_room_in_day(conn, project_id, new_created_at)
        else:
            display_order = existing.display_order
            new_created_at = existing.created_at

        await conn.execute(
            """
            UPDATE projects SET
                title = $2,
                description = $3,
                featured = $4,
                image_url = $5,
                image_public_id = $6,
                display_order = $7,
                date_is_month_only = $8,
                created_at = $9,
                media_folder = $10,
                updated_at = now()
            WHERE id = $1
            """,
            project_id,
            title,
            description,
            payload.featured,
            thumbnail_url,
            thumbnail_id,
            display_order,
            date_is_month_only,
            new_created_at,
            media_folder,
        )
        await conn.execute(
            "DELETE FROM project_images WHERE project_id = $1", project_id
        )
        await _insert_images(conn, project_id, images)
        await set_project_tags(conn, project_id, payload.tags)

    logger.info(f"Updated project {title} ({project_id})")
    return await get_project(project_id)


async def delete_project(project_id: str, media: Any) -> None:
    """Delete a project together with its images.

    A failure to delete an image aborts the operation. The media
    folder is removed on a best-effort basis.
    """
    existing = await get_project(project_id)

    public_ids = {i.image_public_id for i in existing.images}
    if existing.image_public_id:
        public_ids.add(existing.image_public_id)

    for public_id in sorted(public_ids):
        try:
            await media.delete_image(public_id)
        except DeleteFailedException as e:
            logger.error(f"Unable to delete image {public_id}: {e.detail}")
            raise ShorelineException("Failed to delete project image") from e

    if existing.media_folder:
        try:
            await media.delete_folder(existing.media_folder)
        except DeleteFailedException as e:
            # the orphan cleanup will retry
            logger.warning(
                f"Unable to delete media folder {existing.media_folder}: {e.detail}"
            )

    await Postgres.execute("DELETE FROM projects WHERE id = $1", project_id)
    logger.info(f"Deleted project {existing.title} ({project_id})")
