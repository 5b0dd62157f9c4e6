from collections.abc import Iterable
from typing import Any

from shoreline_server.exceptions import (
    BadRequestException,
    ConflictException,
    NotFoundException,
)
from shoreline_server.lib.postgres import Connection, Postgres
from shoreline_server.types import OPModel
from shoreline_server.utils import create_uuid

MAX_TAG_SUGGESTIONS = 20


class TagModel(OPModel):
    id: str
    name: str
    project_count: int = 0


def normalize_tag_names(names: Iterable[Any]) -> list[str]:
    """Strip tag names and drop duplicates.

    Names are compared case-insensitively and the first
    occurrence wins. Empty and non-string values are skipped.
    """
    seen: set[str] = set()
    result: list[str] = []
    for name in names:
        if not isinstance(name, str):
            continue
        name = name.strip()
        if not name:
            continue
        key = name.lower()
        if key in seen:
            continue
        seen.add(key)
        result.append(name)
    return result


async def resolve_tag_names_to_ids(
    conn: Connection,
    names: Iterable[Any],
) -> list[str]:
    """Return ids of the given tags, creating missing ones.

    Ids are returned in the order of the (deduplicated) names.
    """
    wanted = normalize_tag_names(names)
    if not wanted:
        return []

    res = await conn.fetch(
        "SELECT id, name FROM tags WHERE lower(name) = ANY($1::text[])",
        [name.lower() for name in wanted],
    )
    ids_by_name = {row["name"].lower(): row["id"] for row in res}

    for name in wanted:
        key = name.lower()
        if key in ids_by_name:
            continue
        # concurrent requests may create the same tag
        row = await conn.fetchrow(
            """
            INSERT INTO tags (id, name) VALUES ($1, $2)
            ON CONFLICT ((lower(name))) DO UPDATE SET name = tags.name
            RETURNING id
            """,
            create_uuid(),
            name,
        )
        ids_by_name[key] = row["id"]

    return [ids_by_name[name.lower()] for name in wanted]


async def set_project_tags(
    conn: Connection,
    project_id: str,
    names: Iterable[Any],
) -> list[str]:
    """Replace tags of a project. Return the resolved tag ids."""
    tag_ids = await resolve_tag_names_to_ids(conn, names)
    await conn.execute("DELETE FROM project_tags WHERE project_id = $1", project_id)
    if tag_ids:
        await conn.executemany(
            "INSERT INTO project_tags (project_id, tag_id) VALUES ($1, $2)",
            [(project_id, tag_id) for tag_id in tag_ids],
        )
    return tag_ids


async def search_tag_names(query: str, limit: int = MAX_TAG_SUGGESTIONS) -> list[str]:
    query = query.strip()
    for char in ("\\", "%", "_"):
        query = query.replace(char, f"\\{char}")
    res = await Postgres.fetch(
        """
        SELECT name FROM tags
        WHERE name ILIKE '%' || $1 || '%'
        ORDER BY name ASC
        LIMIT $2
        """,
        query,
        limit,
    )
    return [row["name"] for row in res]


async def get_tag_names() -> list[str]:
    res = await Postgres.fetch("SELECT name FROM tags ORDER BY name ASC")
    return [row["name"] for row in res]


async def get_tags_with_counts() -> list[TagModel]:
    res = await Postgres.fetch(
        """
        SELECT t.id, t.name, count(pt.project_id) AS project_count
        FROM tags t
        LEFT JOIN project_tags pt ON pt.tag_id = t.id
        GROUP BY t.id, t.name
        ORDER BY t.name ASC
        """
    )
    return [TagModel(**dict(row)) for row in res]


async def rename_tag(tag_id: str, name: str) -> TagModel:
    name = name.strip()
    if not name:
        raise BadRequestException("Tag name is required")
    async with Postgres.transaction() as conn:
        existing = await conn.fetchrow(
            "SELECT id FROM tags WHERE lower(name) = lower($1) AND id != $2",
            name,
            tag_id,
        )
        if existing is not None:
            raise ConflictException(f"Tag {name} already exists")

        try:
            row = await conn.fetchrow(
                "UPDATE tags SET name = $1 WHERE id = $2 RETURNING id, name",
                name,
                tag_id,
            )
        except Postgres.UniqueViolationError:
            raise ConflictException(f"Tag {name} already exists")

        if row is None:
            raise NotFoundException("Tag not found")

        count = await conn.fetchval(
            "SELECT count(*) FROM project_tags WHERE tag_id = $1", tag_id
        )
    return TagModel(id=row["id"], name=row["name"], project_count=count)


async def delete_tag(tag_id: str) -> None:
    """Delete a tag. Project links are removed by the foreign key cascade."""
    res = await Postgres.execute("DELETE FROM tags WHERE id = $1", tag_id)
    if res == "DELETE 0":
        raise NotFoundException("Tag not found")
