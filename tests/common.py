from contextlib import asynccontextmanager
from datetime import UTC, datetime, timedelta

from shoreline_server.exceptions import (
    DeleteFailedException,
    NotFoundException,
    RemoteUnavailableException,
)
from shoreline_server.projects.models import ProjectImageModel, ProjectModel


def auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


NOW = datetime(2026, 2, 13, 21, 45, 30, tzinfo=UTC)


def ago(**kwargs) -> datetime:
    return NOW - timedelta(**kwargs)


def fixed_clock() -> datetime:
    return NOW


class FakeMediaLibrary:
    """In-memory media library.

    `pages` is a list of folder listing pages, `oldest` maps folders
    to the creation time of their oldest asset (missing = empty folder).
    """

    def __init__(
        self,
        pages: list[list[str]] | None = None,
        oldest: dict[str, datetime] | None = None,
        failing: set[str] | None = None,
        lookup_failing: set[str] | None = None,
        unavailable: bool = False,
    ):
        self.pages = pages or []
        self.oldest = oldest or {}
        self.failing = failing or set()
        self.lookup_failing = lookup_failing or set()
        self.unavailable = unavailable
        self.calls: list[tuple[str, str]] = []
        self.deleted: list[str] = []

    async def list_folders(self, root: str = "projects"):
        self.calls.append(("list", root))
        if self.unavailable:
            raise RemoteUnavailableException("Unable to reach the media library")
        for page in self.pages:
            for folder in page:
                yield folder

    async def get_oldest_asset_time(self, folder: str) -> datetime | None:
        self.calls.append(("oldest", folder))
        if folder in self.lookup_failing:
            raise RemoteUnavailableException("Media library returned an error (500)")
        return self.oldest.get(folder)

    async def delete_folder(self, folder: str) -> None:
        self.calls.append(("delete", folder))
        if folder in self.failing:
            raise DeleteFailedException(f"Unable to delete folder {folder}")
        self.deleted.append(folder)
        self.pages = [[f for f in page if f != folder] for page in self.pages]
        self.oldest.pop(folder, None)

    async def delete_image(self, public_id: str) -> None:
        self.calls.append(("delete_image", public_id))
        if public_id in self.failing:
            raise DeleteFailedException(f"Unable to delete image {public_id}")

    @property
    def delete_calls(self) -> list[str]:
        return [folder for op, folder in self.calls if op == "delete"]


class FakeConnection:
    def __init__(self, store: "FakeProjectStore"):
        self.store = store

    async def fetchval(self, query: str, *args):
        if "count(*)" in query:
            return 0
        return None

    async def execute(self, query: str, *args) -> str:
        query = " ".join(query.split())
        self.store.executed.append(query)
        projects = self.store.projects
        if query.startswith("INSERT INTO projects"):
            projects[args[0]] = {
                "id": args[0],
                "title": args[1],
                "media_folder": args[6],
                "date_is_month_only": args[8],
                "created_at": args[9],
                "images": [],
            }
        elif query.startswith("UPDATE projects SET title"):
            projects[args[0]].update(
                title=args[1],
                date_is_month_only=args[7],
                created_at=args[8],
                media_folder=args[9],
            )
        elif query.startswith("DELETE FROM project_images"):
            projects[args[0]]["images"] = []
        return "OK"

    async def executemany(self, query: str, args) -> None:
        query = " ".join(query.split())
        self.store.executed.append(query)
        if query.startswith("INSERT INTO project_images"):
            for _, project_id, url, public_id, sort_order in args:
                self.store.projects[project_id]["images"].append(
                    {
                        "id": f"{project_id}-{sort_order}",
                        "image_url": url,
                        "image_public_id": public_id,
                        "sort_order": sort_order,
                    }
                )


class FakeProjectStore:
    """In-memory stand-in for the projects tables.

    Understands only the statements the project functions issue.
    """

    def __init__(self, *projects: dict):
        self.projects = {p["id"]: {"images": [], **p} for p in projects}
        self.executed: list[str] = []
        self.conn = FakeConnection(self)

    @asynccontextmanager
    async def transaction(self):
        yield self.conn

    async def fetch(self, query: str, *args):
        query = " ".join(query.split())
        rows = list(self.projects.values())
        if query.startswith("SELECT media_folder FROM projects WHERE media_folder IS"):
            return [
                {"media_folder": r["media_folder"]} for r in rows if r["media_folder"]
            ]
        if "starts_with(media_folder, $1)" in query:
            prefix = args[0]
            return [
                {"media_folder": r["media_folder"]}
                for r in rows
                if (r["media_folder"] or "").startswith(prefix)
            ]
        return []

    async def fetchrow(self, query: str, *args):
        if row := self.projects.get(args[0]):
            return {
                "media_folder": row["media_folder"],
                "created_at": row["created_at"],
            }
        return None

    async def execute(self, query: str, *args) -> str:
        query = " ".join(query.split())
        self.executed.append(query)
        if query.startswith("DELETE FROM projects"):
            self.projects.pop(args[0], None)
        return "OK"

    async def get_project(self, project_id: str, for_display: bool = False):
        row = self.projects.get(project_id)
        if row is None:
            raise NotFoundException("Project not found")
        images = [ProjectImageModel(**i) for i in row["images"]]
        thumbnail = images[0] if images else None
        return ProjectModel(
            id=row["id"],
            title=row["title"],
            media_folder=row["media_folder"],
            date_is_month_only=row.get("date_is_month_only", False),
            image_url=thumbnail.image_url if thumbnail else None,
            image_public_id=thumbnail.image_public_id if thumbnail else None,
            created_at=row["created_at"],
            updated_at=row["created_at"],
            images=images,
        )
