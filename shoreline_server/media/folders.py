"""Media folder naming.

Every project keeps its images in its own folder of the media library,
named after the moment the folder was created:

    projects/20260213-214530
    projects/20260213-214530-2    (second folder created within that second)

Projects with an explicit date (picked by the admin) get a folder on that
day with a synthetic time part, one second after the latest folder already
used on the day:

    projects/20250201-000001
    projects/20250201-000002
"""

import re
from collections.abc import Iterable
from datetime import UTC, date, datetime
from typing import Any

PROJECTS_FOLDER = "projects"
LANDING_FOLDER = "landing"

FOLDER_TIMESTAMP_REGEX = re.compile(r"^projects/(\d{8})-(\d{6})$")
FOLDER_REUSE_REGEX = re.compile(r"^projects/\d{8}-\d{6}(-\d+)?$")


def known_folder_set(values: Iterable[Any]) -> set[str]:
    """Return the set of media folders referenced by project records.

    `values` are the raw folder column values. Missing and blank
    values are skipped, the rest are stripped.
    """
    result: set[str] = set()
    for value in values:
        if not isinstance(value, str):
            continue
        if folder := value.strip():
            result.add(folder)
    return result


def folder_from_datetime(dt: datetime) -> str:
    return f"{PROJECTS_FOLDER}/{dt.strftime('%Y%m%d-%H%M%S')}"


def generate_project_folder(
    now: datetime | None = None,
    used: Iterable[str] = (),
) -> str:
    """Create a new time based folder name.

    When the name is already used by a project, `-2`, `-3`...
    suffixes are tried until a free one is found.
    """
    base = folder_from_datetime(now or datetime.now(UTC))
    used = set(used)
    candidate = base
    suffix = 2
    while candidate in used:
        candidate = f"{base}-{suffix}"
        suffix += 1
    return candidate


def date_to_folder_prefix(year: int, month: int, day: int | None = None) -> str:
    """Return the folder prefix shared by all folders of a given day.

    >>> date_to_folder_prefix(2025, 2)
    'projects/20250201-'
    """
    d = date(year, month, day or 1)
    return f"{PROJECTS_FOLDER}/{d.strftime('%Y%m%d')}-"


def _suffix_to_seconds(suffix: str) -> int:
    if not re.fullmatch(r"\d{6}", suffix):
        return 0
    return int(suffix[0:2]) * 3600 + int(suffix[2:4]) * 60 + int(suffix[4:6])


def _seconds_to_suffix(seconds: int) -> str:
    seconds = max(0, seconds)
    h = seconds // 3600
    m = (seconds // 60) % 60
    s = seconds % 60
    return f"{h:02d}{m:02d}{s:02d}"


def next_folder_for_date_prefix(prefix: str, existing: Iterable[str]) -> str:
    """Return the next free folder for a day prefix.

    The time part is one second after the largest one found in
    `existing` (folders not starting with the prefix are ignored).
    """
    latest = 0
    for path in existing:
        if not path.startswith(prefix):
            continue
        suffix = path[len(prefix) :][:6]
        latest = max(latest, _suffix_to_seconds(suffix))
    return prefix + _seconds_to_suffix(latest + 1)


def parse_folder_created_at(folder: str | None) -> datetime | None:
    """Parse a folder name back to the timestamp it was named after.

    Suffixed folders (`-2`) and anything outside the `projects`
    root do not parse.
    """
    if not folder or not isinstance(folder, str):
        return None
    match = FOLDER_TIMESTAMP_REGEX.match(folder.strip())
    if not match:
        return None
    try:
        return datetime.strptime(f"{match[1]}{match[2]}", "%Y%m%d%H%M%S")
    except ValueError:
        return None


def folder_of_public_id(public_id: str | None) -> str | None:
    """Return the project folder an uploaded asset lives in.

    >>> folder_of_public_id("projects/20260213-214530/oak_x1y2")
    'projects/20260213-214530'
    """
    if not public_id or "/" not in public_id:
        return None
    folder = public_id.strip().rsplit("/", 1)[0]
    return folder if is_reusable_folder(folder) else None


def is_reusable_folder(folder: str | None) -> bool:
    if not folder:
        return False
    return FOLDER_REUSE_REGEX.match(folder.strip()) is not None
