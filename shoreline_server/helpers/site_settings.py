"""Editable texts of the website (about page...).

Settings are plain key/value pairs. Keys are dotted names
such as `about.ourStoryHeading`.
"""

from shoreline_server.lib.postgres import Postgres

ABOUT_KEYS = [
    "about.ourStoryHeading",
    "about.ourStoryBody",
    "about.whatWeDo",
]


def parse_setting_keys(keys: str | None) -> list[str]:
    """Parse a comma separated list of keys.

    Without keys, the about page keys are returned.
    """
    if keys is None:
        return list(ABOUT_KEYS)
    return [key.strip() for key in keys.split(",") if key.strip()]


async def get_site_settings(keys: list[str]) -> dict[str, str | None]:
    """Return values of the requested keys. Unset keys map to None."""
    if not keys:
        return {}
    res = await Postgres.fetch(
        "SELECT key, value FROM site_settings WHERE key = ANY($1::text[])",
        keys,
    )
    values = {row["key"]: row["value"] for row in res}
    return {key: values.get(key) for key in keys}


async def set_site_setting(key: str, value: str | None) -> None:
    await Postgres.execute(
        """
        INSERT INTO site_settings (key, value) VALUES ($1, $2)
        ON CONFLICT (key) DO UPDATE SET value = EXCLUDED.value, updated_at = now()
        """,
        key,
        value or "",
    )
