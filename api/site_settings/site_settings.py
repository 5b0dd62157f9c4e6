from typing import Annotated

from fastapi import Query

from shoreline_server.api.dependencies import AdminUser
from shoreline_server.api.responses import EmptyResponse
from shoreline_server.helpers.site_settings import (
    get_site_settings,
    parse_setting_keys,
    set_site_setting,
)
from shoreline_server.types import SETTING_KEY_REGEX, Field, OPModel

from .router import router


class SiteSettingModel(OPModel):
    key: str = Field(
        ...,
        title="Setting key",
        pattern=SETTING_KEY_REGEX,
        examples=["about.ourStoryHeading"],
    )
    value: str | None = Field(None, title="Setting value")


@router.get("")
async def get_settings(
    keys: Annotated[
        str | None,
        Query(description="Comma separated keys. Defaults to the about page texts"),
    ] = None,
) -> dict[str, str | None]:
    """Return values of site settings. Keys without a value map to null."""
    return await get_site_settings(parse_setting_keys(keys))


@router.patch("", status_code=204)
async def set_setting(user: AdminUser, payload: SiteSettingModel) -> EmptyResponse:
    """Create or update a site setting"""
    _ = user
    await set_site_setting(payload.key.strip(), payload.value)
    return EmptyResponse()
