__all__ = ["OPModel", "Field", "camelize"]

from pydantic import BaseModel, ConfigDict, Field

from shoreline_server.utils import camelize


class OPModel(BaseModel):
    """Base API model.

    Fields are declared in snake_case and serialized in camelCase,
    which is what the website frontend expects.
    """

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        alias_generator=camelize,
    )


#
# Common regexes
#

ENTITY_ID_REGEX = r"^[0-9a-f]{32}$"
ENTITY_ID_EXAMPLE = "c10d5bc73dcab7da4cba0f3e0b3c0aea"

# keys like "about.ourStoryHeading"
SETTING_KEY_REGEX = r"^[a-zA-Z0-9_][a-zA-Z0-9_\.\-]{0,127}$"

# project media folders created by the upload flow
MEDIA_FOLDER_REGEX = r"^projects/\d{8}-\d{6}(-\d+)?$"
