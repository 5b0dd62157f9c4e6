from typing import Annotated, Literal

from fastapi import Query, Request

from shoreline_server.api.dependencies import AdminUser, TagID, dep_admin_user
from shoreline_server.api.responses import EmptyResponse, ResponseFactory
from shoreline_server.helpers.tags import (
    TagModel,
    delete_tag,
    get_tag_names,
    get_tags_with_counts,
    rename_tag,
    search_tag_names,
)
from shoreline_server.types import Field, OPModel

from .router import router


class TagPatchModel(OPModel):
    name: str = Field(..., title="New tag name", min_length=1, max_length=100)


@router.get("")
async def get_tags(
    request: Request,
    q: Annotated[
        str | None,
        Query(description="Return up to 20 tag names containing this text"),
    ] = None,
    list_: Annotated[
        Literal["names"] | None,
        Query(alias="list", description="Use 'names' to return all tag names"),
    ] = None,
) -> list[str] | list[TagModel]:
    """List tags.

    With `q` or `list=names`, tag names are returned to anyone
    (tag input suggestions, project filters). Without parameters,
    all tags with their project counts are returned to admins.
    """
    if q is not None and q.strip():
        return await search_tag_names(q)

    if list_ == "names":
        return await get_tag_names()

    await dep_admin_user(request)
    return await get_tags_with_counts()


@router.patch(
    "/{tag_id}",
    responses={404: ResponseFactory.error(404), 409: ResponseFactory.error(409)},
)
async def patch_tag(user: AdminUser, tag_id: TagID, payload: TagPatchModel) -> TagModel:
    """Rename a tag"""
    _ = user
    return await rename_tag(tag_id, payload.name)


@router.delete("/{tag_id}", status_code=204)
async def remove_tag(user: AdminUser, tag_id: TagID) -> EmptyResponse:
    """Delete a tag and remove it from all projects"""
    _ = user
    await delete_tag(tag_id)
    return EmptyResponse()
