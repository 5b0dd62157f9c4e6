from shoreline_server.api.dependencies import AdminUser
from shoreline_server.api.responses import EmptyResponse
from shoreline_server.projects.models import ProjectOrderModel
from shoreline_server.projects.projects import reorder_projects

from .router import router


@router.patch("/order", status_code=204)
async def set_project_order(
    user: AdminUser,
    payload: ProjectOrderModel,
) -> EmptyResponse:
    """Set the order in which projects are listed.

    Within each day, project timestamps are reassigned so the first
    project of the list is the latest one of the day. Media folders
    are not changed.
    """
    _ = user
    await reorder_projects(payload.ordered_ids)
    return EmptyResponse()
