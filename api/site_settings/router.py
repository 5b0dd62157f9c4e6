from fastapi import APIRouter

from shoreline_server.api.responses import ResponseFactory

router = APIRouter(
    prefix="/site-settings",
    tags=["Site settings"],
    responses={
        401: ResponseFactory.error(401),
        403: ResponseFactory.error(403),
    },
)
