from fastapi import APIRouter

from shoreline_server.api.responses import ResponseFactory

router = APIRouter(
    prefix="/tags",
    tags=["Tags"],
    responses={
        401: ResponseFactory.error(401),
        403: ResponseFactory.error(403),
    },
)
