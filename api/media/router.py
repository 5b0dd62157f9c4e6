from fastapi import APIRouter

from shoreline_server.api.responses import ResponseFactory

router = APIRouter(
    tags=["Media"],
    responses={
        401: ResponseFactory.error(401),
        403: ResponseFactory.error(403),
        503: ResponseFactory.error(503),
    },
)
