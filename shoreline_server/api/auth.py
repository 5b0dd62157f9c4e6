from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from shoreline_server.auth.models import UserModel
from shoreline_server.auth.session import Session
from shoreline_server.exceptions import UnauthorizedException
from shoreline_server.logging import logger
from shoreline_server.utils import parse_access_token


def access_token_from_request(request: Request) -> str | None:
    token = request.cookies.get("accessToken")
    if not token:
        authorization = request.headers.get("Authorization")
        if authorization:
            token = parse_access_token(authorization)
    return token


async def user_from_request(request: Request) -> UserModel:
    """Get user from request"""

    access_token = access_token_from_request(request)
    if not access_token:
        raise UnauthorizedException("Access token is missing")

    session_data = await Session.check(access_token)
    if not session_data:
        logger.trace("Unauthorized request: Invalid session")
        raise UnauthorizedException("Invalid session")

    return session_data.user


class AuthMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        context = {}

        try:
            user = await user_from_request(request)
            context["user"] = user.email
            request.state.user = user
            request.state.unauthorized_reason = None
        except UnauthorizedException as e:
            request.state.user = None
            request.state.unauthorized_reason = str(e)

        with logger.contextualize(**context):
            return await call_next(request)
