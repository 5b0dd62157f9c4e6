"""Admin authentication.

- Login using e-mail/password credentials
- Logout (revoke access token)
- Current user information
"""

from fastapi import Request, Response

from shoreline_server.api.auth import access_token_from_request
from shoreline_server.api.dependencies import CurrentUser
from shoreline_server.auth.models import (
    LoginResponseModel,
    LogoutResponseModel,
    UserModel,
)
from shoreline_server.auth.password import PasswordAuth
from shoreline_server.auth.session import Session
from shoreline_server.config import shorelineconfig
from shoreline_server.exceptions import UnauthorizedException
from shoreline_server.types import Field, OPModel

from .router import router


class LoginRequestModel(OPModel):
    email: str = Field(
        ...,
        title="E-mail",
        examples=["owner@example.com"],
    )
    password: str = Field(
        ...,
        title="Password",
        examples=["SecretPassword.123"],
    )


@router.post("/login")
async def login(
    request: Request,
    response: Response,
    login: LoginRequestModel,
) -> LoginResponseModel:
    """Login using e-mail/password credentials.

    Only addresses listed in the authorized admin e-mails may log in.
    Returns access token and user information. The token is also set
    as the `accessToken` cookie. It is extended automatically while
    the user is active.
    """

    session = await PasswordAuth.login(login.email, login.password, request)

    response.set_cookie(
        "accessToken",
        session.token,
        max_age=shorelineconfig.session_ttl,
        httponly=True,
        samesite="lax",
    )

    return LoginResponseModel(
        detail=f"Logged in as {session.user.name or session.user.email}",
        token=session.token,
        user=session.user,
    )


@router.post("/logout")
async def logout(request: Request, response: Response) -> LogoutResponseModel:
    """Log out the current user."""
    access_token = access_token_from_request(request)
    if not access_token:
        raise UnauthorizedException("Access token is missing")
    await Session.delete(access_token)
    response.delete_cookie("accessToken")
    return LogoutResponseModel()


@router.get("/me")
async def get_current_user(user: CurrentUser) -> UserModel:
    """Return the logged-in user"""
    return user
