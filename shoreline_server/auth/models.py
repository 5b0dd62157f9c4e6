from typing import Annotated

from shoreline_server.types import Field, OPModel


class UserModel(OPModel):
    id: Annotated[str, Field(title="User ID")]
    email: Annotated[str, Field(title="E-mail", examples=["owner@example.com"])]
    name: Annotated[str | None, Field(title="Display name")] = None
    is_admin: Annotated[bool, Field(title="Administrator")] = False

    @classmethod
    def from_record(cls, record) -> "UserModel":
        return cls(
            id=record["id"],
            email=record["email"],
            name=record["name"],
            is_admin=record["is_admin"],
        )


class LoginResponseModel(OPModel):
    detail: Annotated[
        str | None,
        Field(
            title="Detail message",
            description="Text message, which may be displayed to the user",
            examples=["Logged in as NAME"],
        ),
    ] = None

    token: Annotated[
        str | None,
        Field(
            title="Access token",
            examples=["TOKEN"],
        ),
    ] = None

    user: Annotated[UserModel | None, Field(title="User data")] = None


class LogoutResponseModel(OPModel):
    detail: Annotated[
        str,
        Field(
            title="Response detail",
            description="Text description, which may be displayed to the user",
            examples=["Logged out"],
        ),
    ] = "Logged out"
