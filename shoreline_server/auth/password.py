import time

from fastapi import Request

from shoreline_server.api.clientinfo import get_real_ip
from shoreline_server.auth.models import UserModel
from shoreline_server.auth.session import Session, SessionModel
from shoreline_server.auth.utils import (
    create_password,
    hash_password,
    is_authorized_admin_email,
    validate_password,
)
from shoreline_server.config import shorelineconfig
from shoreline_server.exceptions import ForbiddenException
from shoreline_server.lib.postgres import Postgres
from shoreline_server.lib.redis import Redis
from shoreline_server.logging import logger
from shoreline_server.utils import create_uuid, json_dumps


async def check_failed_login(ip_address: str) -> None:
    banned_until = await Redis.get("banned-ip-until", ip_address)
    if banned_until is None:
        return

    if float(banned_until) > time.time():
        logger.warning(
            f"Attempt to login from banned IP {ip_address}. "
            f"Retry in {float(banned_until) - time.time():.2f} seconds."
        )
        await Redis.delete("login-failed-ip", ip_address)
        raise ForbiddenException("Too many failed login attempts")


async def set_failed_login(ip_address: str):
    ns = "login-failed-ip"
    failed_attempts = await Redis.incr(ns, ip_address)
    await Redis.expire(
        ns, ip_address, 600
    )  # this is just for the clean-up, it cannot be used to reset the counter

    if failed_attempts > shorelineconfig.max_failed_login_attempts:
        await Redis.set(
            "banned-ip-until",
            ip_address,
            json_dumps(time.time() + shorelineconfig.failed_login_ban_time),
        )


async def clear_failed_login(ip_address: str):
    await Redis.delete("login-failed-ip", ip_address)


class PasswordAuth:
    @classmethod
    async def login(
        cls,
        email: str,
        password: str,
        request: Request | None = None,
    ) -> SessionModel:
        """Login using e-mail/password credentials.

        Return a SessionModel object if the credentials are valid
        and the address is one of the authorized admin e-mails.
        Raise 403 otherwise.
        """

        if request is not None:
            await check_failed_login(get_real_ip(request))

        email = email.strip().lower()

        if not is_authorized_admin_email(email):
            if request is not None:
                await set_failed_login(get_real_ip(request))
            raise ForbiddenException("Invalid login/password combination")

        record = await Postgres.fetchrow(
            "SELECT * FROM users WHERE lower(email) = $1", email
        )
        if record is None or not record["password"]:
            if request is not None:
                await set_failed_login(get_real_ip(request))
            raise ForbiddenException("Invalid login/password combination")

        pass_hash, pass_salt = record["password"].split(":")

        if pass_hash != hash_password(password, pass_salt):
            if request is not None:
                await set_failed_login(get_real_ip(request))
            raise ForbiddenException("Invalid login/password combination")

        if not record["is_admin"]:
            # Authorized addresses are promoted on their first login
            await Postgres.execute(
                "UPDATE users SET is_admin = true WHERE id = $1", record["id"]
            )

        user = UserModel(
            id=record["id"],
            email=record["email"],
            name=record["name"],
            is_admin=True,
        )

        if request is not None:
            await clear_failed_login(get_real_ip(request))
        return await Session.create(user, request)

    @classmethod
    async def set_password(
        cls,
        email: str,
        password: str,
        name: str | None = None,
    ) -> None:
        """Create a user or change password of an existing one."""
        validate_password(password)
        await Postgres.execute(
            """
            INSERT INTO users (id, email, name, password)
            VALUES ($1, $2, $3, $4)
            ON CONFLICT (email)
            DO UPDATE SET password = EXCLUDED.password,
                name = COALESCE(EXCLUDED.name, users.name)
            """,
            create_uuid(),
            email.strip().lower(),
            name,
            create_password(password),
        )
