__all__ = ["Session", "SessionModel"]

import time

from fastapi import Request

from shoreline_server.api.clientinfo import get_real_ip
from shoreline_server.auth.models import UserModel
from shoreline_server.config import shorelineconfig
from shoreline_server.lib.redis import Redis
from shoreline_server.logging import logger
from shoreline_server.types import OPModel
from shoreline_server.utils import create_hash, json_loads


class SessionModel(OPModel):
    user: UserModel
    token: str
    created: float = 0
    last_used: float = 0
    ip: str | None = None


class Session:
    ns = "session"

    @classmethod
    def is_expired(cls, session: SessionModel) -> bool:
        return time.time() - session.last_used > shorelineconfig.session_ttl

    @classmethod
    async def check(cls, token: str) -> SessionModel | None:
        """Return a session corresponding to a given access token.

        Return None if the token is invalid.
        If the session is expired, it will be removed from the database.
        If it's not expired, update the last_used field and extend
        its lifetime.
        """
        data = await Redis.get(cls.ns, token)
        if not data:
            return None

        session = SessionModel(**json_loads(data))

        if cls.is_expired(session):
            await cls.delete(token)
            return None

        # Do not write to redis on every request,
        # two minutes of precision are more than enough

        if time.time() - session.last_used > 120:
            session.last_used = time.time()
            await Redis.set(
                cls.ns,
                token,
                session.model_dump_json(),
                ttl=shorelineconfig.session_ttl,
            )

        return session

    @classmethod
    async def create(
        cls,
        user: UserModel,
        request: Request | None = None,
    ) -> SessionModel:
        """Create a new session for a given user."""
        token = create_hash()
        session = SessionModel(
            user=user,
            token=token,
            created=time.time(),
            last_used=time.time(),
            ip=get_real_ip(request) if request else None,
        )
        await Redis.set(
            cls.ns,
            token,
            session.model_dump_json(),
            ttl=shorelineconfig.session_ttl,
        )
        logger.info(f"User {user.email} logged in", ip=session.ip)
        return session

    @classmethod
    async def delete(cls, token: str) -> None:
        await Redis.delete(cls.ns, token)
