import os
import sys

ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, ROOT_DIR)

from tests.constants import (  # noqa: E402
    ADMIN_EMAIL,
    ADMIN_TOKEN,
    CLOUDINARY_URL,
    CRON_SECRET,
    USER_TOKEN,
)

# Server configuration is read from the environment when
# shoreline_server is imported, so this must come first.

os.environ["SHORELINE_API_MODULES_DIR"] = os.path.join(ROOT_DIR, "api")
os.environ["SHORELINE_AUTHORIZED_ADMIN_EMAILS"] = ADMIN_EMAIL
os.environ["SHORELINE_CRON_SECRET"] = CRON_SECRET
os.environ["SHORELINE_CLOUDINARY_URL"] = CLOUDINARY_URL
os.environ["SHORELINE_LOG_LEVEL"] = "WARNING"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from shoreline_server.auth.models import UserModel  # noqa: E402
from shoreline_server.auth.session import Session, SessionModel  # noqa: E402

SESSIONS = {
    ADMIN_TOKEN: UserModel(
        id="0" * 32,
        email=ADMIN_EMAIL,
        name="Owner",
        is_admin=True,
    ),
    USER_TOKEN: UserModel(
        id="1" * 32,
        email="visitor@example.com",
        is_admin=False,
    ),
}


@pytest.fixture
def sessions(monkeypatch):
    async def check(token: str) -> SessionModel | None:
        user = SESSIONS.get(token)
        if user is None:
            return None
        return SessionModel(user=user, token=token)

    monkeypatch.setattr(Session, "check", check)
    return SESSIONS


@pytest.fixture
def app(sessions):
    from shoreline_server.api.server import app

    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    # Not used as a context manager, so the lifespan
    # (database and redis connections) does not run
    return TestClient(app)
