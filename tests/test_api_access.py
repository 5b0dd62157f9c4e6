import importlib

import pytest

from shoreline_server.api.dependencies import dep_media_library
from shoreline_server.media.cloudinary import CloudinaryClient, CloudinaryCredentials
from tests.common import auth_headers
from tests.constants import ADMIN_TOKEN, USER_TOKEN

PROJECT_ID = "0123456789abcdef0123456789abcdef"

ADMIN_ENDPOINTS = [
    ("post", "/api/projects", {"title": "Table", "uploadedImages": []}),
    ("patch", f"/api/projects/{PROJECT_ID}", {"title": "Table"}),
    ("delete", f"/api/projects/{PROJECT_ID}", None),
    ("patch", "/api/projects/order", {"orderedIds": [PROJECT_ID]}),
    ("patch", f"/api/tags/{PROJECT_ID}", {"name": "Oak"}),
    ("delete", f"/api/tags/{PROJECT_ID}", None),
    ("get", "/api/tags", None),
    ("patch", "/api/site-settings", {"key": "about.whatWeDo", "value": "Tables"}),
    ("get", "/api/cloudinary-config", None),
]


def call(client, method, path, payload, headers=None):
    kwargs = {"headers": headers or {}}
    if payload is not None:
        kwargs["json"] = payload
    return client.request(method.upper(), path, **kwargs)


class TestAdminEndpoints:
    @pytest.mark.parametrize("method,path,payload", ADMIN_ENDPOINTS)
    def test_anonymous(self, client, method, path, payload):
        response = call(client, method, path, payload)
        assert response.status_code == 401

    @pytest.mark.parametrize("method,path,payload", ADMIN_ENDPOINTS)
    def test_not_an_admin(self, client, method, path, payload):
        response = call(client, method, path, payload, auth_headers(USER_TOKEN))
        assert response.status_code == 403
        assert response.json()["detail"] == "Administrator access required"

    def test_me(self, client):
        response = client.get("/api/auth/me", headers=auth_headers(ADMIN_TOKEN))
        assert response.status_code == 200
        assert response.json()["email"] == "owner@example.com"
        assert response.json()["isAdmin"] is True

    def test_me_anonymous(self, client):
        response = client.get("/api/auth/me")
        assert response.status_code == 401
        assert response.json()["detail"] == "Access token is missing"


class TestErrors:
    def test_unknown_endpoint(self, client):
        response = client.get("/api/nothing-here")
        assert response.status_code == 404
        assert response.json()["error"] == "not-found"

    def test_invalid_project_id(self, client):
        response = client.get("/api/projects/not-an-id")
        assert response.status_code == 400
        assert response.json()["error"] == "bad-request"

    def test_invalid_payload(self, client):
        response = client.post(
            "/api/projects",
            json={"title": ""},
            headers=auth_headers(ADMIN_TOKEN),
        )
        assert response.status_code == 400

    def test_invalid_setting_key(self, client):
        response = client.patch(
            "/api/site-settings",
            json={"key": "drop table;", "value": "x"},
            headers=auth_headers(ADMIN_TOKEN),
        )
        assert response.status_code == 400


class TestUploadConfig:
    @pytest.fixture
    def upload(self, app, monkeypatch):
        credentials = CloudinaryCredentials(
            cloud_name="shoreline",
            api_key="123456",
            api_secret="topsecret",
        )
        app.dependency_overrides[dep_media_library] = lambda: CloudinaryClient(
            credentials
        )
        # loaded by the server from the api directory
        module = importlib.import_module("media.upload")

        async def get_used_media_folders(base):
            return {base}

        async def get_project_media_folder(project_id):
            return "projects/20240101-120000" if project_id == PROJECT_ID else None

        monkeypatch.setattr(module, "get_used_media_folders", get_used_media_folders)
        monkeypatch.setattr(
            module, "get_project_media_folder", get_project_media_folder
        )
        return module

    def get_config(self, client, **params):
        response = client.get(
            "/api/cloudinary-config",
            params=params,
            headers=auth_headers(ADMIN_TOKEN),
        )
        assert response.status_code == 200, response.text
        return response.json()

    def test_new_folder(self, client, upload):
        data = self.get_config(client)
        assert data["cloudName"] == "shoreline"
        assert data["apiKey"] == "123456"
        assert "apiSecret" not in data
        assert data["signature"]
        # the timestamp folder is taken, a suffix is added
        assert data["folder"].startswith("projects/")
        assert data["folder"].endswith("-2")

    def test_reuse_folder(self, client, upload):
        data = self.get_config(client, folder="projects/20250201-000001")
        assert data["folder"] == "projects/20250201-000001"

    def test_landing(self, client, upload):
        assert self.get_config(client, purpose="landing")["folder"] == "landing"

    def test_project_folder(self, client, upload):
        data = self.get_config(client, projectId=PROJECT_ID)
        assert data["folder"] == "projects/20240101-120000"

    def test_future_date(self, client, upload):
        response = client.get(
            "/api/cloudinary-config",
            params={"year": 2999, "month": 1},
            headers=auth_headers(ADMIN_TOKEN),
        )
        assert response.status_code == 400
