import httpx
import pytest

from shoreline_server.api.dependencies import dep_http_client
from shoreline_server.config import shorelineconfig

FORM = {
    "name": "Jane Doe",
    "email": "jane@example.com",
    "phone": "",
    "subject": "Custom bookshelf",
    "message": "Hello, could you build a walnut bookshelf?",
    "cf-turnstile-response": "turnstile-token",
}


class MailServices:
    def __init__(self, turnstile_success: bool = True, mailgun_status: int = 200):
        self.turnstile_success = turnstile_success
        self.mailgun_status = mailgun_status
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.host == "challenges.cloudflare.com":
            return httpx.Response(200, json={"success": self.turnstile_success})
        return httpx.Response(self.mailgun_status, json={"message": "Queued"})

    @property
    def mails(self) -> list[httpx.Request]:
        return [r for r in self.requests if "/messages" in r.url.path]


@pytest.fixture
def mail_config(monkeypatch):
    monkeypatch.setattr(shorelineconfig, "turnstile_secret_key", "turnstile-secret")
    monkeypatch.setattr(shorelineconfig, "mailgun_api_key", "key-123")
    monkeypatch.setattr(shorelineconfig, "mailgun_domain", "mg.example.com")
    monkeypatch.setattr(shorelineconfig, "mailgun_from", "site@example.com")
    monkeypatch.setattr(shorelineconfig, "mailgun_to", "owner@example.com")


@pytest.fixture
def services(app, mail_config):
    services = MailServices()

    async def http_client():
        async with httpx.AsyncClient(transport=httpx.MockTransport(services)) as c:
            yield c

    app.dependency_overrides[dep_http_client] = http_client
    return services


class TestContactForm:
    def test_message_is_sent(self, client, services):
        response = client.post("/api/contact", json=FORM)

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Message sent."}
        assert len(services.mails) == 1

        body = services.mails[0].content.decode()
        assert "subject=Custom+bookshelf" in body
        assert "h%3AReply-To=jane%40example.com" in body

    def test_verification_is_required(self, client, services):
        form = {**FORM, "cf-turnstile-response": ""}
        response = client.post("/api/contact", json=form)

        assert response.status_code == 400
        assert response.json()["detail"] == "Verification is required."
        assert services.requests == []

    @pytest.mark.parametrize("field", ["name", "email", "subject", "message"])
    def test_required_fields(self, client, services, field):
        form = {**FORM, field: "  "}
        response = client.post("/api/contact", json=form)

        assert response.status_code == 400
        assert (
            response.json()["detail"]
            == "Name, email, subject, and message are required."
        )

    def test_invalid_email(self, client, services):
        response = client.post("/api/contact", json={**FORM, "email": "jane"})

        assert response.status_code == 400
        assert response.json()["detail"] == "Please provide a valid email address."

    def test_failed_verification(self, client, services):
        services.turnstile_success = False
        response = client.post("/api/contact", json=FORM)

        assert response.status_code == 400
        assert response.json()["detail"] == "Verification failed. Please try again."
        assert services.mails == []

    def test_mailgun_failure(self, client, services):
        services.mailgun_status = 401
        response = client.post("/api/contact", json=FORM)

        assert response.status_code == 500
        assert (
            response.json()["detail"]
            == "Failed to send message. Please try again later."
        )

    def test_not_configured(self, client, services, monkeypatch):
        monkeypatch.setattr(shorelineconfig, "mailgun_api_key", None)
        response = client.post("/api/contact", json=FORM)

        assert response.status_code == 500
        assert response.json()["detail"] == "Contact form is not configured."
