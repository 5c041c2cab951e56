from __future__ import annotations

import pytest
import requests
from fastapi.testclient import TestClient

from nowpost.config import AppConfig, WebAuthConfig, WebUIConfig
from nowpost.github.client import GitHubContentsClient
from nowpost.publishing import CredentialVerifier, PostPipeline
from nowpost.session import MemoryCredentialStore, SessionContext
from nowpost.web import create_app
from tests.utils import FakeRepository, VALID_TOKEN

JPEG_B64 = "/9j/4AAQSkZJRgABAQAAAQABAAD/2wBDAAgGBgcGBQgHBwcJCQgKDA=="


@pytest.fixture()
def session(client: GitHubContentsClient) -> SessionContext:
    return SessionContext(MemoryCredentialStore(), CredentialVerifier(client))


@pytest.fixture()
def pipeline(app_config: AppConfig, client: GitHubContentsClient) -> PostPipeline:
    return PostPipeline.from_config(app_config, client)


@pytest.fixture()
def web(app_config: AppConfig, session: SessionContext, pipeline: PostPipeline) -> TestClient:
    app_config.web = WebUIConfig(enabled=True, title="My Now Page")
    return TestClient(create_app(session, pipeline, app_config))


def test_health_check(web: TestClient) -> None:
    response = web.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_login_and_logout(web: TestClient, session: SessionContext) -> None:
    assert web.get("/session").json() == {"logged_in": False}

    response = web.post("/session", json={"token": VALID_TOKEN})
    assert response.status_code == 200
    assert session.credential == VALID_TOKEN

    assert web.delete("/session").json() == {"logged_in": False}
    assert session.credential is None


def test_login_with_invalid_token(web: TestClient) -> None:
    response = web.post("/session", json={"token": "ghp_revoked"})

    assert response.status_code == 401
    assert response.json() == {"detail": "Invalid token or no access to repository"}


def test_login_with_empty_token(web: TestClient) -> None:
    response = web.post("/session", json={"token": "  "})

    assert response.status_code == 422
    assert response.json() == {"detail": "Please enter a token"}


def test_login_during_outage(web: TestClient, fake_repo: FakeRepository) -> None:
    fake_repo.fail_with = requests.ConnectionError("offline")

    assert web.post("/session", json={"token": VALID_TOKEN}).status_code == 502


def test_post_requires_login(web: TestClient, fake_repo: FakeRepository) -> None:
    response = web.post("/posts", json={"image_base64": JPEG_B64, "caption": "hi"})

    assert response.status_code == 401
    assert fake_repo.calls == []


def test_post_publishes_entry(web: TestClient, session: SessionContext, fake_repo: FakeRepository) -> None:
    session.login(VALID_TOKEN)

    response = web.post("/posts", json={"image_base64": JPEG_B64, "caption": "Hello world", "source": "phone"})

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Posted to your Now page!"
    assert body["inserted"] is True
    assert f"docs/{body['filename']}" in fake_repo.files
    assert "<li>Hello world</li>" in fake_repo.text("now/index.html")


def test_post_with_incomplete_draft(web: TestClient, session: SessionContext) -> None:
    session.login(VALID_TOKEN)

    response = web.post("/posts", json={"image_base64": JPEG_B64, "caption": " "})

    assert response.status_code == 422
    assert response.json() == {"detail": "Please add some text"}


def test_post_conflict_message_is_passed_through(
    web: TestClient, session: SessionContext, fake_repo: FakeRepository
) -> None:
    session.login(VALID_TOKEN)

    def _concurrent_edit(repo: FakeRepository, path: str) -> None:
        if path == "now/index.html":
            repo.add_file(path, "<div class=\"date\">Update: elsewhere</div>")

    fake_repo.before_put = _concurrent_edit

    response = web.post("/posts", json={"image_base64": JPEG_B64, "caption": "hi"})

    assert response.status_code == 502
    assert "does not match" in response.json()["detail"]


def test_oversized_image_is_rejected(
    app_config: AppConfig, session: SessionContext, pipeline: PostPipeline
) -> None:
    app_config.web = WebUIConfig(max_image_bytes=10)
    web = TestClient(create_app(session, pipeline, app_config))
    session.login(VALID_TOKEN)

    response = web.post("/posts", json={"image_base64": JPEG_B64, "caption": "hi"})

    assert response.status_code == 413


def test_console_renders_form(web: TestClient) -> None:
    response = web.get("/console")

    assert response.status_code == 200
    assert "My Now Page" in response.text
    assert "OutFoxD/Project-Portfolio" in response.text
    assert web.get("/", follow_redirects=False).status_code in {302, 307}


def test_console_disabled_without_web_config(session: SessionContext, pipeline: PostPipeline) -> None:
    web = TestClient(create_app(session, pipeline))

    assert web.get("/console").status_code == 404


def test_console_token_protects_api(
    app_config: AppConfig,
    session: SessionContext,
    pipeline: PostPipeline,
) -> None:
    app_config.web = WebUIConfig(auth=WebAuthConfig(enabled=True, token="console-secret"))
    web = TestClient(create_app(session, pipeline, app_config))

    assert web.get("/session").status_code == 401
    assert web.get("/session", headers={"X-Console-Token": "wrong"}).status_code == 401
    assert web.get("/session", headers={"X-Console-Token": "console-secret"}).json() == {"logged_in": False}
    assert web.get("/health").status_code == 200
