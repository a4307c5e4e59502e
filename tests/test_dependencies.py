import pytest
from fastapi.testclient import TestClient

from newsdesk.config import settings
from newsdesk.main import app


@pytest.fixture
def editors(monkeypatch):
    monkeypatch.setattr(settings, "ADMIN_EMAILS", "Editor@Example.com,capo@example.com")


def _bearer(token):
    return {"Authorization": f"Bearer {token}"}


def test_missing_token_is_rejected(client):
    response = client.get("/api/users/me")

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"


def test_invalid_token_is_rejected(client):
    assert client.get("/api/users/me", headers=_bearer("forged")).status_code == 401


def test_valid_token_resolves_user(client, fake_firebase, editors):
    fake_firebase.tokens["t1"] = {"uid": "u1", "email": "reader@example.com", "email_verified": True}

    response = client.get("/api/users/me", headers=_bearer("t1"))

    assert response.status_code == 200
    assert response.json()["uid"] == "u1"
    assert response.json()["isAdmin"] is False


def test_listed_verified_email_is_editor(client, fake_firebase, editors):
    fake_firebase.tokens["t1"] = {"uid": "e1", "email": "editor@example.com", "email_verified": True}

    assert client.get("/api/users/me", headers=_bearer("t1")).json()["isAdmin"] is True


def test_unverified_email_is_not_editor(client, fake_firebase, editors):
    fake_firebase.tokens["t1"] = {"uid": "e1", "email": "editor@example.com", "email_verified": False}

    assert client.get("/api/dashboard", headers=_bearer("t1")).status_code == 403


def test_article_listing_needs_no_token(client, fake_firebase):
    fake_firebase.data = {"articoli": {"a": {"titolo": "Pubblico"}}}

    response = client.get("/api/articles/")

    assert response.status_code == 200
    assert response.json()["total"] == 1


def test_uninitialized_datastore_returns_503():
    app.dependency_overrides = {}
    response = TestClient(app).get("/api/user-count")

    assert response.status_code == 503
