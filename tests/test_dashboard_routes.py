from datetime import datetime, timezone

from conftest import directory_user
from newsdesk.services.firebase_service import DirectoryError


def _seed(fake_firebase):
    fake_firebase.data = {
        "articoli": {
            "a1": {"titolo": "Derby", "categoria": "Sport", "view": 10, "upvote": 1, "shared": 1},
            "a2": {"titolo": "Manovra", "tag": "Politics, economy"},
        },
        "utenti": {"u1": {"displayName": "Anna", "role": "Editor"}},
    }
    fake_firebase.directory = [
        directory_user("u1", "anna@example.com", created=datetime(2024, 9, 1, tzinfo=timezone.utc)),
        directory_user("u2", None),
    ]


def test_dashboard_requires_authentication(client):
    response = client.get("/api/dashboard")
    assert response.status_code == 401


def test_dashboard_requires_editor(as_reader):
    response = as_reader.get("/api/dashboard")
    assert response.status_code == 403


def test_dashboard_snapshot(as_admin, fake_firebase):
    _seed(fake_firebase)

    response = as_admin.get("/api/dashboard")

    assert response.status_code == 200
    data = response.json()
    assert data["stats"] == {
        "totalUsers": 2,
        "totalArticles": 2,
        "totalViews": 10,
        "totalLikes": 1,
        "totalShares": 1,
        "sensitiveTags": 0,
    }
    assert data["categoryCounts"] == {"Sport": 1, "Politics": 1}
    assert data["tagCounts"] == {"Politics": 1, "economy": 1}
    assert len(data["registrationChartData"]) == 12
    assert set(data["registrationChartData"][0]) == {"month", "year", "key", "count"}
    assert data["demo"] is False

    by_id = {u["id"]: u for u in data["users"]}
    assert by_id["u1"]["displayName"] == "Anna"
    assert by_id["u1"]["role"] == "Editor"
    assert by_id["u2"]["displayName"] == "Utente"
    assert by_id["u2"]["email"] == "Email non disponibile"
    assert len(data["recentUsers"]) == 2


def test_dashboard_error_shape(as_admin, fake_firebase):
    fake_firebase.directory = DirectoryError("directory down")
    fake_firebase.failing_paths.update({"utenti", "users", "user"})

    response = as_admin.get("/api/dashboard")

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Error fetching dashboard data"
    assert body["message"]


def test_user_count(client, fake_firebase):
    fake_firebase.directory = [directory_user("u1"), directory_user("u2"), directory_user("u3")]

    response = client.get("/api/user-count")

    assert response.status_code == 200
    assert response.json() == {"count": 3, "success": True}


def test_user_count_error_shape(client, fake_firebase):
    fake_firebase.directory = DirectoryError("Error listing users: quota exceeded")

    response = client.get("/api/user-count")

    assert response.status_code == 500
    assert response.json() == {
        "error": "Error fetching user count",
        "message": "Error listing users: quota exceeded",
        "success": False,
    }
