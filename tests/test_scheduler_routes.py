import pytest

from conftest import InMemoryFirebase
from newsdesk.dependencies import get_reconciler
from newsdesk.main import app
from newsdesk.services.publication_scheduler import ScheduledPublicationReconciler


@pytest.fixture
def reconciler():
    firebase = InMemoryFirebase({
        "articoli": {
            "due": {"status": "scheduled", "scheduleDate": "2000-01-01T00:00:00.000Z"},
        }
    })
    instance = ScheduledPublicationReconciler(firebase)
    app.dependency_overrides[get_reconciler] = lambda: instance
    return instance


def test_status_before_first_run(as_admin, reconciler):
    response = as_admin.get("/api/scheduler/status")

    assert response.status_code == 200
    body = response.json()
    assert body["is_running"] is False
    assert body["last_run"] is None
    assert body["interval_seconds"] == 60


def test_manual_run_publishes_due_articles(as_admin, reconciler):
    response = as_admin.post("/api/scheduler/run")

    assert response.status_code == 200
    body = response.json()
    assert body["published"] == 1
    assert body["status"]["last_run_status"] == "success"
    assert reconciler.firebase.data["articoli"]["due"]["status"] == "accepted"


def test_scheduler_routes_require_editor(as_reader, reconciler):
    assert as_reader.post("/api/scheduler/run").status_code == 403
