from conftest import directory_user
from newsdesk.services.firebase_service import DirectoryError


def test_me_combines_token_and_profile(as_reader, fake_firebase):
    fake_firebase.data = {"utenti": {"reader1": {"displayName": "Rita", "role": "Reader"}}}

    response = as_reader.get("/api/users/me")

    assert response.status_code == 200
    assert response.json() == {
        "uid": "reader1",
        "email": "reader@example.com",
        "emailVerified": True,
        "displayName": "Rita",
        "role": "Reader",
        "isAdmin": False,
    }


def test_me_without_stored_profile(as_reader):
    response = as_reader.get("/api/users/me")

    assert response.status_code == 200
    assert response.json()["displayName"] is None


def test_update_display_name(as_reader, fake_firebase):
    response = as_reader.put("/api/users/me", json={"displayName": "Rita R."})

    assert response.status_code == 200
    assert response.json()["displayName"] == "Rita R."
    assert fake_firebase.data["utenti"]["reader1"] == {"displayName": "Rita R."}


def test_display_name_too_short(as_reader):
    assert as_reader.put("/api/users/me", json={"displayName": "R"}).status_code == 422


def test_list_users_for_editors(as_admin, fake_firebase):
    fake_firebase.directory = [directory_user("u1", "anna@example.com")]
    fake_firebase.data = {"users": {"u1": {"role": "Editor"}}}

    response = as_admin.get("/api/users/")

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 1
    assert body["source"] == "directory"
    assert body["users"][0]["role"] == "Editor"


def test_list_users_unavailable(as_admin, fake_firebase):
    fake_firebase.directory = DirectoryError("down")
    fake_firebase.failing_paths.update({"utenti", "users", "user"})

    assert as_admin.get("/api/users/").status_code == 503


def test_list_users_forbidden_for_readers(as_reader):
    assert as_reader.get("/api/users/").status_code == 403


def test_assign_role(as_admin, fake_firebase):
    fake_firebase.data = {"utenti": {"u9": {"displayName": "Nino"}}}

    response = as_admin.put("/api/users/u9/role", json={"role": " Contributor "})

    assert response.status_code == 200
    assert response.json()["role"] == "Contributor"
    assert fake_firebase.data["utenti"]["u9"] == {"displayName": "Nino", "role": "Contributor"}
