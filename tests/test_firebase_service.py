from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
from firebase_admin.exceptions import FirebaseError

from newsdesk.services import firebase_service as fs
from newsdesk.services.firebase_service import DatastoreError, DirectoryError, FirebaseService


@pytest.fixture
def service():
    return FirebaseService(MagicMock(name="firebase_app"))


@pytest.mark.asyncio
async def test_read_uses_the_service_app(service):
    ref = MagicMock()
    ref.get.return_value = {"a": 1}
    with patch.object(fs.db, "reference", return_value=ref) as reference:
        assert await service.read("articoli") == {"a": 1}
    reference.assert_called_once_with("articoli", app=service.app)


@pytest.mark.asyncio
async def test_root_update_targets_root(service):
    ref = MagicMock()
    with patch.object(fs.db, "reference", return_value=ref) as reference:
        await service.update("", {"articoli/a/status": "accepted", "articoli/a/scheduleDate": None})
    reference.assert_called_once_with("/", app=service.app)
    ref.update.assert_called_once_with({"articoli/a/status": "accepted", "articoli/a/scheduleDate": None})


@pytest.mark.asyncio
async def test_empty_update_is_skipped(service):
    with patch.object(fs.db, "reference") as reference:
        await service.update("", {})
    reference.assert_not_called()


@pytest.mark.asyncio
async def test_sdk_errors_become_datastore_errors(service):
    ref = MagicMock()
    ref.get.side_effect = RuntimeError("network down")
    with patch.object(fs.db, "reference", return_value=ref):
        with pytest.raises(DatastoreError) as exc_info:
            await service.read("utenti")
    assert "utenti" in str(exc_info.value)
    assert isinstance(exc_info.value.__cause__, RuntimeError)


@pytest.mark.asyncio
async def test_filtered_read(service):
    query = MagicMock()
    query.get.return_value = None
    ref = MagicMock()
    ref.order_by_child.return_value.equal_to.return_value = query
    with patch.object(fs.db, "reference", return_value=ref):
        assert await service.read_children_equal("articoli", "status", "scheduled") == {}
    ref.order_by_child.assert_called_once_with("status")
    ref.order_by_child.return_value.equal_to.assert_called_once_with("scheduled")


@pytest.mark.asyncio
async def test_transaction_lets_callback_errors_through(service):
    class Missing(Exception):
        pass

    def boom(current):
        raise Missing()

    ref = MagicMock()
    ref.transaction.side_effect = lambda fn: fn(None)
    with patch.object(fs.db, "reference", return_value=ref):
        with pytest.raises(Missing):
            await service.transaction("articoli/x", boom)


@pytest.mark.asyncio
async def test_transaction_sdk_failure(service):
    ref = MagicMock()
    ref.transaction.side_effect = FirebaseError("ABORTED", "too many retries")
    with patch.object(fs.db, "reference", return_value=ref):
        with pytest.raises(DatastoreError):
            await service.transaction("articoli/x", lambda current: current)


@pytest.mark.asyncio
async def test_increment_never_goes_negative(service):
    ref = MagicMock()
    ref.transaction.side_effect = lambda fn: fn("oops")
    with patch.object(fs.db, "reference", return_value=ref):
        assert await service.increment("articoli/x/view", delta=-1) == 0


@pytest.mark.asyncio
async def test_list_directory_users(service):
    record = SimpleNamespace(
        uid="u1",
        display_name=None,
        email="anna@example.com",
        email_verified=True,
        user_metadata=SimpleNamespace(creation_timestamp=1727776800000, last_sign_in_timestamp=None),
    )
    page = SimpleNamespace(users=[record])
    with patch.object(fs.firebase_auth, "list_users", return_value=page) as list_users:
        users = await service.list_directory_users(limit=50)

    list_users.assert_called_once_with(max_results=50, app=service.app)
    assert users[0].uid == "u1"
    assert users[0].created_at.year == 2024
    assert users[0].last_sign_in is None


@pytest.mark.asyncio
async def test_directory_failure(service):
    with patch.object(fs.firebase_auth, "list_users", side_effect=RuntimeError("no credentials")):
        with pytest.raises(DirectoryError):
            await service.list_directory_users()


@pytest.mark.asyncio
async def test_invalid_token_raises_value_error(service):
    with patch.object(fs.firebase_auth, "verify_id_token", side_effect=RuntimeError("expired")):
        with pytest.raises(ValueError):
            await service.verify_id_token("token")


def test_from_settings_requires_database_url():
    settings = SimpleNamespace(FIREBASE_DATABASE_URL="")
    with pytest.raises(ValueError):
        FirebaseService.from_settings(settings)
