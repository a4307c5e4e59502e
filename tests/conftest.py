import copy
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from newsdesk.dependencies import (
    get_current_user,
    get_firebase_service,
    get_optional_user,
)
from newsdesk.main import app
from newsdesk.models.user import AuthenticatedUser, DirectoryUser
from newsdesk.services.firebase_service import DatastoreError, DirectoryError


class InMemoryFirebase:
    """Stands in for FirebaseService, keeping the database as a nested dict."""

    def __init__(self, data=None, directory=None):
        self.data = copy.deepcopy(data or {})
        # list of DirectoryUser, or an exception to raise from list_directory_users
        self.directory = directory if directory is not None else []
        self.failing_paths = set()
        self.filtered_reads_fail = False
        self.update_calls = []
        self.tokens = {}

    @staticmethod
    def _parts(path):
        return [p for p in (path or "").split("/") if p]

    def _get(self, path):
        node = self.data
        for part in self._parts(path):
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        return node

    def _put(self, path, value):
        parts = self._parts(path)
        node = self.data
        for part in parts[:-1]:
            node = node.setdefault(part, {})
        if value is None:
            node.pop(parts[-1], None)
        else:
            node[parts[-1]] = copy.deepcopy(value)

    def _check(self, path):
        if path in self.failing_paths:
            raise DatastoreError(f"Error reading {path}: unavailable")

    async def read(self, path):
        self._check(path)
        return copy.deepcopy(self._get(path))

    async def read_children_equal(self, path, child, value):
        self._check(path)
        if self.filtered_reads_fail:
            raise DatastoreError("Index not defined")
        children = self._get(path) or {}
        return {
            key: copy.deepcopy(item)
            for key, item in children.items()
            if isinstance(item, dict) and item.get(child) == value
        }

    async def update(self, path, values):
        if not values:
            return
        self._check(path or "/")
        self.update_calls.append((path, copy.deepcopy(values)))
        prefix = (path or "").strip("/")
        for key, value in values.items():
            self._put(f"{prefix}/{key}" if prefix else key, value)

    async def set(self, path, value):
        self._put(path, value)

    async def delete(self, path):
        self._put(path, None)

    async def transaction(self, path, update_fn):
        new_value = update_fn(copy.deepcopy(self._get(path)))
        self._put(path, new_value)
        return new_value

    async def increment(self, path, delta=1):
        return await self.transaction(path, lambda current: max(int(current or 0) + delta, 0))

    async def list_directory_users(self, limit=1000):
        if isinstance(self.directory, Exception):
            raise self.directory
        return list(self.directory)[:limit]

    async def verify_id_token(self, id_token):
        if id_token not in self.tokens:
            raise ValueError("Invalid token: unknown")
        return self.tokens[id_token]

    async def password_reset_link(self, email, continue_url):
        if "@" not in email:
            raise DirectoryError("Error generating password reset link: invalid email")
        return f"https://example.firebaseapp.com/__/auth/action?mode=resetPassword&oobCode=abc&continueUrl={continue_url}"

    async def email_verification_link(self, email, continue_url):
        return f"https://example.firebaseapp.com/__/auth/action?mode=verifyEmail&oobCode=abc&continueUrl={continue_url}"


def directory_user(uid, email=None, display_name=None, created=None, verified=True):
    return DirectoryUser(
        uid=uid,
        email=email,
        display_name=display_name,
        created_at=created or datetime(2024, 5, 10, 9, 0, tzinfo=timezone.utc),
        email_verified=verified,
    )


ADMIN = AuthenticatedUser(uid="editor1", email="editor@example.com", email_verified=True, is_admin=True)
READER = AuthenticatedUser(uid="reader1", email="reader@example.com", email_verified=True, is_admin=False)


@pytest.fixture
def fake_firebase():
    return InMemoryFirebase()


@pytest.fixture
def client(fake_firebase):
    app.dependency_overrides[get_firebase_service] = lambda: fake_firebase
    yield TestClient(app)
    app.dependency_overrides = {}


def _login(user):
    app.dependency_overrides[get_current_user] = lambda: user
    app.dependency_overrides[get_optional_user] = lambda: user


@pytest.fixture
def as_admin(client):
    _login(ADMIN)
    return client


@pytest.fixture
def as_reader(client):
    _login(READER)
    return client
