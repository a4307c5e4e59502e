"""
Firebase service for Realtime Database and Authentication operations
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from typing import Any, Callable, Dict, List, Optional

import firebase_admin
from firebase_admin import auth as firebase_auth
from firebase_admin import credentials, db
from firebase_admin.exceptions import FirebaseError

from newsdesk.config import Settings
from newsdesk.models.user import DirectoryUser

logger = logging.getLogger(__name__)


class DatastoreError(Exception):
    """A Realtime Database read or write failed"""


class DirectoryError(Exception):
    """The authentication directory could not be queried"""


class FirebaseService:
    """
    Service for Firebase operations

    Owns one firebase_admin App. Created at process start and handed to the
    components that need it; `close()` releases the App on shutdown.
    """

    def __init__(self, firebase_app: firebase_admin.App):
        self.app = firebase_app

    @classmethod
    def from_settings(cls, settings: Settings) -> "FirebaseService":
        """Initialize the Firebase Admin SDK with credentials from settings"""
        if not settings.FIREBASE_DATABASE_URL:
            raise ValueError("FIREBASE_DATABASE_URL is not configured")

        options = {"databaseURL": settings.FIREBASE_DATABASE_URL}
        try:
            if settings.DEV_MODE and settings.FIREBASE_EMULATOR_HOST:
                # Use emulator for development
                os.environ["FIREBASE_DATABASE_EMULATOR_HOST"] = settings.FIREBASE_EMULATOR_HOST
                firebase_app = firebase_admin.initialize_app(options=options)
                logger.info("Firebase initialized with emulator: %s", settings.FIREBASE_EMULATOR_HOST)
            else:
                if settings.FIREBASE_CREDENTIALS_JSON:
                    try:
                        cred = credentials.Certificate(json.loads(settings.FIREBASE_CREDENTIALS_JSON))
                    except json.JSONDecodeError as e:
                        logger.error("FIREBASE_CREDENTIALS_JSON is not valid JSON: %s", e)
                        raise
                    logger.info("Firebase initialized with credentials from FIREBASE_CREDENTIALS_JSON")
                else:
                    cred = credentials.Certificate(settings.FIREBASE_CREDENTIALS_PATH)
                    logger.info("Firebase initialized with credentials from %s",
                                settings.FIREBASE_CREDENTIALS_PATH)
                firebase_app = firebase_admin.initialize_app(cred, options)
        except Exception:
            logger.exception("Firebase Admin SDK initialization failed")
            raise
        return cls(firebase_app)

    def close(self) -> None:
        """Release the firebase_admin App"""
        firebase_admin.delete_app(self.app)
        logger.info("Firebase app released")

    def _ref(self, path: str) -> db.Reference:
        return db.reference(path or "/", app=self.app)

    # ============================================
    # REALTIME DATABASE OPERATIONS
    # ============================================

    async def read(self, path: str) -> Any:
        """
        Read a whole subtree

        Returns:
            The stored value, or None when nothing lives at `path`
        """
        try:
            return await asyncio.to_thread(self._ref(path).get)
        except Exception as e:
            raise DatastoreError(f"Error reading {path}: {e}") from e

    async def read_children_equal(self, path: str, child: str, value: Any) -> Dict[str, Any]:
        """
        Read the children of `path` whose `child` field equals `value`

        Requires an `.indexOn` rule for `child` on the database side.
        """
        query = self._ref(path).order_by_child(child).equal_to(value)
        try:
            result = await asyncio.to_thread(query.get)
        except Exception as e:
            raise DatastoreError(f"Error querying {path} by {child}: {e}") from e
        return dict(result or {})

    async def update(self, path: str, values: Dict[str, Any]) -> None:
        """
        Atomic multi-location update relative to `path`

        Keys may be slash separated sub-paths; None values delete the location.
        """
        if not values:
            return
        try:
            await asyncio.to_thread(self._ref(path).update, values)
        except Exception as e:
            raise DatastoreError(f"Error updating {path or '/'}: {e}") from e

    async def set(self, path: str, value: Any) -> None:
        try:
            await asyncio.to_thread(self._ref(path).set, value)
        except Exception as e:
            raise DatastoreError(f"Error writing {path}: {e}") from e

    async def delete(self, path: str) -> None:
        try:
            await asyncio.to_thread(self._ref(path).delete)
        except Exception as e:
            raise DatastoreError(f"Error deleting {path}: {e}") from e

    async def transaction(self, path: str, update_fn: Callable[[Any], Any]) -> Any:
        """
        Run a read-modify-write transaction at `path`

        `update_fn` receives the current value and returns the new one. It may
        run more than once when the location changes concurrently. Exceptions
        raised by `update_fn` abort the transaction and propagate unchanged.
        """
        try:
            return await asyncio.to_thread(self._ref(path).transaction, update_fn)
        except FirebaseError as e:
            raise DatastoreError(f"Transaction on {path} failed: {e}") from e

    async def increment(self, path: str, delta: int = 1) -> int:
        """Atomically add `delta` to the counter at `path`, never going below zero"""

        def _apply(current):
            try:
                value = int(current or 0)
            except (TypeError, ValueError):
                value = 0
            return max(value + delta, 0)

        return await self.transaction(path, _apply)

    # ============================================
    # AUTHENTICATION DIRECTORY
    # ============================================

    async def list_directory_users(self, limit: int = 1000) -> List[DirectoryUser]:
        """Fetch one page (at most `limit`) of identities from Firebase Auth"""
        try:
            page = await asyncio.to_thread(firebase_auth.list_users, max_results=limit, app=self.app)
        except Exception as e:
            raise DirectoryError(f"Error listing users: {e}") from e
        return [DirectoryUser.from_record(record) for record in page.users]

    async def verify_id_token(self, id_token: str) -> Dict[str, Any]:
        """
        Verify Firebase ID token

        Returns:
            Decoded token claims
        """
        try:
            return await asyncio.to_thread(firebase_auth.verify_id_token, id_token, app=self.app)
        except Exception as e:
            raise ValueError(f"Invalid token: {e}") from e

    async def password_reset_link(self, email: str, continue_url: str) -> str:
        settings = firebase_auth.ActionCodeSettings(url=continue_url)
        try:
            return await asyncio.to_thread(
                firebase_auth.generate_password_reset_link, email, settings, app=self.app
            )
        except Exception as e:
            raise DirectoryError(f"Error generating password reset link: {e}") from e

    async def email_verification_link(self, email: str, continue_url: str) -> str:
        settings = firebase_auth.ActionCodeSettings(url=continue_url)
        try:
            return await asyncio.to_thread(
                firebase_auth.generate_email_verification_link, email, settings, app=self.app
            )
        except Exception as e:
            raise DirectoryError(f"Error generating email verification link: {e}") from e
