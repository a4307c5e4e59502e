"""
User Models for Newsdesk Backend

Users come from two places: the Firebase Auth directory (identity fields)
and the legacy profile paths of the Realtime Database (`utenti/`, `users/`,
`user/`) holding the display name and role editors assigned. Each source has
its own model; `merge_user` produces the single record the dashboard shows.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from newsdesk.utils.timestamps import from_millis, parse_timestamp, to_iso, utc_now


DEFAULT_DISPLAY_NAME = "Utente"
DEFAULT_ROLE = "User"
MISSING_EMAIL = "Email non disponibile"


class DirectoryUser(BaseModel):
    """
    Identity as listed by the authentication directory

    Source: firebase_admin.auth.list_users()
    """

    uid: str
    display_name: Optional[str] = None
    email: Optional[str] = None
    created_at: Optional[datetime] = None
    last_sign_in: Optional[datetime] = None
    email_verified: bool = False

    @classmethod
    def from_record(cls, record: Any) -> "DirectoryUser":
        """Build from a firebase_admin ExportedUserRecord"""
        metadata = getattr(record, "user_metadata", None)
        created = getattr(metadata, "creation_timestamp", None)
        last_sign_in = getattr(metadata, "last_sign_in_timestamp", None)
        return cls(
            uid=record.uid,
            display_name=record.display_name,
            email=record.email,
            created_at=from_millis(created) if created else None,
            last_sign_in=from_millis(last_sign_in) if last_sign_in else None,
            email_verified=bool(record.email_verified),
        )


class ProfileRecord(BaseModel):
    """
    Supplementary profile stored by the frontend

    Path: {legacy_path}/{uid}
    """

    uid: str
    display_name: Optional[str] = Field(None, alias="displayName")
    email: Optional[str] = None
    role: Optional[str] = None
    created_at: Optional[str] = Field(None, alias="createdAt")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("display_name", "email", "role", mode="before")
    @classmethod
    def _text(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        text = str(v).strip()
        return text or None

    @field_validator("created_at", mode="before")
    @classmethod
    def _timestamp(cls, v: Any) -> Optional[str]:
        if v is None or v == "":
            return None
        if isinstance(v, str):
            return v
        parsed = parse_timestamp(v)
        return to_iso(parsed) if parsed else str(v)


class DashboardUser(BaseModel):
    """Merged user as presented by the dashboard"""

    id: str
    display_name: Optional[str] = Field(None, alias="displayName")
    email: Optional[str] = None
    created_at: Optional[str] = Field(None, alias="createdAt")
    last_sign_in_time: Optional[str] = Field(None, alias="lastSignInTime")
    email_verified: bool = Field(False, alias="emailVerified")
    role: str = DEFAULT_ROLE

    model_config = ConfigDict(populate_by_name=True)


def normalize_directory_user(user: DirectoryUser, now: Optional[datetime] = None) -> DashboardUser:
    """Map a directory identity to a dashboard record with default fallbacks"""
    email_local = user.email.split("@")[0] if user.email else ""
    created = user.created_at or now or utc_now()
    return DashboardUser(
        id=user.uid,
        display_name=user.display_name or email_local or DEFAULT_DISPLAY_NAME,
        email=user.email or MISSING_EMAIL,
        created_at=to_iso(created),
        last_sign_in_time=to_iso(user.last_sign_in) if user.last_sign_in else None,
        email_verified=user.email_verified,
        role=DEFAULT_ROLE,
    )


def merge_user(directory_user: DashboardUser, profile: Optional[ProfileRecord]) -> DashboardUser:
    """
    Overlay profile data on a directory record.

    Only displayName and role are taken from the profile; identity fields
    (id, email, emailVerified) always stay as the directory reports them.
    """
    if profile is None:
        return directory_user
    return directory_user.model_copy(
        update={
            "display_name": profile.display_name or directory_user.display_name,
            "role": profile.role or directory_user.role,
        }
    )


def profile_to_dashboard_user(profile: ProfileRecord, now: Optional[datetime] = None) -> DashboardUser:
    """Used when the directory is unreachable and profiles are all we have"""
    return DashboardUser(
        id=profile.uid,
        display_name=profile.display_name,
        email=profile.email,
        created_at=profile.created_at or to_iso(now or utc_now()),
        role=profile.role or DEFAULT_ROLE,
    )


class AuthenticatedUser(BaseModel):
    """Caller identity resolved from a verified Firebase ID token"""

    uid: str
    email: Optional[str] = None
    email_verified: bool = False
    is_admin: bool = False
