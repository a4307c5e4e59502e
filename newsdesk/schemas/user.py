"""
User profile request/response schemas
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from newsdesk.models.user import DashboardUser


class UserProfileResponse(BaseModel):
    uid: str
    email: Optional[str] = None
    email_verified: bool = Field(False, alias="emailVerified")
    display_name: Optional[str] = Field(None, alias="displayName")
    role: Optional[str] = None
    is_admin: bool = Field(False, alias="isAdmin")

    model_config = ConfigDict(populate_by_name=True)


class UserProfileUpdate(BaseModel):
    display_name: str = Field(..., min_length=2, max_length=100, alias="displayName")

    model_config = ConfigDict(populate_by_name=True)


class RoleUpdate(BaseModel):
    role: str = Field(..., min_length=1, max_length=50)


class UserListResponse(BaseModel):
    users: List[DashboardUser]
    total: int
    source: str
