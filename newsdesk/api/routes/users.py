"""
User profile management API endpoints

Profiles are written to the first configured legacy path (`utenti/` by
default), which is where the frontend has always stored them.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from newsdesk.config import settings
from newsdesk.dependencies import (
    get_current_user,
    get_dashboard_service,
    get_firebase_service,
    require_admin,
)
from newsdesk.models.user import AuthenticatedUser, ProfileRecord
from newsdesk.schemas.user import (
    RoleUpdate,
    UserListResponse,
    UserProfileResponse,
    UserProfileUpdate,
)
from newsdesk.services.dashboard_service import DashboardService, DashboardUnavailable
from newsdesk.services.firebase_service import FirebaseService

# Create router
router = APIRouter(prefix="/api/users", tags=["Users"])


def _profile_path(uid: str) -> str:
    paths = settings.legacy_user_paths_list
    return f"{paths[0] if paths else 'utenti'}/{uid}"


async def _read_profile(firebase: FirebaseService, uid: str) -> ProfileRecord:
    data = await firebase.read(_profile_path(uid))
    return ProfileRecord.model_validate({**(data if isinstance(data, dict) else {}), "uid": uid})


def _profile_response(user: AuthenticatedUser, profile: ProfileRecord) -> UserProfileResponse:
    return UserProfileResponse(
        uid=user.uid,
        email=user.email,
        email_verified=user.email_verified,
        display_name=profile.display_name,
        role=profile.role,
        is_admin=user.is_admin,
    )


@router.get("/me", response_model=UserProfileResponse)
async def get_my_profile(
    current_user: AuthenticatedUser = Depends(get_current_user),
    firebase: FirebaseService = Depends(get_firebase_service),
):
    """
    Get current user's profile

    Identity fields come from the verified token, the rest from the
    profile store.
    """
    return _profile_response(current_user, await _read_profile(firebase, current_user.uid))


@router.put("/me", response_model=UserProfileResponse)
async def update_my_profile(
    payload: UserProfileUpdate,
    current_user: AuthenticatedUser = Depends(get_current_user),
    firebase: FirebaseService = Depends(get_firebase_service),
):
    """
    Update current user's display name

    - **displayName**: New display name
    """
    await firebase.update(_profile_path(current_user.uid), {"displayName": payload.display_name})
    return _profile_response(current_user, await _read_profile(firebase, current_user.uid))


@router.get("/", response_model=UserListResponse)
async def list_users(
    current_user=Depends(require_admin),
    service: DashboardService = Depends(get_dashboard_service),
):
    """All users, directory identities merged with stored profiles"""
    try:
        users, source = await service.load_users()
    except DashboardUnavailable as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Error retrieving users: {e}",
        )
    return UserListResponse(users=users, total=len(users), source=source)


@router.put("/{user_id}/role", response_model=ProfileRecord)
async def update_user_role(
    user_id: str,
    payload: RoleUpdate,
    current_user=Depends(require_admin),
    firebase: FirebaseService = Depends(get_firebase_service),
):
    """
    Assign a role to a user

    - **user_id**: Directory uid of the user
    - **role**: Free-text role label (Editor, Contributor, Reader, ...)
    """
    await firebase.update(_profile_path(user_id), {"role": payload.role.strip()})
    return await _read_profile(firebase, user_id)
