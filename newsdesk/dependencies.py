"""
FastAPI dependency injection for authentication and services
"""

import logging
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from newsdesk.config import settings
from newsdesk.models.user import AuthenticatedUser
from newsdesk.services.dashboard_service import DashboardService
from newsdesk.services.firebase_service import FirebaseService
from newsdesk.services.publication_scheduler import ScheduledPublicationReconciler

logger = logging.getLogger(__name__)

# Security scheme for Firebase ID tokens
security = HTTPBearer(auto_error=False)


def get_firebase_service(request: Request) -> FirebaseService:
    """The FirebaseService created at startup"""
    firebase = getattr(request.app.state, "firebase", None)
    if firebase is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Datastore not initialized",
        )
    return firebase


def get_dashboard_service(
    firebase: FirebaseService = Depends(get_firebase_service),
) -> DashboardService:
    return DashboardService(
        firebase,
        articles_path=settings.ARTICLES_PATH,
        legacy_user_paths=settings.legacy_user_paths_list,
        list_users_limit=settings.AUTH_LIST_USERS_LIMIT,
        recent_users_limit=settings.RECENT_USERS_LIMIT,
        demo_mode=settings.DEMO_MODE,
    )


def get_reconciler(request: Request) -> ScheduledPublicationReconciler:
    reconciler = getattr(request.app.state, "reconciler", None)
    if reconciler is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Publication scheduler not initialized",
        )
    return reconciler


def _principal(claims: dict) -> AuthenticatedUser:
    email = claims.get("email")
    verified = bool(claims.get("email_verified", False))
    is_admin = bool(email) and verified and email.lower() in settings.admin_emails_list
    return AuthenticatedUser(
        uid=claims["uid"], email=email, email_verified=verified, is_admin=is_admin
    )


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    firebase: FirebaseService = Depends(get_firebase_service),
) -> AuthenticatedUser:
    """
    Dependency to get the current authenticated user from a Firebase ID token

    Raises:
        HTTPException: If the token is missing or invalid
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if not credentials or not credentials.credentials:
        raise credentials_exception

    try:
        claims = await firebase.verify_id_token(credentials.credentials)
    except ValueError as e:
        logger.info("ID token rejected: %s", e)
        raise credentials_exception

    if not claims.get("uid"):
        raise credentials_exception
    return _principal(claims)


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    firebase: FirebaseService = Depends(get_firebase_service),
) -> Optional[AuthenticatedUser]:
    """Like get_current_user, but anonymous callers get None"""
    if not credentials:
        return None
    try:
        return await get_current_user(credentials, firebase)
    except HTTPException:
        return None


async def require_admin(
    current_user: AuthenticatedUser = Depends(get_current_user),
) -> AuthenticatedUser:
    """Require a verified editor email listed in ADMIN_EMAILS"""
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Insufficient permissions. Editor access required",
        )
    return current_user
