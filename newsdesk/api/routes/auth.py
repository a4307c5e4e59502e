"""
Authentication action endpoints

Verification and password reset are performed by Firebase; these routes only
hand out action links and dispatch users arriving from them.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import RedirectResponse
from pydantic import BaseModel, Field

from newsdesk.config import settings
from newsdesk.dependencies import get_firebase_service, require_admin
from newsdesk.services.auth_actions import resolve_auth_action
from newsdesk.services.firebase_service import DirectoryError, FirebaseService

router = APIRouter(tags=["Authentication"])
logger = logging.getLogger(__name__)


class ActionLinkRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=320)


class ActionLinkResponse(BaseModel):
    link: str


def _continue_url(page: str) -> str:
    return f"{settings.APP_BASE_URL.rstrip('/')}{page}"


@router.get("/auth-action", include_in_schema=False)
async def auth_action(request: Request):
    """Redirect an email action link to the verification or reset page"""
    params = dict(request.query_params)
    target = resolve_auth_action(params)
    logger.info("Auth action mode=%r redirected to %s", params.get("mode"), target.split("?")[0])
    return RedirectResponse(url=target, status_code=status.HTTP_303_SEE_OTHER)


@router.post("/api/auth/password-reset-link", response_model=ActionLinkResponse)
async def password_reset_link(
    payload: ActionLinkRequest,
    current_user=Depends(require_admin),
    firebase: FirebaseService = Depends(get_firebase_service),
):
    try:
        link = await firebase.password_reset_link(payload.email, _continue_url("/access"))
    except DirectoryError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return ActionLinkResponse(link=link)


@router.post("/api/auth/email-verification-link", response_model=ActionLinkResponse)
async def email_verification_link(
    payload: ActionLinkRequest,
    current_user=Depends(require_admin),
    firebase: FirebaseService = Depends(get_firebase_service),
):
    try:
        link = await firebase.email_verification_link(payload.email, _continue_url("/"))
    except DirectoryError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return ActionLinkResponse(link=link)
