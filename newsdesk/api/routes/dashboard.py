"""Dashboard endpoints: analytics snapshot and user count"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from newsdesk.dependencies import get_dashboard_service, require_admin
from newsdesk.schemas.dashboard import DashboardSnapshot, ErrorResponse, UserCountResponse
from newsdesk.services.dashboard_service import DashboardService

router = APIRouter(prefix="/api", tags=["Dashboard"])
logger = logging.getLogger(__name__)


@router.get(
    "/dashboard",
    response_model=DashboardSnapshot,
    responses={500: {"model": ErrorResponse}},
)
async def dashboard(
    current_user=Depends(require_admin),
    service: DashboardService = Depends(get_dashboard_service),
):
    """Full analytics snapshot, computed on every request."""
    try:
        return await service.build_snapshot()
    except Exception as e:
        logger.error("Error fetching dashboard data: %s", e, exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Error fetching dashboard data", "message": str(e)},
        )


@router.get(
    "/user-count",
    response_model=UserCountResponse,
    responses={500: {"model": ErrorResponse}},
)
async def user_count(service: DashboardService = Depends(get_dashboard_service)):
    """Number of accounts in the authentication directory."""
    try:
        count = await service.count_users()
    except Exception as e:
        logger.error("Error fetching user count: %s", e, exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "Error fetching user count",
                "message": str(e),
                "success": False,
            },
        )
    return UserCountResponse(count=count, success=True)
