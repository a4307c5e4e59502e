"""Publication scheduler status and manual trigger"""

from fastapi import APIRouter, Depends

from newsdesk.dependencies import get_reconciler, require_admin
from newsdesk.services.publication_scheduler import ScheduledPublicationReconciler

router = APIRouter(prefix="/api/scheduler", tags=["Scheduler"])


@router.get("/status")
async def scheduler_status(
    current_user=Depends(require_admin),
    reconciler: ScheduledPublicationReconciler = Depends(get_reconciler),
):
    return reconciler.get_status()


@router.post("/run")
async def run_scheduler(
    current_user=Depends(require_admin),
    reconciler: ScheduledPublicationReconciler = Depends(get_reconciler),
):
    """Publish due articles now instead of waiting for the next tick"""
    published = await reconciler.run_now()
    return {"published": published, "status": reconciler.get_status()}
