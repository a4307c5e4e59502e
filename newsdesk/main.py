"""
Newsdesk Backend - Main FastAPI Application
"""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from newsdesk.api.routes import articles, auth, dashboard, scheduler, users
from newsdesk.config import settings
from newsdesk.services.firebase_service import DatastoreError, FirebaseService
from newsdesk.services.publication_scheduler import ScheduledPublicationReconciler

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


# Define lifespan context manager for startup/shutdown
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan handler for startup and shutdown events"""
    # Startup
    logger.info("Starting %s v%s", settings.APP_NAME, settings.APP_VERSION)
    if settings.DEMO_MODE:
        logger.warning("DEMO_MODE is on: the dashboard may show placeholder users")

    firebase = FirebaseService.from_settings(settings)
    reconciler = ScheduledPublicationReconciler(
        firebase,
        articles_path=settings.ARTICLES_PATH,
        interval_seconds=settings.SCHEDULE_CHECK_INTERVAL_SECONDS,
    )
    app.state.firebase = firebase
    app.state.reconciler = reconciler

    try:
        if settings.SCHEDULER_ENABLED:
            reconciler.start()
        else:
            logger.info("Scheduled publication disabled in settings")

        yield
    finally:
        # Shutdown
        logger.info("Shutting down %s", settings.APP_NAME)
        if reconciler.is_running:
            reconciler.stop()
        firebase.close()


# Create FastAPI application with lifespan
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Newsdesk Backend API - articles, editorial dashboard and scheduled publishing",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)


# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request timing middleware
@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    """Add processing time to response headers"""
    start_time = time.time()
    response = await call_next(request)
    response.headers["X-Process-Time"] = str(time.time() - start_time)
    return response


@app.exception_handler(DatastoreError)
async def datastore_exception_handler(request: Request, exc: DatastoreError):
    logger.error("Datastore failure on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=503,
        content={
            "detail": "Datastore unavailable",
            "message": str(exc) if settings.DEBUG else "Please retry later",
        },
    )


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions"""
    logger.exception("Unhandled error on %s", request.url.path)
    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "message": str(exc) if settings.DEBUG else "An error occurred",
        },
    )


app.include_router(auth.router)
app.include_router(users.router)
app.include_router(articles.router)
app.include_router(dashboard.router)
app.include_router(scheduler.router)


# Health check endpoint
@app.get("/", tags=["Health"])
async def root():
    """Root endpoint - API health check"""
    return {
        "status": "online",
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
    }


@app.get("/health", tags=["Health"])
async def health_check(request: Request):
    """Detailed health check endpoint"""
    reconciler = getattr(request.app.state, "reconciler", None)
    return {
        "status": "healthy",
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "datastore_configured": bool(settings.FIREBASE_DATABASE_URL),
        "demo_mode": settings.DEMO_MODE,
        "scheduler_running": bool(reconciler and reconciler.is_running),
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "newsdesk.main:app", host=settings.HOST, port=settings.PORT, reload=settings.DEBUG
    )
