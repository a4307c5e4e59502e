"""
Scheduled task promoting scheduled articles to published.
Runs once on startup and then every minute.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from newsdesk.models.article import ArticleStatus
from newsdesk.services.firebase_service import DatastoreError, FirebaseService
from newsdesk.utils.timestamps import parse_timestamp, utc_now

logger = logging.getLogger(__name__)

JOB_ID = "publish_scheduled_articles"


class ScheduledPublicationReconciler:
    """Flips articles whose scheduleDate has passed from scheduled to accepted."""

    def __init__(
        self,
        firebase: FirebaseService,
        articles_path: str = "articoli",
        interval_seconds: int = 60,
    ):
        self.firebase = firebase
        self.articles_path = articles_path.strip("/")
        self.interval_seconds = interval_seconds
        self.scheduler = AsyncIOScheduler()
        self.is_running = False
        self.last_run: Optional[datetime] = None
        self.last_run_status: str = "pending"
        self.last_published: int = 0

    async def _load_scheduled(self) -> Dict[str, Any]:
        try:
            return await self.firebase.read_children_equal(
                self.articles_path, "status", ArticleStatus.SCHEDULED.value
            )
        except DatastoreError as e:
            # Missing .indexOn rule or similar; the full read still works
            logger.warning("Filtered read of %s failed (%s), reading all articles",
                           self.articles_path, e)
            return await self.firebase.read(self.articles_path) or {}

    def _due_updates(self, articles: Dict[str, Any], now: datetime) -> Dict[str, Any]:
        updates: Dict[str, Any] = {}
        for article_id, article in articles.items():
            if not isinstance(article, dict):
                continue
            if article.get("status") != ArticleStatus.SCHEDULED.value:
                continue
            raw_date = article.get("scheduleDate")
            if not raw_date:
                continue
            schedule_date = parse_timestamp(raw_date)
            if schedule_date is None:
                logger.warning("Article %s has an unreadable scheduleDate %r, skipping",
                               article_id, raw_date)
                continue
            if schedule_date <= now:
                base = f"{self.articles_path}/{article_id}"
                updates[f"{base}/status"] = ArticleStatus.ACCEPTED.value
                updates[f"{base}/scheduleDate"] = None
                logger.info("Publishing scheduled article %s: %s",
                            article_id, article.get("titolo", ""))
        return updates

    async def reconcile_once(self, now: Optional[datetime] = None) -> int:
        """
        Publish every scheduled article that is due.

        All status/scheduleDate pairs go out in a single root-level
        multi-location update, so each article changes both fields together.
        Errors are logged and swallowed; the next tick starts over.

        Returns:
            Number of articles published by this run
        """
        now = now or utc_now()
        self.last_run = now
        self.last_run_status = "in_progress"
        try:
            articles = await self._load_scheduled()
            updates = self._due_updates(articles, now)
            published = len(updates) // 2
            if updates:
                await self.firebase.update("", updates)
                logger.info("Published %d scheduled article(s)", published)
            self.last_published = published
            self.last_run_status = "success"
            return published
        except Exception as e:
            logger.error("Error while publishing scheduled articles: %s", e, exc_info=True)
            self.last_published = 0
            self.last_run_status = f"error: {e}"
            return 0

    def start(self):
        """Start ticking; the first run happens immediately."""
        if self.is_running:
            logger.warning("Publication scheduler is already running")
            return

        self.scheduler.add_job(
            self.reconcile_once,
            trigger=IntervalTrigger(seconds=self.interval_seconds),
            id=JOB_ID,
            name="Publish scheduled articles",
            replace_existing=True,
            next_run_time=datetime.now(),
            max_instances=1,  # a tick still running makes the next one skip
            coalesce=True,
        )
        self.scheduler.start()
        self.is_running = True
        logger.info("Publication scheduler started (every %ss)", self.interval_seconds)

    def stop(self):
        """Stop future ticks without waiting for one in flight."""
        if not self.is_running:
            logger.warning("Publication scheduler is not running")
            return
        self.scheduler.shutdown(wait=False)
        self.is_running = False
        logger.info("Publication scheduler stopped")

    async def run_now(self) -> int:
        logger.info("Running scheduled publication check now (manual trigger)")
        return await self.reconcile_once()

    def get_status(self) -> dict:
        job = self.scheduler.get_job(JOB_ID) if self.is_running else None
        next_run = getattr(job, "next_run_time", None) if job else None
        return {
            "is_running": self.is_running,
            "interval_seconds": self.interval_seconds,
            "last_run": self.last_run.isoformat() if self.last_run else None,
            "last_run_status": self.last_run_status,
            "last_published": self.last_published,
            "next_run_time": next_run.isoformat() if next_run else None,
        }
