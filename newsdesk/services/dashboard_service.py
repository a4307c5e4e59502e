"""
Dashboard aggregation: user merge, article statistics and chart data.

The module-level functions are pure and operate on already fetched data;
DashboardService does the fetching, including the fallbacks used when the
authentication directory or the profile paths are unavailable.
"""

import logging
from collections import Counter
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from pydantic import ValidationError

from newsdesk.models.article import UNCATEGORIZED
from newsdesk.models.user import (
    MISSING_EMAIL,
    DashboardUser,
    ProfileRecord,
    merge_user,
    normalize_directory_user,
    profile_to_dashboard_user,
)
from newsdesk.schemas.dashboard import (
    DashboardDebug,
    DashboardSnapshot,
    DashboardStats,
    RegistrationBucket,
)
from newsdesk.services.demo_data import demo_users
from newsdesk.services.firebase_service import DatastoreError, DirectoryError, FirebaseService
from newsdesk.utils.timestamps import parse_timestamp, to_iso, utc_now

logger = logging.getLogger(__name__)

UNNAMED_USER = "Utente senza nome"

# it-IT short month names, as the dashboard chart labels them
MONTH_LABELS = ("gen", "feb", "mar", "apr", "mag", "giu",
                "lug", "ago", "set", "ott", "nov", "dic")

# Stored counter names, current name first
VIEW_FIELDS = ("view", "views")
LIKE_FIELDS = ("upvote", "likeCount")
SHARE_FIELDS = ("shared", "shareCount")


class DashboardUnavailable(Exception):
    """No data source could provide the snapshot"""


# ============================================
# USERS
# ============================================

def collect_profile_records(snapshots: Sequence[Optional[Dict[str, Any]]]) -> Dict[str, ProfileRecord]:
    """
    Merge the contents of every legacy profile path into one lookup table.

    `snapshots` must be in probe order; a uid found in a later path replaces
    the record from an earlier one.
    """
    profiles: Dict[str, ProfileRecord] = {}
    for snapshot in snapshots:
        if not isinstance(snapshot, dict):
            continue
        for uid, data in snapshot.items():
            if not isinstance(data, dict):
                continue
            try:
                profiles[uid] = ProfileRecord.model_validate({**data, "uid": uid})
            except ValidationError as e:
                logger.warning("Skipping malformed profile %s: %s", uid, e)
    return profiles


def merge_users(
    directory_users: Iterable[DashboardUser], profiles: Dict[str, ProfileRecord]
) -> List[DashboardUser]:
    return [merge_user(user, profiles.get(user.id)) for user in directory_users]


def _created_sort_key(user: DashboardUser) -> float:
    parsed = parse_timestamp(user.created_at)
    return parsed.timestamp() if parsed else 0.0


def recent_users(
    users: Sequence[DashboardUser], limit: int = 10, now: Optional[datetime] = None
) -> List[DashboardUser]:
    """Newest registrations first, with placeholders for missing fields"""
    now = now or utc_now()
    newest = sorted(users, key=_created_sort_key, reverse=True)[:limit]
    return [
        user.model_copy(
            update={
                "display_name": user.display_name or UNNAMED_USER,
                "email": user.email or MISSING_EMAIL,
                "created_at": user.created_at or to_iso(now),
            }
        )
        for user in newest
    ]


def registration_histogram(users: Iterable[DashboardUser], now: datetime) -> List[RegistrationBucket]:
    """
    Count registrations per calendar month over the trailing 12 months.

    Buckets run oldest to newest and end with the month of `now`. Users whose
    createdAt cannot be parsed are skipped.
    """
    buckets: List[RegistrationBucket] = []
    for offset in range(11, -1, -1):
        month_index = now.year * 12 + (now.month - 1) - offset
        year, month = divmod(month_index, 12)
        buckets.append(
            RegistrationBucket(
                month=MONTH_LABELS[month],
                year=year,
                key=f"{year}-{month + 1}",
            )
        )

    by_key = {bucket.key: bucket for bucket in buckets}
    for user in users:
        created = parse_timestamp(user.created_at)
        if created is None:
            logger.warning("Skipping user %s: unreadable createdAt %r", user.id, user.created_at)
            continue
        bucket = by_key.get(f"{created.year}-{created.month}")
        if bucket is not None:
            bucket.count += 1
    return buckets


# ============================================
# ARTICLES
# ============================================

def _number(article: Dict[str, Any], fields: Tuple[str, ...]) -> int:
    for field in fields:
        value = article.get(field)
        if value is None or isinstance(value, bool):
            continue
        try:
            return int(value)
        except (TypeError, ValueError):
            continue
    return 0


def article_totals(articles: Sequence[Dict[str, Any]]) -> Dict[str, int]:
    return {
        "total_views": sum(_number(a, VIEW_FIELDS) for a in articles),
        "total_likes": sum(_number(a, LIKE_FIELDS) for a in articles),
        "total_shares": sum(_number(a, SHARE_FIELDS) for a in articles),
        "sensitive_tags": sum(
            1 for a in articles
            if isinstance(a.get("sensitiveTags"), list) and a["sensitiveTags"]
        ),
    }


def classify_article(article: Dict[str, Any]) -> Tuple[str, List[str]]:
    """
    Resolve an article's category, first match wins:

    1. `categoria`
    2. `category`
    3. the first entry of the comma separated `tag` string; every entry
       also counts as a tag
    4. "Non categorizzato"

    Returns:
        (category, tags) where tags is only non-empty for rule 3
    """
    primary = article.get("categoria")
    if isinstance(primary, str) and primary:
        return primary.strip() or UNCATEGORIZED, []

    alternate = article.get("category")
    if isinstance(alternate, str) and alternate:
        return alternate.strip() or UNCATEGORIZED, []

    tag_field = article.get("tag")
    if isinstance(tag_field, str) and tag_field:
        parts = [part.strip() for part in tag_field.split(",")]
        tags = [part for part in parts if part]
        return parts[0] or UNCATEGORIZED, tags

    return UNCATEGORIZED, []


def count_categories(articles: Iterable[Dict[str, Any]]) -> Tuple[Dict[str, int], Dict[str, int]]:
    categories: Counter = Counter()
    tags: Counter = Counter()
    for article in articles:
        category, article_tags = classify_article(article)
        categories[category] += 1
        tags.update(article_tags)
    return dict(categories), dict(tags)


# ============================================
# ORCHESTRATION
# ============================================

class DashboardService:
    """Builds dashboard snapshots from the directory and the datastore"""

    def __init__(
        self,
        firebase: FirebaseService,
        articles_path: str = "articoli",
        legacy_user_paths: Sequence[str] = ("utenti", "users", "user"),
        list_users_limit: int = 1000,
        recent_users_limit: int = 10,
        demo_mode: bool = False,
    ):
        self.firebase = firebase
        self.articles_path = articles_path
        self.legacy_user_paths = list(legacy_user_paths)
        self.list_users_limit = list_users_limit
        self.recent_users_limit = recent_users_limit
        self.demo_mode = demo_mode

    async def _read_profile_paths(self) -> List[Optional[Dict[str, Any]]]:
        snapshots = []
        for path in self.legacy_user_paths:
            try:
                snapshot = await self.firebase.read(path)
            except DatastoreError as e:
                logger.warning("Could not read profiles from %s: %s", path, e)
                continue
            if isinstance(snapshot, dict) and snapshot:
                logger.info("Found %d profile entries in %s", len(snapshot), path)
                snapshots.append(snapshot)
        return snapshots

    async def _users_from_directory(self, now: datetime) -> List[DashboardUser]:
        directory = await self.firebase.list_directory_users(self.list_users_limit)
        logger.info("Retrieved %d users from the authentication directory", len(directory))
        profiles = collect_profile_records(await self._read_profile_paths())
        return merge_users((normalize_directory_user(u, now) for u in directory), profiles)

    async def _users_from_profiles(self, now: datetime) -> Tuple[List[DashboardUser], bool]:
        """
        First legacy path holding any users wins.

        Returns:
            (users, reachable) where reachable is False when every path failed
        """
        reachable = False
        for path in self.legacy_user_paths:
            try:
                snapshot = await self.firebase.read(path)
            except DatastoreError as e:
                logger.warning("Could not read users from %s: %s", path, e)
                continue
            reachable = True
            profiles = collect_profile_records([snapshot])
            if profiles:
                logger.info("Retrieved %d users from %s", len(profiles), path)
                return [profile_to_dashboard_user(p, now) for p in profiles.values()], True
        return [], reachable

    async def load_users(self, now: Optional[datetime] = None) -> Tuple[List[DashboardUser], str]:
        """
        Returns:
            (users, source) with source one of "directory", "profiles",
            "demo" or "none"

        Raises:
            DashboardUnavailable: no source could be read and demo mode is off
        """
        now = now or utc_now()
        try:
            users, source, reachable = await self._users_from_directory(now), "directory", True
        except DirectoryError as e:
            logger.error("Authentication directory unavailable: %s", e)
            logger.info("Falling back to database-only user lookup")
            users, reachable = await self._users_from_profiles(now)
            source = "profiles"

        if users:
            return users, source

        if self.demo_mode:
            logger.warning("No users found, serving demo placeholder users (DEMO_MODE)")
            return demo_users(now), "demo"
        if not reachable:
            raise DashboardUnavailable("No user source could be reached")
        return [], "none"

    async def load_articles(self) -> List[Dict[str, Any]]:
        try:
            data = await self.firebase.read(self.articles_path) or {}
        except DatastoreError as e:
            raise DashboardUnavailable(str(e)) from e
        if not isinstance(data, dict):
            return []
        return [{**article, "id": article_id} for article_id, article in data.items()
                if isinstance(article, dict)]

    async def build_snapshot(self, now: Optional[datetime] = None) -> DashboardSnapshot:
        now = now or utc_now()
        users, source = await self.load_users(now)
        articles = await self.load_articles()
        logger.info("Aggregating %d users and %d articles", len(users), len(articles))

        totals = article_totals(articles)
        categories, tags = count_categories(articles)
        recent = recent_users(users, self.recent_users_limit, now)

        return DashboardSnapshot(
            stats=DashboardStats(
                total_users=len(users),
                total_articles=len(articles),
                **totals,
            ),
            recent_users=recent,
            users=users,
            category_counts=categories,
            tag_counts=tags,
            registration_chart_data=registration_histogram(users, now),
            demo=source == "demo",
            debug=DashboardDebug(
                user_count=len(users),
                article_count=len(articles),
                recent_user_count=len(recent),
                has_sensitive_content=totals["sensitive_tags"] > 0,
                user_source=source,
            ),
        )

    async def count_users(self) -> int:
        return len(await self.firebase.list_directory_users(self.list_users_limit))
