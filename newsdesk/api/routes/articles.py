"""Articles API routes"""

import logging
import uuid
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import ValidationError

from newsdesk.config import settings
from newsdesk.dependencies import (
    get_current_user,
    get_firebase_service,
    get_optional_user,
    require_admin,
)
from newsdesk.models.article import (
    Article,
    ArticleStatus,
    article_model_to_datastore,
    datastore_article_to_model,
    join_tags,
)
from newsdesk.models.user import AuthenticatedUser
from newsdesk.schemas.article import (
    ArticleCreateSchema,
    ArticleListResponse,
    ArticleResponse,
    ArticleUpdateSchema,
    CounterResponse,
    LikeResponse,
    ScheduleSchema,
)
from newsdesk.services.firebase_service import FirebaseService
from newsdesk.utils.timestamps import parse_timestamp, to_iso, utc_now

router = APIRouter(prefix="/api/articles", tags=["Articles"])
logger = logging.getLogger(__name__)


class ArticleNotFound(Exception):
    pass


def _article_path(article_id: str) -> str:
    return f"{settings.ARTICLES_PATH}/{article_id}"


def _newest_first(articles: List[Article]) -> List[Article]:
    def key(article: Article) -> float:
        created = parse_timestamp(article.created_at)
        return created.timestamp() if created else 0.0

    return sorted(articles, key=key, reverse=True)


async def _load_articles(firebase: FirebaseService) -> List[Article]:
    data = await firebase.read(settings.ARTICLES_PATH) or {}
    articles = []
    for article_id, doc in data.items():
        if not isinstance(doc, dict):
            continue
        try:
            articles.append(datastore_article_to_model(doc, article_id))
        except ValidationError as e:
            logger.warning("Skipping malformed article %s: %s", article_id, e)
    return articles


async def _load_article(firebase: FirebaseService, article_id: str) -> Article:
    not_found = HTTPException(
        status_code=status.HTTP_404_NOT_FOUND, detail="Article not found"
    )
    doc = await firebase.read(_article_path(article_id))
    if not isinstance(doc, dict):
        raise not_found
    try:
        return datastore_article_to_model(doc, article_id)
    except ValidationError as e:
        # hidden from listings too
        logger.warning("Malformed article %s: %s", article_id, e)
        raise not_found


def _toggle_like(uid: str):
    """Transaction body adding or removing `uid` from an article's likes"""

    def apply(current: Any) -> dict:
        if not isinstance(current, dict):
            raise ArticleNotFound()
        likes = current.get("likes") or []
        if isinstance(likes, dict):
            likes = list(likes.values())
        likes = [like for like in likes if like]
        try:
            upvotes = int(current.get("upvote") or 0)
        except (TypeError, ValueError):
            upvotes = 0

        if uid in likes:
            likes.remove(uid)
            upvotes = max(upvotes - 1, 0)
        else:
            likes.append(uid)
            upvotes += 1
        return {**current, "likes": likes, "upvote": upvotes}

    return apply


@router.get("/", response_model=ArticleListResponse)
async def list_articles(
    q: Optional[str] = Query(None),
    tag: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    pageSize: int = Query(20, ge=1, le=100),
    firebase: FirebaseService = Depends(get_firebase_service),
):
    """List published articles, newest first"""
    items = [a for a in await _load_articles(firebase) if a.is_published]

    if q:
        needle = q.lower()
        items = [a for a in items if needle in f"{a.title} {a.content}".lower()]
    if tag:
        wanted = tag.strip().lower()
        items = [a for a in items if wanted in (t.lower() for t in a.tags)]

    items = _newest_first(items)
    start = (page - 1) * pageSize
    return ArticleListResponse(
        articles=[ArticleResponse.from_article(a) for a in items[start:start + pageSize]],
        total=len(items),
        page=page,
        page_size=pageSize,
    )


@router.get("/favorites", response_model=List[ArticleResponse])
async def list_favorites(
    current_user: AuthenticatedUser = Depends(get_current_user),
    firebase: FirebaseService = Depends(get_firebase_service),
):
    """Articles the caller has liked"""
    liked = [a for a in await _load_articles(firebase) if current_user.uid in a.liked_by]
    return [ArticleResponse.from_article(a) for a in _newest_first(liked)]


@router.get("/review", response_model=List[ArticleResponse])
async def list_pending_review(
    current_user=Depends(require_admin),
    firebase: FirebaseService = Depends(get_firebase_service),
):
    pending = [a for a in await _load_articles(firebase) if a.status == ArticleStatus.REVISION]
    return [ArticleResponse.from_article(a) for a in _newest_first(pending)]


@router.get("/scheduled", response_model=List[ArticleResponse])
async def list_scheduled(
    current_user=Depends(require_admin),
    firebase: FirebaseService = Depends(get_firebase_service),
):
    scheduled = [a for a in await _load_articles(firebase) if a.status == ArticleStatus.SCHEDULED]
    scheduled.sort(key=lambda a: a.schedule_date or "")
    return [ArticleResponse.from_article(a) for a in scheduled]


@router.get("/{article_id}", response_model=ArticleResponse)
async def get_article(
    article_id: str,
    current_user: Optional[AuthenticatedUser] = Depends(get_optional_user),
    firebase: FirebaseService = Depends(get_firebase_service),
):
    article = await _load_article(firebase, article_id)
    # unpublished articles are only visible to editors
    if not article.is_published and not (current_user and current_user.is_admin):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not allowed to view unpublished article",
        )
    return ArticleResponse.from_article(article)


@router.post("/", response_model=ArticleResponse, status_code=status.HTTP_201_CREATED)
async def create_article(
    payload: ArticleCreateSchema,
    current_user: AuthenticatedUser = Depends(get_current_user),
    firebase: FirebaseService = Depends(get_firebase_service),
):
    """
    Create an article.

    Editors publish directly, or schedule when `scheduleDate` lies in the
    future. Everybody else submits the article for review.
    """
    now = utc_now()
    schedule_at = parse_timestamp(payload.schedule_date)

    if not current_user.is_admin:
        article_status, schedule_date = ArticleStatus.REVISION, None
    elif schedule_at and schedule_at > now:
        article_status, schedule_date = ArticleStatus.SCHEDULED, to_iso(schedule_at)
    else:
        article_status, schedule_date = ArticleStatus.ACCEPTED, None

    article = Article(
        article_id=str(uuid.uuid4()),
        title=payload.title,
        author=payload.author,
        content=payload.content,
        image_url=payload.image_url or "",
        tag=join_tags(payload.tags),
        primary_category=(payload.category or "").strip() or None,
        participants=payload.participants or "",
        created_at=to_iso(now),
        status=article_status,
        schedule_date=schedule_date,
        author_id=current_user.uid,
    )

    await firebase.set(_article_path(article.article_id), article_model_to_datastore(article))
    logger.info("Article %s created by %s with status %s",
                article.article_id, current_user.uid, article.status.value)
    return ArticleResponse.from_article(article)


@router.put("/{article_id}", response_model=ArticleResponse)
async def update_article(
    article_id: str,
    payload: ArticleUpdateSchema,
    current_user=Depends(require_admin),
    firebase: FirebaseService = Depends(get_firebase_service),
):
    await _load_article(firebase, article_id)

    update_data = {}
    if payload.title is not None:
        update_data["titolo"] = payload.title
    if payload.content is not None:
        update_data["contenuto"] = payload.content
    if payload.tags is not None:
        update_data["tag"] = join_tags(payload.tags)
    if payload.category is not None:
        update_data["categoria"] = payload.category.strip() or None
    if payload.participants is not None:
        update_data["partecipanti"] = payload.participants

    await firebase.update(_article_path(article_id), update_data)
    return ArticleResponse.from_article(await _load_article(firebase, article_id))


@router.delete("/{article_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_article(
    article_id: str,
    current_user=Depends(require_admin),
    firebase: FirebaseService = Depends(get_firebase_service),
):
    await _load_article(firebase, article_id)
    await firebase.delete(_article_path(article_id))
    logger.info("Article %s deleted by %s", article_id, current_user.uid)
    return None


async def _set_status(
    firebase: FirebaseService,
    article_id: str,
    new_status: ArticleStatus,
    schedule_date: Optional[str] = None,
) -> ArticleResponse:
    await _load_article(firebase, article_id)
    # scheduleDate only exists while scheduled; both fields go in one update
    await firebase.update(
        _article_path(article_id),
        {"status": new_status.value, "scheduleDate": schedule_date},
    )
    return ArticleResponse.from_article(await _load_article(firebase, article_id))


@router.post("/{article_id}/accept", response_model=ArticleResponse)
async def accept_article(
    article_id: str,
    current_user=Depends(require_admin),
    firebase: FirebaseService = Depends(get_firebase_service),
):
    return await _set_status(firebase, article_id, ArticleStatus.ACCEPTED)


@router.post("/{article_id}/reject", response_model=ArticleResponse)
async def reject_article(
    article_id: str,
    current_user=Depends(require_admin),
    firebase: FirebaseService = Depends(get_firebase_service),
):
    return await _set_status(firebase, article_id, ArticleStatus.REJECTED)


@router.post("/{article_id}/schedule", response_model=ArticleResponse)
async def schedule_article(
    article_id: str,
    payload: ScheduleSchema,
    current_user=Depends(require_admin),
    firebase: FirebaseService = Depends(get_firebase_service),
):
    """Publish automatically once `scheduleDate` has passed"""
    when = parse_timestamp(payload.schedule_date)
    return await _set_status(firebase, article_id, ArticleStatus.SCHEDULED, to_iso(when))


@router.post("/{article_id}/view", response_model=CounterResponse)
async def record_view(
    article_id: str,
    current_user: AuthenticatedUser = Depends(get_current_user),
    firebase: FirebaseService = Depends(get_firebase_service),
):
    await _load_article(firebase, article_id)
    views = await firebase.increment(f"{_article_path(article_id)}/view")
    return CounterResponse(article_id=article_id, value=views)


@router.post("/{article_id}/share", response_model=CounterResponse)
async def record_share(
    article_id: str,
    current_user: AuthenticatedUser = Depends(get_current_user),
    firebase: FirebaseService = Depends(get_firebase_service),
):
    await _load_article(firebase, article_id)
    shares = await firebase.increment(f"{_article_path(article_id)}/shared")
    return CounterResponse(article_id=article_id, value=shares)


@router.post("/{article_id}/like", response_model=LikeResponse)
async def toggle_like(
    article_id: str,
    current_user: AuthenticatedUser = Depends(get_current_user),
    firebase: FirebaseService = Depends(get_firebase_service),
):
    try:
        result = await firebase.transaction(
            _article_path(article_id), _toggle_like(current_user.uid)
        )
    except ArticleNotFound:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Article not found"
        )
    return LikeResponse(
        liked=current_user.uid in result["likes"], total_likes=result["upvote"]
    )
