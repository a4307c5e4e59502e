"""
Article request/response schemas
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from newsdesk.models.article import Article, ArticleStatus


class ArticleCreateSchema(BaseModel):
    title: str = Field(..., min_length=1, max_length=300)
    author: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1, description="Article body")
    tags: list[str] = Field(..., min_length=1)
    category: Optional[str] = None
    image_url: Optional[str] = Field(None, alias="imageUrl")
    participants: Optional[str] = None
    schedule_date: Optional[datetime] = Field(None, alias="scheduleDate")

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "title": "Elezioni comunali, i risultati",
                "author": "Redazione",
                "content": "Lo spoglio si è concluso...",
                "tags": ["Politica", "Territorio"],
                "imageUrl": "https://example.com/cover.jpg",
                "scheduleDate": "2024-10-01T08:00:00Z",
            }
        }
    )


class ArticleUpdateSchema(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=300)
    content: Optional[str] = None
    tags: Optional[list[str]] = None
    category: Optional[str] = None
    participants: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class ScheduleSchema(BaseModel):
    schedule_date: datetime = Field(..., alias="scheduleDate")

    model_config = ConfigDict(populate_by_name=True)


class ArticleResponse(BaseModel):
    article_id: str = Field(..., alias="id")
    title: str
    author: str
    content: str
    image_url: Optional[str] = Field(None, alias="imageUrl")
    tags: list[str] = Field(default_factory=list)
    category: Optional[str] = None
    participants: Optional[str] = None
    created_at: Optional[str] = Field(None, alias="createdAt")
    views: int = 0
    like_count: int = Field(0, alias="likeCount")
    share_count: int = Field(0, alias="shareCount")
    liked_by: list[str] = Field(default_factory=list, alias="likedBy")
    sensitive_tags: list[str] = Field(default_factory=list, alias="sensitiveTags")
    status: Optional[ArticleStatus] = None
    schedule_date: Optional[str] = Field(None, alias="scheduleDate")
    author_id: Optional[str] = Field(None, alias="authorId")

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_article(cls, article: Article) -> "ArticleResponse":
        return cls(
            article_id=article.article_id,
            title=article.title,
            author=article.author,
            content=article.content,
            image_url=article.image_url,
            tags=article.tags,
            category=article.primary_category or article.category,
            participants=article.participants,
            created_at=article.created_at,
            views=article.views,
            like_count=article.like_count,
            share_count=article.share_count,
            liked_by=article.liked_by,
            sensitive_tags=article.sensitive_tags,
            status=article.status,
            schedule_date=article.schedule_date,
            author_id=article.author_id,
        )


class ArticleListResponse(BaseModel):
    articles: list[ArticleResponse]
    total: int
    page: int
    page_size: int = Field(..., alias="pageSize")

    model_config = ConfigDict(populate_by_name=True)


class LikeResponse(BaseModel):
    liked: bool
    total_likes: int = Field(..., alias="totalLikes")

    model_config = ConfigDict(populate_by_name=True)


class CounterResponse(BaseModel):
    article_id: str = Field(..., alias="id")
    value: int

    model_config = ConfigDict(populate_by_name=True)
