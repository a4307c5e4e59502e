"""
Article model and datastore conversion helpers

Articles live under `articoli/{id}` in the Realtime Database and keep the
field names the editorial frontend has always written (titolo, contenuto,
upvote, ...). The model maps them to English attribute names.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ArticleStatus(str, Enum):
    """Article lifecycle states"""

    REVISION = "revision"
    SCHEDULED = "scheduled"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


UNCATEGORIZED = "Non categorizzato"


def split_tags(tag_field: Optional[str]) -> list[str]:
    """Split the comma separated `tag` string, dropping empty entries"""
    if not tag_field:
        return []
    return [t.strip() for t in tag_field.split(",") if t.strip()]


def join_tags(tags: list[str]) -> str:
    return ", ".join(t.strip() for t in tags if t and t.strip())


class Article(BaseModel):
    article_id: str = Field(..., alias="uuid")
    title: str = Field("", alias="titolo")
    author: str = Field("", alias="autore")
    content: str = Field("", alias="contenuto")
    image_url: Optional[str] = Field(None, alias="immagine")
    tag: Optional[str] = None
    primary_category: Optional[str] = Field(None, alias="categoria")
    category: Optional[str] = None
    participants: Optional[str] = Field(None, alias="partecipanti")
    created_at: Optional[str] = Field(None, alias="creazione")
    views: int = Field(0, alias="view")
    like_count: int = Field(0, alias="upvote")
    share_count: int = Field(0, alias="shared")
    liked_by: list[str] = Field(default_factory=list, alias="likes")
    sensitive_tags: list[str] = Field(default_factory=list, alias="sensitiveTags")
    status: Optional[ArticleStatus] = None
    schedule_date: Optional[str] = Field(None, alias="scheduleDate")
    author_id: Optional[str] = Field(None, alias="userId")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("views", "like_count", "share_count", mode="before")
    @classmethod
    def _counter(cls, v: Any) -> int:
        if isinstance(v, bool):
            return 0
        try:
            return max(int(v or 0), 0)
        except (TypeError, ValueError):
            return 0

    @field_validator("liked_by", "sensitive_tags", mode="before")
    @classmethod
    def _string_list(cls, v: Any) -> list:
        # The database turns arrays into {index: value} maps once an element is removed
        if isinstance(v, dict):
            v = list(v.values())
        if not isinstance(v, list):
            return []
        return [str(item) for item in v if item is not None]

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, v: Any):
        if v in (None, ""):
            return None
        try:
            return ArticleStatus(v)
        except ValueError:
            return None

    @property
    def tags(self) -> list[str]:
        return split_tags(self.tag)

    @property
    def is_published(self) -> bool:
        # Records written before statuses existed have none and are public
        return self.status is None or self.status == ArticleStatus.ACCEPTED


def datastore_article_to_model(data: dict, article_id: str) -> Article:
    return Article.model_validate({**data, "uuid": article_id})


def article_model_to_datastore(article: Article) -> dict:
    # the database drops null children anyway
    return article.model_dump(by_alias=True, mode="json", exclude_none=True)
