"""Dashboard request/response schemas"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from newsdesk.models.user import DashboardUser


class DashboardStats(BaseModel):
    total_users: int = Field(..., alias="totalUsers")
    total_articles: int = Field(..., alias="totalArticles")
    total_views: int = Field(0, alias="totalViews")
    total_likes: int = Field(0, alias="totalLikes")
    total_shares: int = Field(0, alias="totalShares")
    sensitive_tags: int = Field(0, alias="sensitiveTags")

    model_config = ConfigDict(populate_by_name=True)


class RegistrationBucket(BaseModel):
    month: str
    year: int
    key: str
    count: int = 0


class DashboardDebug(BaseModel):
    user_count: int = Field(..., alias="userCount")
    article_count: int = Field(..., alias="articleCount")
    recent_user_count: int = Field(..., alias="recentUserCount")
    has_sensitive_content: bool = Field(..., alias="hasSensitiveContent")
    user_source: str = Field(..., alias="userSource")

    model_config = ConfigDict(populate_by_name=True)


class DashboardSnapshot(BaseModel):
    stats: DashboardStats
    recent_users: List[DashboardUser] = Field(default_factory=list, alias="recentUsers")
    users: List[DashboardUser] = Field(default_factory=list)
    category_counts: Dict[str, int] = Field(default_factory=dict, alias="categoryCounts")
    tag_counts: Dict[str, int] = Field(default_factory=dict, alias="tagCounts")
    registration_chart_data: List[RegistrationBucket] = Field(
        default_factory=list, alias="registrationChartData"
    )
    demo: bool = False
    debug: Optional[DashboardDebug] = None

    model_config = ConfigDict(populate_by_name=True)


class UserCountResponse(BaseModel):
    count: int
    success: bool = True


class ErrorResponse(BaseModel):
    error: str
    message: str
    success: Optional[bool] = None
