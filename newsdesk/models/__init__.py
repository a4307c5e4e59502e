"""
Data models for Newsdesk
"""

from newsdesk.models.article import Article, ArticleStatus
from newsdesk.models.user import AuthenticatedUser, DashboardUser, DirectoryUser, ProfileRecord

__all__ = [
    "Article",
    "ArticleStatus",
    "AuthenticatedUser",
    "DashboardUser",
    "DirectoryUser",
    "ProfileRecord",
]
