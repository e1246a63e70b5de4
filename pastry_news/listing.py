"""
In-memory filtering, sorting and pagination over records pulled from the store.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Sequence, TypeVar

from pastry_news.records import (
    Article,
    ArticleStatus,
    Category,
    User,
    UserRole,
    parse_timestamp,
)
from pastry_news.text_utils import matches_search

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 50
SORT_OPTIONS = ("newest", "latest", "oldest", "popular", "featured", "title")
RECENT_LIMIT = 5

T = TypeVar("T")

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


@dataclass
class Pagination:
    current_page: int
    total_pages: int
    total: int
    has_next: bool
    has_prev: bool

    def as_dict(self) -> dict:
        return {
            "currentPage": self.current_page,
            "totalPages": self.total_pages,
            "total": self.total,
            "hasNext": self.has_next,
            "hasPrev": self.has_prev,
        }


def is_publicly_visible(article: Article, now: Optional[datetime] = None) -> bool:
    if article.status != ArticleStatus.PUBLISHED:
        return False
    published_at = parse_timestamp(article.published_at)
    if published_at is None:
        return False
    return published_at <= (now or datetime.now(timezone.utc))


def filter_articles(
    articles: Sequence[Article],
    *,
    category: Optional[str] = None,
    author: Optional[str] = None,
    tag: Optional[str] = None,
    search: Optional[str] = None,
    status: Optional[str] = None,
) -> list[Article]:
    results = list(articles)
    if status:
        results = [a for a in results if a.status == status]
    if category:
        results = [a for a in results if a.category == category]
    if author:
        results = [a for a in results if a.author == author]
    if tag:
        wanted = tag.strip().lower()
        results = [a for a in results if wanted in (a.tags or [])]
    if search and search.strip():
        results = [
            a for a in results if matches_search(search, a.title, a.excerpt, a.content)
        ]
    return results


def _published_key(article: Article) -> datetime:
    return parse_timestamp(article.published_at) or _EPOCH


def sort_articles(articles: Sequence[Article], sort: str = "newest") -> list[Article]:
    results = list(articles)
    if sort == "oldest":
        results.sort(key=_published_key)
    elif sort == "popular":
        results.sort(key=lambda a: a.view_count or 0, reverse=True)
    elif sort == "featured":
        # Stable sorts: newest first, then featured ahead of the rest.
        results.sort(key=_published_key, reverse=True)
        results.sort(key=lambda a: not a.is_featured)
    elif sort == "title":
        results.sort(key=lambda a: (a.title or "").casefold())
    else:
        results.sort(key=_published_key, reverse=True)
    return results


def paginate(items: Sequence[T], page: int = 1, limit: int = DEFAULT_PAGE_SIZE) -> tuple[list[T], Pagination]:
    page = max(1, page)
    limit = max(1, limit)
    total = len(items)
    total_pages = math.ceil(total / limit)
    offset = (page - 1) * limit
    pagination = Pagination(
        current_page=page,
        total_pages=total_pages,
        total=total,
        has_next=page < total_pages,
        has_prev=page > 1,
    )
    return list(items[offset : offset + limit]), pagination


def count_published_by_category(articles: Sequence[Article]) -> dict[str, int]:
    counts: dict[str, int] = {}
    for article in articles:
        if article.status == ArticleStatus.PUBLISHED and article.category:
            counts[article.category] = counts.get(article.category, 0) + 1
    return counts


def sort_categories(categories: Sequence[Category]) -> list[Category]:
    return sorted(categories, key=lambda c: (c.sort_order or 0, (c.name or "").casefold()))


def newest_first(records: Sequence[T]) -> list[T]:
    return sorted(
        records,
        key=lambda r: parse_timestamp(getattr(r, "created_at", None)) or _EPOCH,
        reverse=True,
    )


def user_stats(users: Sequence[User]) -> dict:
    active = sum(1 for u in users if u.is_active)
    return {
        "total": len(users),
        "active": active,
        "inactive": len(users) - active,
        "byRole": {
            role.value: sum(1 for u in users if u.role == role) for role in UserRole
        },
    }


def article_stats(articles: Sequence[Article]) -> dict:
    return {
        "total": len(articles),
        "published": sum(1 for a in articles if a.status == ArticleStatus.PUBLISHED),
        "draft": sum(1 for a in articles if a.status == ArticleStatus.DRAFT),
        "archived": sum(1 for a in articles if a.status == ArticleStatus.ARCHIVED),
        "featured": sum(1 for a in articles if a.is_featured),
    }
