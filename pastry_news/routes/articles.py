"""
Article routes: public browsing plus back-office management.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from pastry_news.auth import (
    ensure_can_modify,
    get_optional_user,
    is_moderator,
    require_admin_or_editor,
    require_staff,
)
from pastry_news.dependencies import (
    get_article_repository,
    get_category_repository,
    get_user_repository,
)
from pastry_news.listing import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    RECENT_LIMIT,
    article_stats,
    filter_articles,
    is_publicly_visible,
    newest_first,
    paginate,
    sort_articles,
    user_stats,
)
from pastry_news.presenters import article_json, populate_articles
from pastry_news.records import Article, ArticleStatus, User
from pastry_news.repositories import (
    ArticleRepository,
    CategoryRepository,
    UserRepository,
)
from pastry_news.schemas import (
    ArticleCreateRequest,
    ArticleListResponse,
    ArticleResponse,
    ArticleStatusRequest,
    ArticleUpdateRequest,
    BulkDeleteRequest,
    BulkDeleteResponse,
    CategoryArticlesResponse,
    DashboardStatsResponse,
    FeaturedArticlesResponse,
    LikeResponse,
    MessageResponse,
    SearchSuggestionsResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/articles", tags=["articles"])

SORT_PATTERN = "^(newest|latest|oldest|popular|featured|title)$"
FEATURED_LIMIT = 5
SUGGESTION_LIMIT = 5


def _visible(articles: list[Article]) -> list[Article]:
    return [a for a in articles if is_publicly_visible(a)]


def _resolve_category_id(value: Optional[str], categories: CategoryRepository) -> Optional[str]:
    """Category filters accept either an id or a slug."""
    if not value:
        return None
    if categories.find_by_id(value):
        return value
    by_slug = categories.find_by_slug(value)
    return by_slug.id if by_slug else value


def _get_article_or_404(article_id: str, articles: ArticleRepository) -> Article:
    article = articles.find_by_id(article_id)
    if not article:
        raise HTTPException(status_code=404, detail="Article not found")
    return article


def _ensure_category_exists(category_id: str, categories: CategoryRepository) -> None:
    if not categories.find_by_id(category_id):
        raise HTTPException(status_code=400, detail="Category not found")


def _refresh_counts(
    articles: ArticleRepository,
    categories: CategoryRepository,
    *category_ids: Optional[str],
) -> None:
    categories.refresh_article_counts(articles.find_all(), category_ids)


@router.get("", response_model=ArticleListResponse)
def list_articles(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    category: Optional[str] = Query(None),
    author: Optional[str] = Query(None),
    tag: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    sort: str = Query("newest", pattern=SORT_PATTERN),
    status: Optional[ArticleStatus] = Query(None),
    user: Optional[User] = Depends(get_optional_user),
    articles: ArticleRepository = Depends(get_article_repository),
    categories: CategoryRepository = Depends(get_category_repository),
    users: UserRepository = Depends(get_user_repository),
):
    """
    Published articles for the public site; moderators see every status.
    """
    items = articles.find_all()
    if is_moderator(user):
        status_filter = status.value if status else None
    else:
        items = _visible(items)
        status_filter = None
    items = filter_articles(
        items,
        category=_resolve_category_id(category, categories),
        author=author,
        tag=tag,
        search=search,
        status=status_filter,
    )
    page_items, pagination = paginate(sort_articles(items, sort), page, limit)
    return ArticleListResponse(
        articles=populate_articles(page_items, users, categories),
        pagination=pagination.as_dict(),
    )


@router.get("/featured", response_model=FeaturedArticlesResponse)
def featured_articles(
    articles: ArticleRepository = Depends(get_article_repository),
    categories: CategoryRepository = Depends(get_category_repository),
    users: UserRepository = Depends(get_user_repository),
):
    featured = [a for a in _visible(articles.find_all()) if a.is_featured]
    featured = sort_articles(featured, "newest")[:FEATURED_LIMIT]
    return FeaturedArticlesResponse(
        articles=populate_articles(featured, users, categories)
    )


@router.get("/dashboard/stats", response_model=DashboardStatsResponse)
def dashboard_stats(
    _: User = Depends(require_staff),
    articles: ArticleRepository = Depends(get_article_repository),
    categories: CategoryRepository = Depends(get_category_repository),
    users: UserRepository = Depends(get_user_repository),
):
    all_articles = articles.find_all()
    all_users = users.find_all()
    stats = {
        "articles": article_stats(all_articles),
        "categories": {"total": len(categories.find_all())},
        "users": user_stats(all_users),
    }
    recent_articles = newest_first(all_articles)[:RECENT_LIMIT]
    recent_users = newest_first(all_users)[:RECENT_LIMIT]
    return DashboardStatsResponse(
        stats=stats,
        recent_articles=populate_articles(recent_articles, users, categories),
        recent_users=[u.to_public_dict() for u in recent_users],
    )


@router.get("/admin", response_model=ArticleListResponse)
def admin_articles(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    search: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    _: User = Depends(require_staff),
    articles: ArticleRepository = Depends(get_article_repository),
    categories: CategoryRepository = Depends(get_category_repository),
    users: UserRepository = Depends(get_user_repository),
):
    """Every article regardless of status; empty filter values are ignored."""
    if status and status not in {s.value for s in ArticleStatus}:
        raise HTTPException(status_code=400, detail="Invalid status filter")
    items = filter_articles(
        articles.find_all(),
        category=category or None,
        search=search,
        status=status or None,
    )
    items = newest_first(items)
    page_items, pagination = paginate(items, page, limit)
    return ArticleListResponse(
        articles=populate_articles(page_items, users, categories),
        pagination=pagination.as_dict(),
    )


@router.get("/search/suggestions", response_model=SearchSuggestionsResponse)
def search_suggestions(
    q: str = Query(..., min_length=2),
    articles: ArticleRepository = Depends(get_article_repository),
):
    needle = q.strip().lower()
    matches = [
        a
        for a in _visible(articles.find_all())
        if needle in (a.title or "").lower() or needle in (a.excerpt or "").lower()
    ]
    return SearchSuggestionsResponse(
        suggestions=[
            {"title": a.title, "slug": a.slug} for a in matches[:SUGGESTION_LIMIT]
        ]
    )


@router.get("/category/{slug}", response_model=CategoryArticlesResponse)
def articles_by_category(
    slug: str,
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    sort: str = Query("newest", pattern=SORT_PATTERN),
    articles: ArticleRepository = Depends(get_article_repository),
    categories: CategoryRepository = Depends(get_category_repository),
    users: UserRepository = Depends(get_user_repository),
):
    category = categories.find_by_slug(slug)
    if not category or not category.is_active:
        raise HTTPException(status_code=404, detail="Category not found")
    items = filter_articles(_visible(articles.find_all()), category=category.id)
    page_items, pagination = paginate(sort_articles(items, sort), page, limit)
    return CategoryArticlesResponse(
        category={
            "_id": category.id,
            "name": category.name,
            "slug": category.slug,
            "color": category.color,
            "icon": category.icon,
            "description": category.description,
        },
        articles=populate_articles(page_items, users, categories),
        pagination=pagination.as_dict(),
    )


@router.get("/{slug}", response_model=ArticleResponse)
def get_article(
    slug: str,
    articles: ArticleRepository = Depends(get_article_repository),
    categories: CategoryRepository = Depends(get_category_repository),
    users: UserRepository = Depends(get_user_repository),
):
    """A published article by slug; each read counts as a view."""
    article = articles.find_by_slug(slug)
    if not article or not is_publicly_visible(article):
        raise HTTPException(status_code=404, detail="Article not found")
    views = articles.increment_views(article.id)
    if views is not None:
        article = replace(article, view_count=views)
    return ArticleResponse(
        article=article_json(
            article,
            users.find_by_id(article.author),
            categories.find_by_id(article.category),
            include_bio=True,
        )
    )


@router.get("/{article_id}/related", response_model=FeaturedArticlesResponse)
def related_articles(
    article_id: str,
    limit: int = Query(3, ge=1, le=12),
    articles: ArticleRepository = Depends(get_article_repository),
    categories: CategoryRepository = Depends(get_category_repository),
    users: UserRepository = Depends(get_user_repository),
):
    article = _get_article_or_404(article_id, articles)
    candidates = [a for a in _visible(articles.find_all()) if a.id != article.id]
    tags = set(article.tags or [])

    def relevance(candidate: Article) -> tuple[int, int]:
        same_category = int(bool(article.category) and candidate.category == article.category)
        shared_tags = len(tags.intersection(candidate.tags or []))
        return same_category, shared_tags

    related = [c for c in sort_articles(candidates, "newest") if any(relevance(c))]
    related.sort(key=relevance, reverse=True)
    return FeaturedArticlesResponse(
        articles=populate_articles(related[:limit], users, categories)
    )


@router.post("", response_model=ArticleResponse, status_code=201)
def create_article(
    payload: ArticleCreateRequest,
    user: User = Depends(require_staff),
    articles: ArticleRepository = Depends(get_article_repository),
    categories: CategoryRepository = Depends(get_category_repository),
    users: UserRepository = Depends(get_user_repository),
):
    _ensure_category_exists(payload.category, categories)
    article = articles.create(
        Article(
            title=payload.title,
            excerpt=payload.excerpt,
            content=payload.content,
            category=payload.category,
            featured_image=payload.featured_image,
            tags=payload.tags,
            status=ArticleStatus(payload.status),
            is_featured=payload.is_featured,
            allow_comments=payload.allow_comments,
            meta_title=payload.meta_title,
            meta_description=payload.meta_description,
            seo_keywords=payload.seo_keywords,
            author=user.id,
        )
    )
    _refresh_counts(articles, categories, article.category)
    return ArticleResponse(
        message="Article created successfully",
        article=article_json(article, user, categories.find_by_id(article.category)),
    )


@router.put("/{article_id}", response_model=ArticleResponse)
def update_article(
    article_id: str,
    payload: ArticleUpdateRequest,
    user: User = Depends(require_staff),
    articles: ArticleRepository = Depends(get_article_repository),
    categories: CategoryRepository = Depends(get_category_repository),
    users: UserRepository = Depends(get_user_repository),
):
    article = _get_article_or_404(article_id, articles)
    ensure_can_modify(user, article)
    _ensure_category_exists(payload.category, categories)

    previous_category = article.category
    changes = {
        "title": payload.title,
        "excerpt": payload.excerpt,
        "content": payload.content,
        "category": payload.category,
        "featured_image": payload.featured_image,
        "meta_title": payload.meta_title,
        "meta_description": payload.meta_description,
    }
    optional_changes = {
        "tags": payload.tags,
        "status": payload.status,
        "is_featured": payload.is_featured,
        "allow_comments": payload.allow_comments,
        "seo_keywords": payload.seo_keywords,
    }
    changes.update({k: v for k, v in optional_changes.items() if v is not None})
    updated = articles.update(replace(article, **changes))
    if not updated:
        raise HTTPException(status_code=404, detail="Article not found")
    _refresh_counts(articles, categories, previous_category, updated.category)
    return ArticleResponse(
        message="Article updated successfully",
        article=article_json(
            updated,
            users.find_by_id(updated.author),
            categories.find_by_id(updated.category),
        ),
    )


@router.put("/{article_id}/status", response_model=ArticleResponse)
def update_article_status(
    article_id: str,
    payload: ArticleStatusRequest,
    user: User = Depends(require_staff),
    articles: ArticleRepository = Depends(get_article_repository),
    categories: CategoryRepository = Depends(get_category_repository),
    users: UserRepository = Depends(get_user_repository),
):
    article = _get_article_or_404(article_id, articles)
    ensure_can_modify(user, article)
    updated = articles.set_status(article, payload.status)
    if not updated:
        raise HTTPException(status_code=404, detail="Article not found")
    _refresh_counts(articles, categories, updated.category)
    return ArticleResponse(
        message=f"Article status changed to {payload.status.value}",
        article=article_json(
            updated,
            users.find_by_id(updated.author),
            categories.find_by_id(updated.category),
        ),
    )


@router.delete("/{article_id}", response_model=MessageResponse)
def delete_article(
    article_id: str,
    user: User = Depends(require_staff),
    articles: ArticleRepository = Depends(get_article_repository),
    categories: CategoryRepository = Depends(get_category_repository),
):
    article = _get_article_or_404(article_id, articles)
    ensure_can_modify(user, article)
    articles.delete(article.id)
    _refresh_counts(articles, categories, article.category)
    logger.info("Article %s deleted by %s", article.id, user.id)
    return MessageResponse(message="Article deleted successfully")


@router.post("/bulk-delete", response_model=BulkDeleteResponse)
def bulk_delete_articles(
    payload: BulkDeleteRequest,
    user: User = Depends(require_admin_or_editor),
    articles: ArticleRepository = Depends(get_article_repository),
    categories: CategoryRepository = Depends(get_category_repository),
):
    deleted: list[str] = []
    not_found: list[str] = []
    touched_categories: set[Optional[str]] = set()
    for article_id in dict.fromkeys(payload.ids):
        article = articles.find_by_id(article_id)
        if article and articles.delete(article_id):
            deleted.append(article_id)
            touched_categories.add(article.category)
        else:
            not_found.append(article_id)
    _refresh_counts(articles, categories, *touched_categories)
    logger.info("Bulk delete by %s removed %d articles", user.id, len(deleted))
    return BulkDeleteResponse(
        message=f"{len(deleted)} articles deleted successfully",
        deleted=deleted,
        not_found=not_found,
    )


@router.post("/{article_id}/like", response_model=LikeResponse)
def like_article(
    article_id: str,
    articles: ArticleRepository = Depends(get_article_repository),
):
    article = articles.find_by_id(article_id)
    if not article or not is_publicly_visible(article):
        raise HTTPException(status_code=404, detail="Article not found")
    likes = articles.increment_likes(article.id)
    if likes is None:
        raise HTTPException(status_code=404, detail="Article not found")
    return LikeResponse(message="Article liked successfully", likes=likes)
