"""
Category routes.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from pastry_news.auth import require_admin_or_editor
from pastry_news.dependencies import get_article_repository, get_category_repository
from pastry_news.listing import (
    count_published_by_category,
    is_publicly_visible,
    sort_categories,
)
from pastry_news.records import (
    DEFAULT_CATEGORY_COLOR,
    DEFAULT_CATEGORY_ICON,
    Category,
    User,
    record_to_json,
)
from pastry_news.repositories import ArticleRepository, CategoryRepository
from pastry_news.schemas import (
    CategoryListResponse,
    CategoryRequest,
    CategoryResponse,
    MessageResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/categories", tags=["categories"])

RELATED_LIMIT = 4


def _with_counts(categories: list[Category], articles: ArticleRepository) -> list[dict]:
    visible = [a for a in articles.find_all() if is_publicly_visible(a)]
    counts = count_published_by_category(visible)
    results = []
    for category in sort_categories(categories):
        payload = record_to_json(category)
        payload["articleCount"] = counts.get(category.id, 0)
        results.append(payload)
    return results


def _get_category_or_404(category_id: str, categories: CategoryRepository) -> Category:
    category = categories.find_by_id(category_id)
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")
    return category


def _check_parent(
    parent_id: Optional[str],
    categories: CategoryRepository,
    category_id: Optional[str] = None,
) -> None:
    if not parent_id:
        return
    if category_id and parent_id == category_id:
        raise HTTPException(status_code=400, detail="Category cannot be its own parent")
    if not categories.find_by_id(parent_id):
        raise HTTPException(status_code=400, detail="Parent category not found")


@router.get("", response_model=CategoryListResponse)
def list_categories(
    categories: CategoryRepository = Depends(get_category_repository),
    articles: ArticleRepository = Depends(get_article_repository),
):
    active = [c for c in categories.find_all() if c.is_active]
    return CategoryListResponse(categories=_with_counts(active, articles))


@router.get("/admin", response_model=CategoryListResponse)
def admin_categories(
    _: User = Depends(require_admin_or_editor),
    categories: CategoryRepository = Depends(get_category_repository),
    articles: ArticleRepository = Depends(get_article_repository),
):
    return CategoryListResponse(
        categories=_with_counts(categories.find_all(), articles)
    )


@router.get("/{slug}", response_model=CategoryResponse)
def get_category(
    slug: str,
    categories: CategoryRepository = Depends(get_category_repository),
):
    category = categories.find_by_slug(slug)
    if not category or not category.is_active:
        raise HTTPException(status_code=404, detail="Category not found")
    return CategoryResponse(category=record_to_json(category))


@router.get("/{category_id}/related", response_model=CategoryListResponse)
def related_categories(
    category_id: str,
    categories: CategoryRepository = Depends(get_category_repository),
):
    category = _get_category_or_404(category_id, categories)
    others = [
        c for c in categories.find_all() if c.is_active and c.id != category.id
    ]
    return CategoryListResponse(
        categories=[record_to_json(c) for c in sort_categories(others)[:RELATED_LIMIT]]
    )


@router.post("", response_model=CategoryResponse, status_code=201)
def create_category(
    payload: CategoryRequest,
    user: User = Depends(require_admin_or_editor),
    categories: CategoryRepository = Depends(get_category_repository),
):
    _check_parent(payload.parent_category, categories)
    category = categories.create(
        Category(
            name=payload.name,
            description=payload.description,
            color=payload.color or DEFAULT_CATEGORY_COLOR,
            icon=payload.icon or DEFAULT_CATEGORY_ICON,
            image=payload.image,
            sort_order=payload.sort_order or 0,
            parent_category=payload.parent_category,
            is_active=True if payload.is_active is None else payload.is_active,
            meta_title=payload.meta_title,
            meta_description=payload.meta_description,
        )
    )
    logger.info("Category %s created by %s", category.slug, user.id)
    return CategoryResponse(
        message="Category created successfully", category=record_to_json(category)
    )


@router.put("/{category_id}", response_model=CategoryResponse)
def update_category(
    category_id: str,
    payload: CategoryRequest,
    _: User = Depends(require_admin_or_editor),
    categories: CategoryRepository = Depends(get_category_repository),
):
    category = _get_category_or_404(category_id, categories)
    _check_parent(payload.parent_category, categories, category.id)
    changes = {
        "name": payload.name,
        "description": payload.description,
        "image": payload.image,
        "parent_category": payload.parent_category,
        "meta_title": payload.meta_title,
        "meta_description": payload.meta_description,
    }
    if payload.color is not None:
        changes["color"] = payload.color
    if payload.icon is not None:
        changes["icon"] = payload.icon
    if payload.sort_order is not None:
        changes["sort_order"] = payload.sort_order
    if payload.is_active is not None:
        changes["is_active"] = payload.is_active
    updated = categories.update(replace(category, **changes))
    if not updated:
        raise HTTPException(status_code=404, detail="Category not found")
    return CategoryResponse(
        message="Category updated successfully", category=record_to_json(updated)
    )


@router.delete("/{category_id}", response_model=MessageResponse)
def delete_category(
    category_id: str,
    user: User = Depends(require_admin_or_editor),
    categories: CategoryRepository = Depends(get_category_repository),
    articles: ArticleRepository = Depends(get_article_repository),
):
    category = _get_category_or_404(category_id, categories)
    in_use = sum(1 for a in articles.find_all() if a.category == category.id)
    if in_use:
        raise HTTPException(
            status_code=400,
            detail=f"Cannot delete category. It has {in_use} articles associated with it.",
        )
    categories.delete(category.id)
    logger.info("Category %s deleted by %s", category.id, user.id)
    return MessageResponse(message="Category deleted successfully")


@router.put("/{category_id}/status", response_model=CategoryResponse)
def toggle_category_status(
    category_id: str,
    _: User = Depends(require_admin_or_editor),
    categories: CategoryRepository = Depends(get_category_repository),
):
    category = _get_category_or_404(category_id, categories)
    updated = categories.set_active(category, not category.is_active)
    if not updated:
        raise HTTPException(status_code=404, detail="Category not found")
    state = "activated" if updated.is_active else "deactivated"
    return CategoryResponse(
        message=f"Category {state} successfully", category=record_to_json(updated)
    )
