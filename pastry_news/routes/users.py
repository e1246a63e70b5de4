"""
User management routes for administrators, plus the public author list.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from fastapi import APIRouter, Depends, HTTPException, status

from pastry_news.auth import get_current_user, require_admin
from pastry_news.dependencies import get_article_repository, get_user_repository
from pastry_news.listing import RECENT_LIMIT, newest_first, user_stats
from pastry_news.presenters import public_profile
from pastry_news.records import User, UserRole
from pastry_news.repositories import ArticleRepository, UserRepository
from pastry_news.routes.auth import register_user, toggle_active
from pastry_news.schemas import (
    AvatarRequest,
    MessageResponse,
    RegisterRequest,
    UserListResponse,
    UserResponse,
    UserStatsResponse,
    UserUpdateRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


def _get_user_or_404(user_id: str, users: UserRepository) -> User:
    user = users.find_by_id(user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.get("", response_model=UserListResponse)
def list_users(
    _: User = Depends(require_admin),
    users: UserRepository = Depends(get_user_repository),
):
    return UserListResponse(
        users=[u.to_public_dict() for u in newest_first(users.find_all())]
    )


@router.post("", response_model=UserResponse, status_code=201)
def create_user(
    payload: RegisterRequest,
    _: User = Depends(require_admin),
    users: UserRepository = Depends(get_user_repository),
):
    user = register_user(payload, users)
    return UserResponse(message="User created successfully", user=user.to_public_dict())


@router.get("/public", response_model=UserListResponse)
def public_users(users: UserRepository = Depends(get_user_repository)):
    active = sorted(
        (u for u in users.find_all() if u.is_active),
        key=lambda u: (u.first_name.lower(), u.last_name.lower()),
    )
    return UserListResponse(users=[public_profile(u) for u in active])


@router.get("/stats/overview", response_model=UserStatsResponse)
def stats_overview(
    _: User = Depends(require_admin),
    users: UserRepository = Depends(get_user_repository),
):
    all_users = users.find_all()
    return UserStatsResponse(
        stats=user_stats(all_users),
        recent_users=[u.to_public_dict() for u in newest_first(all_users)[:RECENT_LIMIT]],
    )


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: str,
    _: User = Depends(require_admin),
    users: UserRepository = Depends(get_user_repository),
):
    return UserResponse(user=_get_user_or_404(user_id, users).to_public_dict())


@router.put("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: str,
    payload: UserUpdateRequest,
    current: User = Depends(require_admin),
    users: UserRepository = Depends(get_user_repository),
):
    user = _get_user_or_404(user_id, users)
    if user.id == current.id and payload.is_active is False:
        raise HTTPException(status_code=400, detail="You cannot deactivate your own account")
    changes = {
        "first_name": payload.first_name,
        "last_name": payload.last_name,
        "role": payload.role,
    }
    if payload.is_active is not None:
        changes["is_active"] = payload.is_active
    if payload.bio is not None:
        changes["bio"] = payload.bio
    updated = users.update(replace(user, **changes))
    if not updated:
        raise HTTPException(status_code=404, detail="User not found")
    return UserResponse(message="User updated successfully", user=updated.to_public_dict())


@router.put("/{user_id}/status", response_model=UserResponse)
def toggle_user_status(
    user_id: str,
    current: User = Depends(require_admin),
    users: UserRepository = Depends(get_user_repository),
):
    updated = toggle_active(user_id, current, users)
    state = "activated" if updated.is_active else "deactivated"
    logger.info("User %s %s by %s", updated.id, state, current.id)
    return UserResponse(message=f"User {state} successfully", user=updated.to_public_dict())


@router.delete("/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: str,
    current: User = Depends(require_admin),
    users: UserRepository = Depends(get_user_repository),
    articles: ArticleRepository = Depends(get_article_repository),
):
    if user_id == current.id:
        raise HTTPException(status_code=400, detail="You cannot delete your own account")
    user = _get_user_or_404(user_id, users)
    authored = sum(1 for a in articles.find_all() if a.author == user.id)
    if authored:
        raise HTTPException(
            status_code=400,
            detail=(
                f"Cannot delete user. They have {authored} articles. "
                "Please reassign or delete their articles first."
            ),
        )
    users.delete(user.id)
    logger.info("User %s deleted by %s", user.id, current.id)
    return MessageResponse(message="User deleted successfully")


@router.put("/{user_id}/avatar", response_model=UserResponse)
def update_avatar(
    user_id: str,
    payload: AvatarRequest,
    current: User = Depends(get_current_user),
    users: UserRepository = Depends(get_user_repository),
):
    if current.id != user_id and current.role != UserRole.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied. Insufficient permissions.",
        )
    user = _get_user_or_404(user_id, users)
    updated = users.update(replace(user, avatar=str(payload.avatar)))
    if not updated:
        raise HTTPException(status_code=404, detail="User not found")
    return UserResponse(message="Avatar updated successfully", user=updated.to_public_dict())
