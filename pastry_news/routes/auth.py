"""
Login, registration and self-service account routes.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from fastapi import APIRouter, Depends, HTTPException

from pastry_news.auth import get_current_user, require_admin
from pastry_news.dependencies import get_user_repository
from pastry_news.listing import newest_first
from pastry_news.records import User
from pastry_news.repositories import UserRepository
from pastry_news.schemas import (
    LoginRequest,
    LoginResponse,
    MessageResponse,
    PasswordChangeRequest,
    ProfileUpdateRequest,
    RegisterRequest,
    UserListResponse,
    UserResponse,
)
from pastry_news.security import create_access_token, verify_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def register_user(payload: RegisterRequest, users: UserRepository) -> User:
    """Create a user account, rejecting duplicate emails and usernames."""
    if users.find_by_email(payload.email) or users.find_by_username(payload.username):
        raise HTTPException(
            status_code=409,
            detail="User already exists with this email or username",
        )
    return users.create(
        User(
            username=payload.username,
            email=payload.email,
            password=payload.password,
            first_name=payload.first_name,
            last_name=payload.last_name,
            role=payload.role,
            bio=payload.bio or "",
        )
    )


def toggle_active(user_id: str, current: User, users: UserRepository) -> User:
    """Flip a user's active flag on behalf of the admin `current`."""
    if user_id == current.id:
        raise HTTPException(status_code=400, detail="You cannot deactivate your own account")
    user = users.find_by_id(user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    updated = users.update(replace(user, is_active=not user.is_active))
    if not updated:
        raise HTTPException(status_code=404, detail="User not found")
    return updated


@router.post("/login", response_model=LoginResponse)
def login(
    payload: LoginRequest,
    users: UserRepository = Depends(get_user_repository),
):
    user = users.find_by_email(payload.email)
    if not user or not verify_password(payload.password, user.password):
        logger.info("Failed login for %s", payload.email)
        raise HTTPException(status_code=401, detail="Invalid credentials")
    if not user.is_active:
        raise HTTPException(status_code=401, detail="Account is deactivated")
    user = users.record_login(user) or user
    return LoginResponse(
        message="Login successful",
        token=create_access_token(user.id),
        user=user.to_public_dict(),
    )


@router.post("/register", response_model=UserResponse, status_code=201)
def register(
    payload: RegisterRequest,
    _: User = Depends(require_admin),
    users: UserRepository = Depends(get_user_repository),
):
    user = register_user(payload, users)
    return UserResponse(message="User created successfully", user=user.to_public_dict())


@router.get("/me", response_model=UserResponse)
def me(user: User = Depends(get_current_user)):
    return UserResponse(user=user.to_public_dict())


@router.put("/profile", response_model=UserResponse)
def update_profile(
    payload: ProfileUpdateRequest,
    user: User = Depends(get_current_user),
    users: UserRepository = Depends(get_user_repository),
):
    updated = users.update(
        replace(
            user,
            first_name=payload.first_name,
            last_name=payload.last_name,
            bio=payload.bio if payload.bio is not None else user.bio,
        )
    )
    if not updated:
        raise HTTPException(status_code=404, detail="User not found")
    return UserResponse(
        message="Profile updated successfully", user=updated.to_public_dict()
    )


@router.put("/password", response_model=MessageResponse)
def change_password(
    payload: PasswordChangeRequest,
    user: User = Depends(get_current_user),
    users: UserRepository = Depends(get_user_repository),
):
    if not verify_password(payload.current_password, user.password):
        raise HTTPException(status_code=400, detail="Current password is incorrect")
    users.update(replace(user, password=payload.new_password))
    logger.info("Password changed for user %s", user.id)
    return MessageResponse(message="Password updated successfully")


@router.get("/users", response_model=UserListResponse)
def list_users(
    _: User = Depends(require_admin),
    users: UserRepository = Depends(get_user_repository),
):
    return UserListResponse(
        users=[u.to_public_dict() for u in newest_first(users.find_all())]
    )


@router.put("/users/{user_id}/status", response_model=UserResponse)
def toggle_user_status(
    user_id: str,
    current: User = Depends(require_admin),
    users: UserRepository = Depends(get_user_repository),
):
    updated = toggle_active(user_id, current, users)
    state = "activated" if updated.is_active else "deactivated"
    return UserResponse(
        message=f"User {state} successfully", user=updated.to_public_dict()
    )
