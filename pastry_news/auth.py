"""
Authentication and role checks for the REST API.

Clients send `Authorization: Bearer <token>`; the token carries the user id
and the user record is reloaded on every request so role and active-flag
changes apply immediately.
"""

from __future__ import annotations

from typing import Callable, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from pastry_news.dependencies import get_user_repository
from pastry_news.records import Article, User, UserRole
from pastry_news.repositories import UserRepository
from pastry_news.security import decode_access_token

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)

STAFF_ROLES = (UserRole.ADMIN, UserRole.EDITOR, UserRole.AUTHOR)
MODERATOR_ROLES = (UserRole.ADMIN, UserRole.EDITOR)


def _unauthorized(message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=message,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _resolve_user(token: str, users: UserRepository) -> User:
    user_id = decode_access_token(token)
    if not user_id:
        raise _unauthorized("Token is not valid")
    user = users.find_by_id(user_id)
    if not user:
        raise _unauthorized("Token is not valid")
    if not user.is_active:
        raise _unauthorized("Account is deactivated")
    return user


def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    users: UserRepository = Depends(get_user_repository),
) -> User:
    if not token:
        raise _unauthorized("No token, authorization denied")
    return _resolve_user(token, users)


def get_optional_user(
    token: Optional[str] = Depends(oauth2_scheme),
    users: UserRepository = Depends(get_user_repository),
) -> Optional[User]:
    """Like get_current_user, but anonymous or invalid credentials yield None."""
    if not token:
        return None
    try:
        return _resolve_user(token, users)
    except HTTPException:
        return None


def require_roles(*roles: UserRole) -> Callable[..., User]:
    """Build a dependency that admits only users holding one of `roles`."""

    def _dependency(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Access denied. Insufficient permissions.",
            )
        return user

    return _dependency


require_admin = require_roles(UserRole.ADMIN)
require_admin_or_editor = require_roles(*MODERATOR_ROLES)
require_staff = require_roles(*STAFF_ROLES)


def is_moderator(user: Optional[User]) -> bool:
    return bool(user) and user.role in MODERATOR_ROLES


def ensure_can_modify(user: User, article: Article) -> None:
    """Authors may only change their own articles; admins and editors any."""
    if is_moderator(user) or article.author == user.id:
        return
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="Access denied. You can only modify your own articles.",
    )
