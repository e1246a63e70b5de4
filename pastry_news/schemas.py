"""
Pydantic schemas for the news REST API.

Wire names are camelCase (what the web client sends and reads); Python code
uses the snake_case attribute names.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, HttpUrl
from pydantic.alias_generators import to_camel

from pastry_news.records import ArticleStatus, UserRole

HEX_COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"


class ApiModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


# Auth / users


class LoginRequest(ApiModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class RegisterRequest(ApiModel):
    username: str = Field(..., min_length=1, max_length=64)
    email: EmailStr
    password: str = Field(..., min_length=6)
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    role: UserRole
    bio: Optional[str] = Field(default=None, max_length=500)


class ProfileUpdateRequest(ApiModel):
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    bio: Optional[str] = Field(default=None, max_length=500)


class PasswordChangeRequest(ApiModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6)


class UserUpdateRequest(ApiModel):
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    role: UserRole
    is_active: Optional[bool] = None
    bio: Optional[str] = Field(default=None, max_length=500)


class AvatarRequest(ApiModel):
    avatar: HttpUrl


class LoginResponse(ApiModel):
    message: str
    token: str
    user: dict


class UserResponse(ApiModel):
    message: Optional[str] = None
    user: dict


class UserListResponse(ApiModel):
    users: list[dict]


class UserStatsResponse(ApiModel):
    stats: dict
    recent_users: list[dict]


# Articles


class ArticleCreateRequest(ApiModel):
    title: str = Field(..., min_length=1, max_length=200)
    excerpt: str = Field(..., min_length=1, max_length=300)
    content: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    featured_image: str = Field(..., min_length=1)
    tags: list[str] = Field(default_factory=list)
    status: Literal["draft", "published"] = "draft"
    is_featured: bool = False
    allow_comments: bool = True
    meta_title: Optional[str] = Field(default=None, max_length=60)
    meta_description: Optional[str] = Field(default=None, max_length=160)
    seo_keywords: list[str] = Field(default_factory=list)


class ArticleUpdateRequest(ArticleCreateRequest):
    # None keeps the stored tags.
    tags: Optional[list[str]] = None
    status: Optional[ArticleStatus] = None
    is_featured: Optional[bool] = None
    allow_comments: Optional[bool] = None
    seo_keywords: Optional[list[str]] = None


class ArticleStatusRequest(ApiModel):
    status: ArticleStatus


class BulkDeleteRequest(ApiModel):
    ids: list[str] = Field(..., min_length=1, max_length=100)


class Pagination(ApiModel):
    current_page: int
    total_pages: int
    total: int
    has_next: bool
    has_prev: bool


class ArticleResponse(ApiModel):
    message: Optional[str] = None
    article: dict


class ArticleListResponse(ApiModel):
    articles: list[dict]
    pagination: Pagination


class FeaturedArticlesResponse(ApiModel):
    articles: list[dict]


class CategoryArticlesResponse(ApiModel):
    category: dict
    articles: list[dict]
    pagination: Pagination


class SearchSuggestion(ApiModel):
    title: str
    slug: str


class SearchSuggestionsResponse(ApiModel):
    suggestions: list[SearchSuggestion]


class LikeResponse(ApiModel):
    message: str
    likes: int


class BulkDeleteResponse(ApiModel):
    message: str
    deleted: list[str]
    not_found: list[str]


class DashboardStatsResponse(ApiModel):
    stats: dict
    recent_articles: list[dict]
    recent_users: list[dict]


# Categories


class CategoryRequest(ApiModel):
    name: str = Field(..., min_length=1, max_length=50)
    description: Optional[str] = Field(default=None, max_length=300)
    color: Optional[str] = Field(default=None, pattern=HEX_COLOR_PATTERN)
    icon: Optional[str] = None
    image: Optional[str] = None
    sort_order: Optional[int] = Field(default=None, ge=0)
    parent_category: Optional[str] = None
    is_active: Optional[bool] = None
    meta_title: Optional[str] = Field(default=None, max_length=60)
    meta_description: Optional[str] = Field(default=None, max_length=160)


class CategoryResponse(ApiModel):
    message: Optional[str] = None
    category: dict


class CategoryListResponse(ApiModel):
    categories: list[dict]


# Contact


class ContactRequest(ApiModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    subject: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=10, max_length=1000)


class NewsletterRequest(ApiModel):
    email: EmailStr
    name: Optional[str] = Field(default=None, max_length=100)


class MessageResponse(ApiModel):
    message: str


class HealthResponse(ApiModel):
    status: Literal["OK"]
    message: str
    timestamp: str
