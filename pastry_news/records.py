"""
Record types stored in the document database.

Records are kept as snake_case dataclasses in Python and as camelCase
documents in the database (the layout the web client reads). The node key is
the record id and is never stored inside the document body.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, List, Optional, Type, TypeVar

from dacite import Config, from_dict

from pastry_news.json_utils import convert_keys

ARTICLES_COLLECTION = "articles"
CATEGORIES_COLLECTION = "categories"
USERS_COLLECTION = "users"
CONTACT_MESSAGES_COLLECTION = "contactMessages"
NEWSLETTER_COLLECTION = "newsletterSubscribers"

DEFAULT_CATEGORY_COLOR = "#8D6E63"
DEFAULT_CATEGORY_ICON = "🍰"

SENSITIVE_USER_FIELDS = ("password", "passwordResetToken", "passwordResetExpires")


class ArticleStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class UserRole(str, Enum):
    ADMIN = "admin"
    EDITOR = "editor"
    AUTHOR = "author"


@dataclass
class ArticleImage:
    url: str = ""
    caption: Optional[str] = None
    alt: Optional[str] = None


@dataclass
class Article:
    id: Optional[str] = None
    title: str = ""
    slug: str = ""
    excerpt: str = ""
    content: str = ""
    author: Optional[str] = None
    category: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    featured_image: Optional[str] = None
    images: List[ArticleImage] = field(default_factory=list)
    status: ArticleStatus = ArticleStatus.DRAFT
    published_at: Optional[str] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    reading_time: int = 0
    view_count: int = 0
    likes: int = 0
    is_featured: bool = False
    allow_comments: bool = True
    seo_keywords: List[str] = field(default_factory=list)
    social_share_image: Optional[str] = None
    related_articles: List[str] = field(default_factory=list)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass
class Category:
    id: Optional[str] = None
    name: str = ""
    slug: str = ""
    description: Optional[str] = None
    color: str = DEFAULT_CATEGORY_COLOR
    icon: str = DEFAULT_CATEGORY_ICON
    image: Optional[str] = None
    is_active: bool = True
    sort_order: int = 0
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    parent_category: Optional[str] = None
    article_count: int = 0
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass
class User:
    id: Optional[str] = None
    username: str = ""
    email: str = ""
    password: str = ""
    first_name: str = ""
    last_name: str = ""
    role: UserRole = UserRole.AUTHOR
    avatar: Optional[str] = None
    bio: str = ""
    is_active: bool = True
    last_login: Optional[str] = None
    password_reset_token: Optional[str] = None
    password_reset_expires: Optional[str] = None
    email_verified: bool = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def to_public_dict(self) -> dict:
        """Serialized user without credentials or reset tokens."""
        payload = record_to_json(self)
        for key in SENSITIVE_USER_FIELDS:
            payload.pop(key, None)
        payload["fullName"] = self.full_name
        return payload


@dataclass
class ContactMessage:
    """A contact form submission kept for staff follow-up."""

    id: Optional[str] = None
    name: str = ""
    email: str = ""
    subject: str = ""
    message: str = ""
    is_read: bool = False
    created_at: Optional[str] = None


@dataclass
class NewsletterSubscription:
    id: Optional[str] = None
    email: str = ""
    name: Optional[str] = None
    is_active: bool = True
    created_at: Optional[str] = None


R = TypeVar("R")

_DACITE_CONFIG = Config(check_types=False, cast=[ArticleStatus, UserRole])


def utc_now_iso() -> str:
    """Current UTC time in the ISO-8601 form JavaScript clients emit."""
    return (
        datetime.now(timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse a stored ISO timestamp; naive values are taken as UTC."""
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items() if v is not None}
    if isinstance(value, list):
        return [_plain(item) for item in value]
    return value


def record_from_document(data_class: Type[R], record_id: str, document: dict) -> R:
    """Build a record dataclass from a stored camelCase document."""
    data = convert_keys(dict(document or {}), "camel_to_snake")
    data.pop("_id", None)
    data["id"] = record_id
    return from_dict(data_class=data_class, data=data, config=_DACITE_CONFIG)


def record_to_document(record: Any) -> dict:
    """Stored camelCase form of a record (no id, no None values)."""
    data = _plain(asdict(record))
    data.pop("id", None)
    return convert_keys(data, "snake_to_camel")


def record_to_json(record: Any) -> dict:
    """API form of a record: the document plus `id` and `_id`."""
    payload = record_to_document(record)
    payload["id"] = record.id
    payload["_id"] = record.id
    return payload
