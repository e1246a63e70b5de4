"""
Typed access to the article, category, user and contact collections.

Repositories translate between record dataclasses and stored documents and
keep derived fields (slugs, reading time, publish date, category counts) in
step with every write.
"""

from __future__ import annotations

import logging
from dataclasses import fields, replace
from typing import Generic, Iterable, Optional, Type, TypeVar

from pastry_news.db import DbClient
from pastry_news.json_utils import snake_to_camel
from pastry_news.listing import count_published_by_category
from pastry_news.records import (
    ARTICLES_COLLECTION,
    CATEGORIES_COLLECTION,
    CONTACT_MESSAGES_COLLECTION,
    NEWSLETTER_COLLECTION,
    USERS_COLLECTION,
    Article,
    ArticleStatus,
    Category,
    ContactMessage,
    NewsletterSubscription,
    User,
    record_from_document,
    record_to_document,
    utc_now_iso,
)
from pastry_news.security import hash_password
from pastry_news.text_utils import normalize_tags, reading_time, slugify, unique_slug

logger = logging.getLogger(__name__)

R = TypeVar("R")


class Repository(Generic[R]):
    collection: str
    record_type: Type[R]
    # Stored keys only changed by atomic increments or count refreshes.
    counter_fields: tuple[str, ...] = ()

    def __init__(self, db: DbClient):
        self.db = db

    def _load(self, record_id: str, document: Optional[dict]) -> Optional[R]:
        if document is None:
            return None
        return record_from_document(self.record_type, record_id, document)

    def find_all(self) -> list[R]:
        return [
            record_from_document(self.record_type, record_id, document)
            for record_id, document in self.db.list_records(self.collection).items()
            if document
        ]

    def find_by_id(self, record_id: str) -> Optional[R]:
        if not record_id:
            return None
        return self._load(record_id, self.db.get_record(self.collection, record_id))

    def find_by(self, field: str, value) -> list[R]:
        return [
            record_from_document(self.record_type, record_id, document)
            for record_id, document in self.db.find_records(
                self.collection, field, value
            ).items()
        ]

    def _insert(self, record: R) -> R:
        now = utc_now_iso()
        if hasattr(record, "updated_at"):
            record = replace(record, created_at=now, updated_at=now)
        else:
            record = replace(record, created_at=now)
        record_id = self.db.create_record(self.collection, record_to_document(record))
        return replace(record, id=record_id)

    def _save(self, record: R) -> Optional[R]:
        """
        Write the record's fields back, leaving counter fields untouched.

        Counters only change through `increment_field` or count refreshes, so
        a save based on an older read cannot roll them back. Fields cleared on
        the record are removed from the stored document.
        """
        record = replace(record, updated_at=utc_now_iso())
        document = record_to_document(record)
        changes = {
            snake_to_camel(f.name): None
            for f in fields(record)
            if f.name != "id"
        }
        changes.update(document)
        for counter in self.counter_fields:
            changes.pop(counter, None)
        merged = self.db.update_record(self.collection, record.id, changes)
        return self._load(record.id, merged)

    def delete(self, record_id: str) -> bool:
        return self.db.delete_record(self.collection, record_id)


class CategoryRepository(Repository[Category]):
    collection = CATEGORIES_COLLECTION
    record_type = Category
    counter_fields = ("articleCount",)

    def find_by_slug(self, slug: str) -> Optional[Category]:
        matches = self.find_by("slug", slug)
        return matches[0] if matches else None

    def _slug_for(self, name: str, existing: Optional[Category] = None) -> str:
        exclude_id = existing.id if existing else None
        taken = (c.slug for c in self.find_all() if c.id != exclude_id)
        current = existing.slug if existing else None
        return unique_slug(slugify(name) or "category", taken, current=current)

    def create(self, category: Category) -> Category:
        category = replace(category, slug=self._slug_for(category.name), article_count=0)
        return self._insert(category)

    def update(self, category: Category) -> Optional[Category]:
        category = replace(
            category, slug=self._slug_for(category.name, existing=category)
        )
        return self._save(category)

    def set_active(self, category: Category, is_active: bool) -> Optional[Category]:
        return self._save(replace(category, is_active=is_active))

    def refresh_article_counts(
        self, articles: Iterable[Article], category_ids: Iterable[Optional[str]]
    ) -> None:
        """Rewrite the denormalized published-article count of the given categories."""
        counts = count_published_by_category(list(articles))
        for category_id in {cid for cid in category_ids if cid}:
            self.db.update_record(
                self.collection, category_id, {"articleCount": counts.get(category_id, 0)}
            )


class ArticleRepository(Repository[Article]):
    collection = ARTICLES_COLLECTION
    record_type = Article
    counter_fields = ("viewCount", "likes")

    def find_by_slug(self, slug: str) -> Optional[Article]:
        matches = self.find_by("slug", slug)
        return matches[0] if matches else None

    def _derive(self, article: Article, exclude_id: Optional[str] = None) -> Article:
        taken = (a.slug for a in self.find_all() if a.id != exclude_id)
        current = article.slug if exclude_id else None
        published_at = article.published_at
        if article.status == ArticleStatus.PUBLISHED and not published_at:
            published_at = utc_now_iso()
        return replace(
            article,
            slug=unique_slug(slugify(article.title) or "article", taken, current=current),
            tags=normalize_tags(article.tags),
            reading_time=reading_time(article.content),
            published_at=published_at,
        )

    def create(self, article: Article) -> Article:
        article = replace(self._derive(article), view_count=0, likes=0)
        created = self._insert(article)
        logger.info("Created article %s (%s)", created.id, created.slug)
        return created

    def update(self, article: Article) -> Optional[Article]:
        return self._save(self._derive(article, exclude_id=article.id))

    def set_status(self, article: Article, status: ArticleStatus) -> Optional[Article]:
        published_at = article.published_at
        if status == ArticleStatus.PUBLISHED and not published_at:
            published_at = utc_now_iso()
        return self._save(replace(article, status=status, published_at=published_at))

    def increment_views(self, article_id: str) -> Optional[int]:
        return self.db.increment_field(self.collection, article_id, "viewCount")

    def increment_likes(self, article_id: str) -> Optional[int]:
        return self.db.increment_field(self.collection, article_id, "likes")


class UserRepository(Repository[User]):
    collection = USERS_COLLECTION
    record_type = User

    def find_by_email(self, email: str) -> Optional[User]:
        matches = self.find_by("email", (email or "").strip().lower())
        return matches[0] if matches else None

    def find_by_username(self, username: str) -> Optional[User]:
        matches = self.find_by("username", username)
        return matches[0] if matches else None

    def create(self, user: User) -> User:
        user = replace(
            user,
            email=user.email.strip().lower(),
            password=hash_password(user.password),
        )
        created = self._insert(user)
        logger.info("Created %s user %s", created.role.value, created.id)
        return created

    def update(self, user: User) -> Optional[User]:
        user = replace(
            user,
            email=user.email.strip().lower(),
            password=hash_password(user.password) if user.password else user.password,
        )
        return self._save(user)

    def record_login(self, user: User) -> Optional[User]:
        return self._save(replace(user, last_login=utc_now_iso()))


class ContactRepository:
    def __init__(self, db: DbClient):
        self.db = db

    def save_message(self, message: ContactMessage) -> ContactMessage:
        message = replace(message, created_at=utc_now_iso())
        record_id = self.db.create_record(
            CONTACT_MESSAGES_COLLECTION, record_to_document(message)
        )
        return replace(message, id=record_id)

    def subscribe(self, subscription: NewsletterSubscription) -> tuple[NewsletterSubscription, bool]:
        """
        Store a newsletter subscription once per email.

        Returns the stored subscription and whether it was newly created.
        """
        email = subscription.email.strip().lower()
        existing = self.db.find_records(NEWSLETTER_COLLECTION, "email", email)
        for record_id, document in existing.items():
            current = record_from_document(NewsletterSubscription, record_id, document)
            if not current.is_active:
                self.db.update_record(NEWSLETTER_COLLECTION, record_id, {"isActive": True})
                current = replace(current, is_active=True)
            return current, False
        subscription = replace(subscription, email=email, created_at=utc_now_iso())
        record_id = self.db.create_record(
            NEWSLETTER_COLLECTION, record_to_document(subscription)
        )
        return replace(subscription, id=record_id), True
