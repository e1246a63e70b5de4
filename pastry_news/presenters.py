"""
JSON shapes returned to the web client, with author and category references
expanded into small summaries.
"""

from __future__ import annotations

from typing import Iterable, Optional

from pastry_news.records import Article, Category, User, record_to_json
from pastry_news.repositories import CategoryRepository, UserRepository


def author_summary(user: Optional[User], include_bio: bool = False) -> Optional[dict]:
    if not user:
        return None
    summary = {
        "_id": user.id,
        "firstName": user.first_name,
        "lastName": user.last_name,
        "avatar": user.avatar,
    }
    if include_bio:
        summary["bio"] = user.bio
    return summary


def category_summary(category: Optional[Category]) -> Optional[dict]:
    if not category:
        return None
    return {
        "_id": category.id,
        "name": category.name,
        "slug": category.slug,
        "color": category.color,
    }


def article_json(
    article: Article,
    author: Optional[User],
    category: Optional[Category],
    *,
    include_bio: bool = False,
) -> dict:
    payload = record_to_json(article)
    payload["author"] = author_summary(author, include_bio=include_bio)
    payload["category"] = category_summary(category)
    return payload


def populate_articles(
    articles: Iterable[Article],
    users: UserRepository,
    categories: CategoryRepository,
    *,
    include_bio: bool = False,
) -> list[dict]:
    """Expand author/category references, loading each referenced record once."""
    authors: dict[str, Optional[User]] = {}
    cats: dict[str, Optional[Category]] = {}
    results = []
    for article in articles:
        if article.author not in authors:
            authors[article.author] = users.find_by_id(article.author)
        if article.category not in cats:
            cats[article.category] = categories.find_by_id(article.category)
        results.append(
            article_json(
                article,
                authors[article.author],
                cats[article.category],
                include_bio=include_bio,
            )
        )
    return results


def public_profile(user: User) -> dict:
    return {
        "_id": user.id,
        "firstName": user.first_name,
        "lastName": user.last_name,
        "avatar": user.avatar,
        "bio": user.bio,
        "role": user.role.value,
    }
