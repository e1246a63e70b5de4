"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

import logging

from fastapi import Depends

from pastry_news.config import get_settings
from pastry_news.db import DbClient, FirebaseDbClient, InMemoryDbClient, SqlDbClient
from pastry_news.repositories import (
    ArticleRepository,
    CategoryRepository,
    ContactRepository,
    UserRepository,
)

logger = logging.getLogger(__name__)

_db_client: DbClient | None = None


def get_db_client() -> DbClient:
    """
    Return a singleton DB client so state persists across requests.
    """
    global _db_client
    if _db_client:
        return _db_client

    settings = get_settings()
    if settings.use_in_memory_backends:
        _db_client = InMemoryDbClient()
    elif settings.firebase_database_url:
        _db_client = FirebaseDbClient(
            settings.firebase_database_url,
            service_account=settings.firebase_service_account(),
            credentials_file=settings.firebase_credentials_file,
            root_path=settings.firebase_root_path,
        )
    elif settings.database_url:
        _db_client = SqlDbClient(settings.database_url)
    else:
        logger.warning("No database configured; using the in-memory store")
        _db_client = InMemoryDbClient()
    return _db_client


def get_article_repository(db: DbClient = Depends(get_db_client)) -> ArticleRepository:
    return ArticleRepository(db)


def get_category_repository(db: DbClient = Depends(get_db_client)) -> CategoryRepository:
    return CategoryRepository(db)


def get_user_repository(db: DbClient = Depends(get_db_client)) -> UserRepository:
    return UserRepository(db)


def get_contact_repository(db: DbClient = Depends(get_db_client)) -> ContactRepository:
    return ContactRepository(db)
