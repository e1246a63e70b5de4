"""
FastAPI application entry point for the news API.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from pastry_news.config import DEFAULT_JWT_SECRET, Settings, get_settings
from pastry_news.error_handlers import register_error_handlers
from pastry_news.logging_config import setup_logging
from pastry_news.routes import router

logger = logging.getLogger(__name__)


def warn_on_insecure_settings(settings: Settings) -> None:
    if settings.jwt_secret == DEFAULT_JWT_SECRET:
        logger.warning(
            "JWT_SECRET is not set; tokens are signed with the built-in default secret"
        )


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    logger.info("Pastry News API starting (prefix %s)", settings.api_prefix)
    warn_on_insecure_settings(settings)
    yield
    logger.info("Pastry News API shutting down")


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="Pastry News API", version="0.1.0", lifespan=lifespan)
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)
    app.include_router(router, prefix=settings.api_prefix)
    return app


app = create_app()
