"""
Configuration and settings for the news backend.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_JWT_SECRET = "change-me-in-production"


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="/api")

    # Development toggles
    use_in_memory_backends: bool = Field(default=False)

    # Firebase Realtime Database
    firebase_database_url: Optional[str] = Field(default=None)
    firebase_credentials_file: Optional[str] = Field(default=None)
    firebase_project_id: Optional[str] = Field(default=None)
    firebase_private_key_id: Optional[str] = Field(default=None)
    firebase_private_key: Optional[str] = Field(default=None)
    firebase_client_email: Optional[str] = Field(default=None)
    firebase_client_id: Optional[str] = Field(default=None)
    firebase_root_path: str = Field(default="")

    # Any SQLAlchemy URL (Postgres in production, SQLite locally)
    database_url: Optional[str] = Field(default=None)

    # Auth
    jwt_secret: str = Field(default=DEFAULT_JWT_SECRET)
    jwt_algorithm: str = Field(default="HS256")
    jwt_expires_days: int = Field(default=7, ge=1)

    cors_origins: list[str] = Field(
        default=[
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ]
    )

    # Observability
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="text")

    def firebase_service_account(self) -> Optional[dict]:
        """
        Build a service-account mapping from the individual FIREBASE_* variables.

        Returns None when the variables are incomplete; callers then fall back to
        the credentials file or application default credentials.
        """
        if not (
            self.firebase_project_id
            and self.firebase_private_key
            and self.firebase_client_email
        ):
            return None
        return {
            "type": "service_account",
            "project_id": self.firebase_project_id,
            "private_key_id": self.firebase_private_key_id,
            # .env files usually carry the PEM with escaped newlines.
            "private_key": self.firebase_private_key.replace("\\n", "\n"),
            "client_email": self.firebase_client_email,
            "client_id": self.firebase_client_id,
            "token_uri": "https://oauth2.googleapis.com/token",
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
