"""
HTTP client for the news API with a small time-based query cache.

GET requests are cached per query key for `stale_time` seconds; any write
drops the cached queries of the collections it touches so the next read
refetches.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Optional

import requests

logger = logging.getLogger(__name__)

DEFAULT_STALE_TIME = 5 * 60  # seconds
REQUEST_TIMEOUT = 10  # seconds

QueryKey = tuple


class ApiError(Exception):
    """Non-2xx response from the API."""

    def __init__(self, status: int, message: str):
        super().__init__(f"{status}: {message}")
        self.status = status
        self.message = message


class QueryCache:
    def __init__(
        self,
        stale_time: float = DEFAULT_STALE_TIME,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.stale_time = stale_time
        self._clock = clock
        self._entries: dict[QueryKey, tuple[float, Any]] = {}

    def get(self, key: QueryKey) -> Optional[Any]:
        """Cached value for `key`, or None when missing or stale."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, value = entry
        if self._is_stale(stored_at):
            del self._entries[key]
            return None
        return value

    def set(self, key: QueryKey, value: Any) -> None:
        self._prune()
        self._entries[key] = (self._clock(), value)

    def _is_stale(self, stored_at: float) -> bool:
        return self._clock() - stored_at >= self.stale_time

    def _prune(self) -> None:
        expired = [key for key, (stored_at, _) in self._entries.items() if self._is_stale(stored_at)]
        for key in expired:
            del self._entries[key]

    def invalidate(self, *prefix: Any) -> int:
        """Drop every key starting with `prefix`; no prefix clears the cache."""
        stale = [key for key in self._entries if key[: len(prefix)] == prefix]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def __len__(self) -> int:
        return len(self._entries)


def _query_key(path: str, params: Optional[dict]) -> QueryKey:
    parts = tuple(p for p in path.strip("/").split("/") if p)
    if params:
        parts += (tuple(sorted((k, str(v)) for k, v in params.items() if v is not None)),)
    return parts


class NewsApiClient:
    """
    Thin wrapper over the REST API.

    `base_url` includes the API prefix, e.g. "http://localhost:5000/api".
    Failed GETs on connection errors or 5xx responses are retried `retries`
    times; writes are never retried.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = REQUEST_TIMEOUT,
        retries: int = 1,
        cache: Optional[QueryCache] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retries = retries
        self.cache = cache or QueryCache()
        self.session = session or requests.Session()
        self.token: Optional[str] = None

    # Transport

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict] = None,
        json: Optional[dict] = None,
    ) -> Any:
        attempts = 1 + (self.retries if method == "GET" else 0)
        url = f"{self.base_url}/{path.lstrip('/')}"
        for attempt in range(attempts):
            try:
                response = self.session.request(
                    method,
                    url,
                    params=params,
                    json=json,
                    headers=self._headers(),
                    timeout=self.timeout,
                )
            except requests.RequestException as exc:
                if attempt + 1 < attempts:
                    logger.warning("%s %s failed (%s); retrying", method, url, exc)
                    continue
                raise ApiError(0, str(exc)) from exc
            if response.status_code >= 500 and attempt + 1 < attempts:
                logger.warning("%s %s returned %s; retrying", method, url, response.status_code)
                continue
            return self._handle(response)

    def _handle(self, response: requests.Response) -> Any:
        try:
            body = response.json()
        except ValueError:
            body = {}
        if response.ok:
            return body
        if response.status_code == 401:
            self.token = None
        message = body.get("message") if isinstance(body, dict) else None
        raise ApiError(response.status_code, message or response.reason or "Request failed")

    def _query(self, path: str, params: Optional[dict] = None) -> Any:
        key = _query_key(path, params)
        cached = self.cache.get(key)
        if cached is not None:
            return cached
        data = self._request("GET", path, params=params)
        self.cache.set(key, data)
        return data

    def _mutate(self, method: str, path: str, json: Optional[dict] = None, invalidates=()) -> Any:
        data = self._request(method, path, json=json)
        for collection in invalidates:
            self.cache.invalidate(collection)
        return data

    # Auth

    def login(self, email: str, password: str) -> dict:
        data = self._request("POST", "auth/login", json={"email": email, "password": password})
        self.token = data.get("token")
        self.cache.invalidate()
        return data["user"]

    def logout(self) -> None:
        self.token = None
        self.cache.invalidate()

    def me(self) -> dict:
        return self._request("GET", "auth/me")["user"]

    def update_profile(self, first_name: str, last_name: str, bio: Optional[str] = None) -> dict:
        data = self._mutate(
            "PUT",
            "auth/profile",
            {"firstName": first_name, "lastName": last_name, "bio": bio},
            invalidates=("users",),
        )
        return data["user"]

    def change_password(self, current_password: str, new_password: str) -> str:
        data = self._request(
            "PUT",
            "auth/password",
            json={"currentPassword": current_password, "newPassword": new_password},
        )
        return data["message"]

    # Articles

    def list_articles(self, **params) -> dict:
        return self._query("articles", params)

    def featured_articles(self) -> list[dict]:
        return self._query("articles/featured")["articles"]

    def get_article(self, slug: str) -> dict:
        return self._query(f"articles/{slug}")["article"]

    def related_articles(self, article_id: str, limit: int = 3) -> list[dict]:
        return self._query(f"articles/{article_id}/related", {"limit": limit})["articles"]

    def category_articles(self, slug: str, **params) -> dict:
        return self._query(f"articles/category/{slug}", params)

    def search_suggestions(self, q: str) -> list[dict]:
        return self._query("articles/search/suggestions", {"q": q})["suggestions"]

    def admin_articles(self, **params) -> dict:
        return self._query("articles/admin", params)

    def dashboard_stats(self) -> dict:
        return self._query("articles/dashboard/stats")

    def create_article(self, article: dict) -> dict:
        data = self._mutate("POST", "articles", article, invalidates=("articles", "categories"))
        return data["article"]

    def update_article(self, article_id: str, article: dict) -> dict:
        data = self._mutate(
            "PUT", f"articles/{article_id}", article, invalidates=("articles", "categories")
        )
        return data["article"]

    def set_article_status(self, article_id: str, status: str) -> dict:
        data = self._mutate(
            "PUT",
            f"articles/{article_id}/status",
            {"status": status},
            invalidates=("articles", "categories"),
        )
        return data["article"]

    def delete_article(self, article_id: str) -> str:
        data = self._mutate(
            "DELETE", f"articles/{article_id}", invalidates=("articles", "categories")
        )
        return data["message"]

    def bulk_delete_articles(self, ids: list[str]) -> dict:
        return self._mutate(
            "POST", "articles/bulk-delete", {"ids": ids}, invalidates=("articles", "categories")
        )

    def like_article(self, article_id: str) -> int:
        data = self._mutate("POST", f"articles/{article_id}/like", invalidates=("articles",))
        return data["likes"]

    # Categories

    def list_categories(self) -> list[dict]:
        return self._query("categories")["categories"]

    def admin_categories(self) -> list[dict]:
        return self._query("categories/admin")["categories"]

    def get_category(self, slug: str) -> dict:
        return self._query(f"categories/{slug}")["category"]

    def create_category(self, category: dict) -> dict:
        return self._mutate("POST", "categories", category, invalidates=("categories",))["category"]

    def update_category(self, category_id: str, category: dict) -> dict:
        data = self._mutate(
            "PUT", f"categories/{category_id}", category, invalidates=("categories", "articles")
        )
        return data["category"]

    def toggle_category_status(self, category_id: str) -> dict:
        data = self._mutate(
            "PUT",
            f"categories/{category_id}/status",
            invalidates=("categories", "articles"),
        )
        return data["category"]

    def delete_category(self, category_id: str) -> str:
        data = self._mutate("DELETE", f"categories/{category_id}", invalidates=("categories",))
        return data["message"]

    # Users

    def list_users(self) -> list[dict]:
        return self._query("users")["users"]

    def public_users(self) -> list[dict]:
        return self._query("users/public")["users"]

    def create_user(self, user: dict) -> dict:
        return self._mutate("POST", "users", user, invalidates=("users",))["user"]

    def update_user(self, user_id: str, user: dict) -> dict:
        return self._mutate("PUT", f"users/{user_id}", user, invalidates=("users",))["user"]

    def toggle_user_status(self, user_id: str) -> dict:
        data = self._mutate("PUT", f"users/{user_id}/status", invalidates=("users",))
        return data["user"]

    def delete_user(self, user_id: str) -> str:
        return self._mutate("DELETE", f"users/{user_id}", invalidates=("users",))["message"]

    # Contact

    def send_contact(self, name: str, email: str, subject: str, message: str) -> str:
        data = self._request(
            "POST",
            "contact",
            json={"name": name, "email": email, "subject": subject, "message": message},
        )
        return data["message"]

    def subscribe(self, email: str, name: Optional[str] = None) -> str:
        data = self._request("POST", "contact/newsletter", json={"email": email, "name": name})
        return data["message"]
