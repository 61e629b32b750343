from __future__ import annotations

import logging
from typing import Any

import httpx


logger = logging.getLogger("technews_webapp.api")


class NewsClient:
    """Thin client for the ``/api/rpc`` procedures.

    Every call returns the decoded JSON body, or ``None`` when the request
    fails for any reason (transport error, validation error, not found...).
    The UI only needs to know *that* a call failed.
    """

    def __init__(self, base_url: str, *, timeout: float | httpx.Timeout | None = None) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout or httpx.Timeout(connect=5.0, read=15.0, write=15.0, pool=10.0),
        )

    def close(self) -> None:
        self._client.close()

    # --- Internal helper ---
    def _call(self, procedure: str, payload: dict | None = None) -> Any | None:
        try:
            resp = self._client.post(f"/api/rpc/{procedure}", json=payload)
        except httpx.HTTPError as e:
            logger.warning("RPC %s failed: %s", procedure, e)
            return None
        if resp.status_code >= 400:
            detail = None
            try:
                detail = resp.json().get("detail")
            except Exception:
                pass
            logger.warning("RPC %s rejected (%s): %s", procedure, resp.status_code, detail)
            return None
        return resp.json()

    # --- Queries ---
    def healthcheck(self) -> dict | None:
        try:
            resp = self._client.get("/api/rpc/healthcheck", timeout=5.0)
        except httpx.HTTPError:
            return None
        if resp.status_code >= 400:
            return None
        return resp.json()

    def get_homepage_data(
        self,
        *,
        limit: int = 20,
        offset: int = 0,
        category_id: int | None = None,
        language: str | None = None,
        featured_only: bool = False,
    ) -> dict | None:
        payload: dict = {"limit": limit, "offset": offset, "featured_only": featured_only}
        if category_id is not None:
            payload["category_id"] = category_id
        if language:
            payload["language"] = language
        return self._call("get-homepage-data", payload)

    def get_news_articles(
        self,
        *,
        limit: int = 20,
        offset: int = 0,
        category_id: int | None = None,
        language: str | None = None,
        featured_only: bool = False,
    ) -> list[dict] | None:
        payload: dict = {"limit": limit, "offset": offset, "featured_only": featured_only}
        if category_id is not None:
            payload["category_id"] = category_id
        if language:
            payload["language"] = language
        data = self._call("get-news-articles", payload)
        if isinstance(data, list):
            return data
        return None

    def get_featured_articles(self, limit: int = 5, language: str | None = None) -> list[dict] | None:
        payload: dict = {"limit": limit}
        if language:
            payload["language"] = language
        data = self._call("get-featured-articles", payload)
        if isinstance(data, list):
            return data
        return None

    def search_articles(
        self,
        query: str,
        *,
        category_id: int | None = None,
        language: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> list[dict] | None:
        payload: dict = {"query": query, "limit": limit, "offset": offset}
        if category_id is not None:
            payload["category_id"] = category_id
        if language:
            payload["language"] = language
        data = self._call("search-articles", payload)
        if isinstance(data, list):
            return data
        return None

    def get_categories(self, active_only: bool = True) -> list[dict] | None:
        data = self._call("get-categories", {"activeOnly": active_only})
        if isinstance(data, list):
            return data
        return None

    def get_user_preferences(self, user_id: str) -> dict | None:
        return self._call("get-user-preferences", {"userId": user_id})

    # --- Mutations ---
    def update_user_preferences(
        self,
        user_id: str,
        *,
        theme: str | None = None,
        language: str | None = None,
        categories_order: list[int] | None = None,
    ) -> dict | None:
        payload: dict = {"user_id": user_id}
        if theme is not None:
            payload["theme"] = theme
        if language is not None:
            payload["language"] = language
        if categories_order is not None:
            payload["categories_order"] = categories_order
        return self._call("update-user-preferences", payload)

    def create_news_article(self, article: dict) -> dict | None:
        return self._call("create-news-article", article)

    def update_news_article(self, article_id: int, **fields: Any) -> dict | None:
        return self._call("update-news-article", {"id": article_id, **fields})

    def create_category(self, category: dict) -> dict | None:
        return self._call("create-category", category)

