from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional


LABELS: dict[str, dict[str, str]] = {
    "zh": {
        "app_title": "科技新闻",
        "search_hint": "搜索新闻...",
        "featured": "精选文章",
        "featured_badge": "精选",
        "latest": "最新新闻",
        "search_results": "搜索结果",
        "searching": "搜索中...",
        "all": "全部",
        "load_more": "加载更多",
        "no_results": "未找到相关新闻",
        "no_news": "暂无新闻",
        "comments": "评论",
        "load_failed": "加载失败，请稍后重试",
        "switch_language": "EN",
    },
    "en": {
        "app_title": "Tech News",
        "search_hint": "Search news...",
        "featured": "Featured Articles",
        "featured_badge": "Featured",
        "latest": "Latest News",
        "search_results": "Search Results",
        "searching": "Searching...",
        "all": "All",
        "load_more": "Load More",
        "no_results": "No news found",
        "no_news": "No news available",
        "comments": "comments",
        "load_failed": "Something went wrong, please try again",
        "switch_language": "中",
    },
}


def _parse_dt(value: datetime | str) -> datetime:
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if value.tzinfo is None:
        # the API stores UTC
        value = value.replace(tzinfo=timezone.utc)
    return value


def format_time_ago(published: datetime | str, language: str = "zh", now: Optional[datetime] = None) -> str:
    now = _parse_dt(now or datetime.now(timezone.utc))
    seconds = int((now - _parse_dt(published)).total_seconds())
    zh = language == "zh"
    if seconds < 60:
        return "刚刚" if zh else "just now"
    if seconds < 3600:
        n = seconds // 60
        return f"{n}分钟前" if zh else f"{n}m ago"
    if seconds < 86400:
        n = seconds // 3600
        return f"{n}小时前" if zh else f"{n}h ago"
    n = seconds // 86400
    return f"{n}天前" if zh else f"{n}d ago"


@dataclass
class FeedState:
    """Everything the feed view renders from; no UI toolkit types in here."""

    theme: str = "system"
    language: str = "zh"
    selected_category: Optional[int] = None
    search_query: str = ""
    featured: list[dict] = field(default_factory=list)
    latest: list[dict] = field(default_factory=list)
    categories: list[dict] = field(default_factory=list)
    total_articles: int = 0
    search_results: list[dict] = field(default_factory=list)
    is_loading: bool = False
    is_searching: bool = False
    page_size: int = 20

    def label(self, key: str) -> str:
        return LABELS.get(self.language, LABELS["en"]).get(key, key)

    # --- preferences ---
    def apply_preferences(self, prefs: dict | None) -> None:
        if not prefs:
            return
        if prefs.get("theme") in ("light", "dark", "system"):
            self.theme = prefs["theme"]
        if prefs.get("language") in ("zh", "en"):
            self.language = prefs["language"]

    def toggle_language(self) -> str:
        self.language = "en" if self.language == "zh" else "zh"
        return self.language

    def set_theme(self, theme: str) -> None:
        if theme not in ("light", "dark", "system"):
            raise ValueError(f"unknown theme {theme!r}")
        self.theme = theme

    # --- data ---
    def apply_homepage(self, data: dict) -> None:
        self.featured = list(data.get("featured_articles") or [])
        self.latest = list(data.get("latest_articles") or [])
        self.categories = list(data.get("categories") or [])
        self.total_articles = int(data.get("total_articles") or 0)

    def append_page(self, articles: list[dict]) -> None:
        seen = {a.get("id") for a in self.latest}
        self.latest.extend(a for a in articles if a.get("id") not in seen)

    def select_category(self, category_id: Optional[int]) -> None:
        self.selected_category = category_id
        self.latest = []

    @property
    def next_offset(self) -> int:
        return len(self.latest)

    @property
    def has_more(self) -> bool:
        return not self.is_searching_mode and len(self.latest) < self.total_articles

    @property
    def is_searching_mode(self) -> bool:
        return bool(self.search_query.strip())

    def articles_to_display(self) -> list[dict]:
        return self.search_results if self.is_searching_mode else self.latest

    def section_title(self) -> str:
        if self.is_searching_mode:
            return f"{self.label('search_results')} ({len(self.search_results)})"
        return self.label("latest")

    def empty_message(self) -> str:
        return self.label("no_results") if self.is_searching_mode else self.label("no_news")

    def category_name(self, category: dict) -> str:
        if self.language == "zh":
            return category.get("name_zh") or category.get("name") or ""
        return category.get("name") or ""
