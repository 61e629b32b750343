from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import pytest


pytest.importorskip("flet")

# app.py imports its siblings as top-level modules, the way `flet run` loads it
APP_DIR = Path(__file__).resolve().parents[1] / "technews_webapp" / "app"
if str(APP_DIR) not in sys.path:
    sys.path.insert(0, str(APP_DIR))

import app as webapp  # noqa: E402


class Storage(dict):
    def set(self, key, value):
        self[key] = value


class FakePage:
    def __init__(self) -> None:
        self.client_storage = Storage()
        self.controls: list = []
        self.tasks: list = []
        self.appbar = None
        self.snack_bar = None

    def add(self, *controls):
        self.controls.extend(controls)

    def update(self):
        pass

    def run_task(self, fn, *args):
        self.tasks.append((fn, args))

    def launch_url(self, url):
        pass


class FakeClient:
    def __init__(self) -> None:
        self.searches: list[dict] = []
        self.homepage_calls = 0

    def get_user_preferences(self, user_id):
        return {"theme": "system", "language": "zh"}

    def update_user_preferences(self, user_id, **fields):
        return {"user_id": user_id, **fields}

    def get_homepage_data(self, **kwargs):
        self.homepage_calls += 1
        return {
            "featured_articles": [],
            "latest_articles": [],
            "categories": [{"id": 3, "name": "AI", "name_zh": "人工智能"}],
            "total_articles": 0,
        }

    def search_articles(self, query, **kwargs):
        self.searches.append({"query": query, **kwargs})
        return []


@pytest.fixture()
def started(monkeypatch):
    client = FakeClient()
    page = FakePage()
    monkeypatch.setattr(webapp.settings, "search_debounce_seconds", 0)
    webapp.set_client_factory(lambda base_url: client)
    try:
        webapp.main(page)
        yield page, client
    finally:
        webapp.set_client_factory(None)


def _search_field(page):
    return page.controls[1].content.controls[0]


def _run_latest_task(page):
    fn, args = page.tasks[-1]
    asyncio.run(fn(*args))


def test_typing_schedules_debounced_search(started):
    page, client = started
    field = _search_field(page)
    field.value = "rust"
    field.on_change(None)

    assert len(page.tasks) == 1
    _run_latest_task(page)
    assert client.searches == [{"query": "rust", "language": "zh", "category_id": None, "limit": 20}]


def test_language_switch_repeats_active_search(started):
    page, client = started
    field = _search_field(page)
    field.value = "rust"
    field.on_change(None)
    _run_latest_task(page)

    language_btn = page.appbar.actions[1]
    language_btn.on_click(None)

    assert len(page.tasks) == 2
    _run_latest_task(page)
    assert client.searches[-1]["language"] == "en"


def test_language_switch_without_query_does_not_search(started):
    page, client = started
    page.appbar.actions[1].on_click(None)
    assert page.tasks == []
    assert client.searches == []


def test_stale_search_is_dropped(started):
    page, client = started
    field = _search_field(page)
    field.value = "ru"
    field.on_change(None)
    field.value = "rust"
    field.on_change(None)

    fn, args = page.tasks[0]
    asyncio.run(fn(*args))
    assert client.searches == []
