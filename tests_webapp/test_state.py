from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from technews_webapp.app.state import FeedState, format_time_ago


NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "delta, zh, en",
    [
        (timedelta(seconds=30), "刚刚", "just now"),
        (timedelta(minutes=5), "5分钟前", "5m ago"),
        (timedelta(hours=3, minutes=59), "3小时前", "3h ago"),
        (timedelta(days=2, hours=1), "2天前", "2d ago"),
    ],
)
def test_format_time_ago(delta, zh, en):
    published = NOW - delta
    assert format_time_ago(published, "zh", now=NOW) == zh
    assert format_time_ago(published.isoformat(), "en", now=NOW) == en


def test_format_time_ago_treats_naive_as_utc():
    assert format_time_ago("2024-05-01T11:00:00", "en", now=NOW) == "1h ago"


def test_labels_follow_language():
    state = FeedState()
    assert state.label("latest") == "最新新闻"
    assert state.toggle_language() == "en"
    assert state.label("latest") == "Latest News"
    assert state.toggle_language() == "zh"


def test_apply_preferences_ignores_unknown_values():
    state = FeedState()
    state.apply_preferences({"theme": "dark", "language": "en"})
    assert (state.theme, state.language) == ("dark", "en")

    state.apply_preferences({"theme": "sepia", "language": "fr"})
    assert (state.theme, state.language) == ("dark", "en")

    state.apply_preferences(None)
    assert state.theme == "dark"


def test_set_theme_validates():
    state = FeedState()
    state.set_theme("light")
    assert state.theme == "light"
    with pytest.raises(ValueError):
        state.set_theme("neon")


def test_homepage_and_load_more():
    state = FeedState(page_size=2)
    state.apply_homepage(
        {
            "featured_articles": [{"id": 9}],
            "latest_articles": [{"id": 1}, {"id": 2}],
            "categories": [{"id": 1, "name": "AI", "name_zh": "人工智能"}],
            "total_articles": 3,
        }
    )
    assert state.next_offset == 2
    assert state.has_more is True

    # overlapping page after a concurrent insert
    state.append_page([{"id": 2}, {"id": 3}])
    assert [a["id"] for a in state.latest] == [1, 2, 3]
    assert state.has_more is False


def test_select_category_resets_feed():
    state = FeedState()
    state.apply_homepage({"latest_articles": [{"id": 1}], "total_articles": 5})
    state.select_category(4)
    assert state.selected_category == 4
    assert state.latest == []
    assert state.next_offset == 0


def test_search_mode_switches_display():
    state = FeedState()
    state.apply_homepage({"latest_articles": [{"id": 1}], "total_articles": 10})
    assert state.section_title() == "最新新闻"
    assert state.empty_message() == "暂无新闻"

    state.search_query = "  rust "
    state.search_results = [{"id": 7}, {"id": 8}]
    assert state.is_searching_mode
    assert state.has_more is False
    assert state.articles_to_display() == [{"id": 7}, {"id": 8}]
    assert state.section_title() == "搜索结果 (2)"
    assert state.empty_message() == "未找到相关新闻"

    state.search_query = "   "
    assert state.articles_to_display() == [{"id": 1}]


def test_category_name_by_language():
    state = FeedState()
    assert state.category_name({"name": "AI", "name_zh": "人工智能"}) == "人工智能"
    assert state.category_name({"name": "Web"}) == "Web"
    state.language = "en"
    assert state.category_name({"name": "AI", "name_zh": "人工智能"}) == "AI"
