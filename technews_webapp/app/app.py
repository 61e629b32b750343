# -*- coding: utf-8 -*-
from __future__ import annotations

import asyncio
import uuid
import flet as ft

from typing import Callable, Optional
from api_client import NewsClient
from config import settings
from state import FeedState, format_time_ago


# --- Testability hooks (dependency injection) ---
NewsClientFactory = Callable[[str], NewsClient]
_client_factory: Optional[NewsClientFactory] = None


def set_client_factory(factory: NewsClientFactory) -> None:
    global _client_factory
    _client_factory = factory


def _make_client(base_url: str) -> NewsClient:
    if _client_factory is not None:
        return _client_factory(base_url)
    return NewsClient(base_url=base_url)


_THEME_MODES = {
    "light": ft.ThemeMode.LIGHT,
    "dark": ft.ThemeMode.DARK,
    "system": ft.ThemeMode.SYSTEM,
}


def main(page: ft.Page):
    page.window_width = 1000
    page.window_height = 760
    page.scroll = ft.ScrollMode.AUTO

    client = _make_client(settings.api_base_url)
    state = FeedState(page_size=settings.page_size)

    # Per-browser identity for preferences (opaque, never shown)
    user_id = page.client_storage.get("user_id")
    if not user_id:
        user_id = str(uuid.uuid4())
        page.client_storage.set("user_id", user_id)

    state.apply_preferences(client.get_user_preferences(user_id))

    page.snack_bar = ft.SnackBar(content=ft.Text(""), open=False)
    page.add(page.snack_bar)

    def show_notice(msg: str):
        if isinstance(page.snack_bar.content, ft.Text):
            page.snack_bar.content.value = msg
        else:
            page.snack_bar.content = ft.Text(msg)
        page.snack_bar.open = True
        page.update()

    def save_preferences(**fields):
        if client.update_user_preferences(user_id, **fields) is None:
            show_notice(state.label("load_failed"))

    # ----- App bar -----
    title_text = ft.Text(weight=ft.FontWeight.BOLD)
    theme_switch = ft.Switch(value=False)
    language_btn = ft.TextButton()

    def on_theme_change(_):
        state.set_theme("dark" if theme_switch.value else "light")
        save_preferences(theme=state.theme)
        render()

    def on_language_click(_):
        state.toggle_language()
        save_preferences(language=state.language)
        render()
        if state.is_searching_mode:
            start_search()

    theme_switch.on_change = on_theme_change
    language_btn.on_click = on_language_click
    page.appbar = ft.AppBar(title=title_text, actions=[theme_switch, language_btn])

    # ----- Search -----
    search_field = ft.TextField(prefix_icon=ft.Icons.SEARCH, expand=True)
    search_generation = 0

    async def _debounced_search(generation: int):
        await asyncio.sleep(settings.search_debounce_seconds)
        if generation != search_generation:
            return
        query = state.search_query.strip()
        if not query:
            state.search_results = []
            render()
            return
        state.is_searching = True
        render()
        results = client.search_articles(
            query,
            language=state.language,
            category_id=state.selected_category,
            limit=settings.page_size,
        )
        state.is_searching = False
        if results is None:
            show_notice(state.label("load_failed"))
            results = []
        if generation == search_generation:
            state.search_results = results
            render()

    def start_search():
        nonlocal search_generation
        search_generation += 1
        page.run_task(_debounced_search, search_generation)

    def on_search_change(e):
        state.search_query = search_field.value or ""
        start_search()

    search_field.on_change = on_search_change

    # ----- Sections -----
    featured_title = ft.Text(size=18, weight=ft.FontWeight.W_600)
    featured_row = ft.Row(scroll=ft.ScrollMode.AUTO, spacing=12)
    featured_section = ft.Column(controls=[featured_title, featured_row], spacing=8)
    categories_row = ft.Row(scroll=ft.ScrollMode.AUTO, spacing=8)
    section_title = ft.Text(size=18, weight=ft.FontWeight.W_600)
    articles_col = ft.Column(spacing=10)
    loading_row = ft.Row([ft.ProgressRing(), ft.Container(width=8), ft.Text("")], visible=False)
    load_more_btn = ft.OutlinedButton()

    def _open_source(article: dict):
        url = article.get("source_url")
        if url:
            page.launch_url(url)

    def article_card(article: dict, featured: bool = False) -> ft.Control:
        meta = [
            ft.Text(f"▲ {article.get('score', 0)}", color=ft.Colors.ORANGE),
            ft.Text(f"{article.get('comments_count', 0)} {state.label('comments')}"),
            ft.Container(expand=True),
        ]
        if article.get("author"):
            meta.append(ft.Text(article["author"], weight=ft.FontWeight.W_500))
        if article.get("published_at"):
            meta.append(ft.Text(format_time_ago(article["published_at"], state.language)))

        body: list[ft.Control] = []
        if article.get("thumbnail_url"):
            body.append(ft.Image(src=article["thumbnail_url"], height=160, fit=ft.ImageFit.COVER))
        if featured:
            body.append(ft.Text(state.label("featured_badge"), color=ft.Colors.BLUE, size=12))
        body.append(ft.Text(article.get("title") or "", weight=ft.FontWeight.W_500, max_lines=2))
        if article.get("description"):
            body.append(ft.Text(article["description"], size=13, max_lines=2, color=ft.Colors.ON_SURFACE_VARIANT))
        body.append(ft.Row(meta, spacing=12))
        tags = article.get("tags") or []
        if tags:
            body.append(ft.Row([ft.Text(f"#{t}", size=12, color=ft.Colors.BLUE_GREY) for t in tags[:3]], spacing=6))

        return ft.Card(
            width=320 if featured else None,
            content=ft.Container(
                padding=12,
                on_click=lambda _, a=article: _open_source(a),
                content=ft.Column(body, spacing=6),
            ),
        )

    def category_button(label: str, category_id: Optional[int]) -> ft.Control:
        selected = state.selected_category == category_id

        def _select(_):
            state.select_category(category_id)
            load_homepage()
            if state.is_searching_mode:
                start_search()

        if selected:
            return ft.ElevatedButton(text=label, on_click=_select)
        return ft.OutlinedButton(text=label, on_click=_select)

    def render():
        page.theme_mode = _THEME_MODES.get(state.theme, ft.ThemeMode.SYSTEM)
        theme_switch.value = state.theme == "dark"
        title_text.value = state.label("app_title")
        language_btn.text = state.label("switch_language")
        search_field.hint_text = state.label("search_hint")

        featured_title.value = state.label("featured")
        featured_row.controls = [article_card(a, featured=True) for a in state.featured]
        featured_section.visible = bool(state.featured) and not state.is_searching_mode

        categories_row.controls = [category_button(state.label("all"), None)] + [
            category_button(state.category_name(c), c.get("id")) for c in state.categories
        ]

        section_title.value = state.section_title()
        loading_row.visible = state.is_loading or state.is_searching
        if loading_row.controls and isinstance(loading_row.controls[-1], ft.Text):
            loading_row.controls[-1].value = state.label("searching") if state.is_searching else ""

        items = state.articles_to_display()
        if items:
            articles_col.controls = [article_card(a) for a in items]
        else:
            articles_col.controls = [ft.Text(state.empty_message(), color=ft.Colors.ON_SURFACE_VARIANT)]

        load_more_btn.text = state.label("load_more")
        load_more_btn.visible = state.has_more
        page.update()

    def load_homepage():
        state.is_loading = True
        render()
        data = client.get_homepage_data(
            limit=state.page_size,
            offset=0,
            category_id=state.selected_category,
        )
        state.is_loading = False
        if data is None:
            show_notice(state.label("load_failed"))
        else:
            state.apply_homepage(data)
        render()

    def on_load_more(_):
        page_items = client.get_news_articles(
            limit=state.page_size,
            offset=state.next_offset,
            category_id=state.selected_category,
        )
        if page_items is None:
            show_notice(state.label("load_failed"))
            return
        state.append_page(page_items)
        render()

    load_more_btn.on_click = on_load_more

    page.add(
        ft.Container(padding=ft.padding.symmetric(horizontal=16), content=ft.Row([search_field])),
        ft.Container(
            padding=16,
            content=ft.Column(
                controls=[
                    featured_section,
                    categories_row,
                    section_title,
                    loading_row,
                    articles_col,
                    ft.Row([load_more_btn], alignment=ft.MainAxisAlignment.CENTER),
                ],
                spacing=16,
            ),
        ),
    )
    load_homepage()


if __name__ == "__main__":
    ft.app(target=main)
