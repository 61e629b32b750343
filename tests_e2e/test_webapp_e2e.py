from __future__ import annotations

import os
import socket
import subprocess
import sys
import time
from contextlib import closing

import pytest


pytest.importorskip("playwright.sync_api")


def _free_port() -> int:
    with closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


@pytest.fixture(scope="session")
def webapp_server():
    port = _free_port()
    env = os.environ.copy()
    env["FLET_SERVER_PORT"] = str(port)
    env["FLET_SERVER_ADDRESS"] = "127.0.0.1"
    env["FLET_FORCE_WEB"] = "true"
    env["API_BASE_URL"] = "http://localhost:2022"
    cmd = [sys.executable, "-m", "flet", "run", "--web", "--port", str(port), "technews_webapp/app/app.py"]
    proc = subprocess.Popen(cmd, env=env, stdout=subprocess.PIPE, stderr=subprocess.STDOUT)

    deadline = time.time() + 25
    ready = False
    while time.time() < deadline:
        try:
            with socket.create_connection(("127.0.0.1", port), timeout=0.5):
                ready = True
                break
        except OSError:
            time.sleep(0.25)
    if not ready:
        try:
            out = proc.stdout.read().decode(errors="ignore") if proc.stdout else ""
        except Exception:
            out = ""
        proc.kill()
        pytest.skip(f"Webapp server not ready on port {port}. Output: {out[:500]}")
    try:
        yield f"http://127.0.0.1:{port}"
    finally:
        proc.terminate()
        try:
            proc.wait(timeout=5)
        except Exception:
            proc.kill()


_ARTICLE = {
    "id": 1,
    "title": "Rust 2.0 released",
    "description": "A big one",
    "source_url": "https://news.example.com/items/1",
    "source": "Hacker News",
    "score": 120,
    "comments_count": 4,
    "published_at": "2024-05-01T12:00:00Z",
    "created_at": "2024-05-01T12:00:00Z",
    "updated_at": "2024-05-01T12:00:00Z",
    "is_featured": False,
    "language": "en",
    "tags": ["rust"],
}


@pytest.mark.e2e
def test_feed_renders_in_chinese_by_default(page, webapp_server):
    # flet calls the API server-side; with no backend the shell still renders
    def route_handler(route):
        url = route.request.url
        if url.endswith("/get-homepage-data"):
            return route.fulfill(
                status=200,
                json={"featured_articles": [], "latest_articles": [_ARTICLE], "categories": [], "total_articles": 1},
            )
        if url.endswith("/get-user-preferences"):
            return route.fulfill(
                status=200,
                json={"id": None, "user_id": "u", "theme": "system", "language": "zh", "categories_order": []},
            )
        return route.fulfill(status=404, json={"code": "NOT_FOUND", "detail": "not mocked"})

    page.route("http://localhost:2022/**", route_handler)

    page.goto(webapp_server, wait_until="domcontentloaded")

    page.get_by_text("科技新闻").wait_for(timeout=10000)
    page.get_by_text("最新新闻").wait_for(timeout=5000)
