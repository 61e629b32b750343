import sys
from pathlib import Path

import pytest

# Ensure repository root is on sys.path for `import technews`
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
from fastapi.testclient import TestClient


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture()
def sqlite_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'technews.db'}"


@pytest.fixture()
async def session(sqlite_url):
    # Real SQLite database per test; handlers run exactly as in production
    from technews.db import sa as db_sa

    await db_sa.init_sa_engine(sqlite_url)
    await db_sa.create_tables()
    try:
        async with db_sa.session_scope() as s:
            yield s
    finally:
        await db_sa.close_sa_engine()


@pytest.fixture()
def client(monkeypatch, sqlite_url):
    import technews.db.sa as db_sa
    from technews import main as main_mod

    monkeypatch.setattr(db_sa, "DB_DSN", sqlite_url)

    app = main_mod.app
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()

