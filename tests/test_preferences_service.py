import logging
from datetime import timedelta

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from technews.models.news_models import UserPreference
from technews.schemas.news import UpdateUserPreferencesInput
from technews.services import preferences as pref_svc


pytestmark = pytest.mark.anyio


async def _row_count(session) -> int:
    return (await session.execute(select(func.count()).select_from(UserPreference))).scalar_one()


async def test_unknown_user_gets_unsaved_defaults(session):
    prefs = await pref_svc.get_user_preferences(session, "visitor-1")

    assert prefs.id is None
    assert prefs.user_id == "visitor-1"
    assert prefs.theme == "system"
    assert prefs.language == "zh"
    assert prefs.categories_order == []
    assert await _row_count(session) == 0


async def test_first_update_creates_row_with_defaults(session):
    saved = await pref_svc.update_user_preferences(
        session, UpdateUserPreferencesInput(user_id="u1", theme="dark")
    )

    assert saved.id is not None
    assert saved.theme == "dark"
    assert saved.language == "zh"
    assert saved.categories_order == []

    fetched = await pref_svc.get_user_preferences(session, "u1")
    assert fetched.id == saved.id
    assert fetched.theme == "dark"


async def test_repeated_updates_keep_one_row_and_merge(session):
    first = await pref_svc.update_user_preferences(
        session, UpdateUserPreferencesInput(user_id="u1", theme="dark", categories_order=[3, 1, 2])
    )
    second = await pref_svc.update_user_preferences(
        session, UpdateUserPreferencesInput(user_id="u1", language="en")
    )

    assert await _row_count(session) == 1
    assert second.id == first.id
    assert second.theme == "dark"
    assert second.language == "en"
    assert second.categories_order == [3, 1, 2]


async def test_update_keeps_created_at(session):
    first = await pref_svc.update_user_preferences(session, UpdateUserPreferencesInput(user_id="u1"))
    second = await pref_svc.update_user_preferences(
        session, UpdateUserPreferencesInput(user_id="u1", categories_order=[])
    )

    assert second.created_at == first.created_at
    assert second.updated_at >= first.updated_at
    assert second.categories_order == []


async def test_users_are_independent(session):
    await pref_svc.update_user_preferences(session, UpdateUserPreferencesInput(user_id="a", theme="light"))
    await pref_svc.update_user_preferences(session, UpdateUserPreferencesInput(user_id="b", theme="dark"))

    assert (await pref_svc.get_user_preferences(session, "a")).theme == "light"
    assert (await pref_svc.get_user_preferences(session, "b")).theme == "dark"
    assert await _row_count(session) == 2


async def test_failed_lookup_is_logged_and_raised(session, monkeypatch, caplog):
    async def broken_execute(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    monkeypatch.setattr(session, "execute", broken_execute)

    with caplog.at_level(logging.ERROR, logger="technews.preferences"):
        with pytest.raises(OperationalError):
            await pref_svc.get_user_preferences(session, "u1")
    assert any(getattr(r, "event", None) == "preferences_lookup_failed" for r in caplog.records)


async def test_timestamps_read_back_as_utc(session):
    saved = await pref_svc.update_user_preferences(session, UpdateUserPreferencesInput(user_id="u1"))
    assert saved.created_at.utcoffset() == timedelta(0)
    assert saved.updated_at.utcoffset() == timedelta(0)
