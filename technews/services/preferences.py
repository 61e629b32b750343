from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from technews.models.news_models import DEFAULT_LANGUAGE, DEFAULT_THEME, UserPreference, utcnow
from technews.schemas.news import UpdateUserPreferencesInput, UserPreferences


logger = logging.getLogger("technews.preferences")

_UPSERT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


def default_preferences(user_id: str) -> UserPreferences:
    now = utcnow()
    return UserPreferences(
        id=None,
        user_id=user_id,
        theme=DEFAULT_THEME,
        language=DEFAULT_LANGUAGE,
        categories_order=[],
        created_at=now,
        updated_at=now,
    )


async def get_user_preferences(session: AsyncSession, user_id: str) -> UserPreferences:
    """Stored preferences, or unsaved defaults for a first-time visitor."""
    try:
        res = await session.execute(select(UserPreference).where(UserPreference.user_id == user_id))
        row = res.scalar_one_or_none()
    except Exception:
        logger.exception("User preferences lookup failed", extra={"event": "preferences_lookup_failed", "user_id": user_id})
        raise
    if row is None:
        return default_preferences(user_id)
    return UserPreferences.model_validate(row)


async def update_user_preferences(session: AsyncSession, payload: UpdateUserPreferencesInput) -> UserPreferences:
    """Create-or-update keyed on ``user_id`` in a single statement.

    Supplied fields overwrite; omitted ones keep their stored values, or get
    defaults when the row is created. ``created_at`` is only set on insert.
    """
    dialect = session.get_bind().dialect.name
    insert = _UPSERT_INSERTS.get(dialect)
    if insert is None:
        raise RuntimeError(f"Upsert is not supported for dialect {dialect!r}")

    now = utcnow()
    changes = payload.model_dump(exclude_none=True, exclude={"user_id"})
    values = {
        "user_id": payload.user_id,
        "theme": changes.get("theme", DEFAULT_THEME),
        "language": changes.get("language", DEFAULT_LANGUAGE),
        "categories_order": changes.get("categories_order", []),
        "created_at": now,
        "updated_at": now,
    }
    stmt = insert(UserPreference).values(**values)
    stmt = stmt.on_conflict_do_update(
        index_elements=[UserPreference.user_id],
        set_={**changes, "updated_at": now},
    ).returning(UserPreference)

    try:
        res = await session.execute(stmt, execution_options={"populate_existing": True})
        row = res.scalar_one()
        await session.commit()
    except Exception:
        logger.exception(
            "User preferences upsert failed",
            extra={"event": "preferences_upsert_failed", "user_id": payload.user_id},
        )
        raise
    logger.info(
        "User preferences saved",
        extra={"event": "preferences_saved", "user_id": payload.user_id, "fields": sorted(changes)},
    )
    return UserPreferences.model_validate(row)
