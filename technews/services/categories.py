from __future__ import annotations

import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from technews.core.errors import UniquenessError
from technews.models.news_models import Category, utcnow
from technews.schemas.news import Category as CategoryOut, CreateCategoryInput


logger = logging.getLogger("technews.categories")


async def get_categories(session: AsyncSession, active_only: bool = True) -> List[CategoryOut]:
    stmt = select(Category).order_by(Category.sort_order.asc(), Category.id.asc())
    if active_only:
        stmt = stmt.where(Category.is_active.is_(True))
    try:
        rows = (await session.execute(stmt)).scalars().all()
    except Exception:
        logger.exception("Category listing failed", extra={"event": "categories_failed"})
        raise
    return [CategoryOut.model_validate(r) for r in rows]


async def create_category(session: AsyncSession, payload: CreateCategoryInput) -> CategoryOut:
    try:
        existing = (await session.execute(select(Category.id).where(Category.slug == payload.slug))).scalar_one_or_none()
    except Exception:
        logger.exception("Category slug lookup failed", extra={"event": "category_lookup_failed", "slug": payload.slug})
        raise
    if existing is not None:
        logger.warning("Duplicate category slug", extra={"event": "category_slug_taken", "slug": payload.slug})
        raise UniquenessError(f"Category slug '{payload.slug}' already exists")

    category = Category(**payload.model_dump(), created_at=utcnow())
    session.add(category)
    try:
        await session.flush()
        await session.commit()
    except IntegrityError as exc:
        # lost a race against a concurrent insert of the same slug
        await session.rollback()
        logger.warning("Duplicate category slug", extra={"event": "category_slug_taken", "slug": payload.slug})
        raise UniquenessError(f"Category slug '{payload.slug}' already exists") from exc
    logger.info(
        "Category created",
        extra={"event": "category_created", "category_id": category.id, "slug": category.slug},
    )
    return CategoryOut.model_validate(category)
