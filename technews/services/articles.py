from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from technews.core.errors import NotFoundError
from technews.models.news_models import NewsArticle, utcnow
from technews.schemas.news import (
    CreateNewsArticleInput,
    HomepageData,
    NewsArticle as NewsArticleOut,
    PaginationInput,
    SearchQuery,
    UpdateNewsArticleInput,
)
from technews.services.categories import get_categories
from technews.services.filters import article_filters, text_match


logger = logging.getLogger("technews.articles")

HOMEPAGE_FEATURED_LIMIT = 10

_newest_first = (NewsArticle.published_at.desc(), NewsArticle.id.desc())


def _to_out(rows) -> List[NewsArticleOut]:
    return [NewsArticleOut.model_validate(r) for r in rows]


async def get_homepage_data(session: AsyncSession, params: Optional[PaginationInput] = None) -> HomepageData:
    params = params or PaginationInput()
    try:
        # Carousel: independent of category filter and paging window
        featured_stmt = (
            select(NewsArticle)
            .where(*article_filters(language=params.language, featured_only=True))
            .order_by(*_newest_first)
            .limit(HOMEPAGE_FEATURED_LIMIT)
        )
        featured = (await session.execute(featured_stmt)).scalars().all()

        latest_stmt = (
            select(NewsArticle)
            .where(
                *article_filters(
                    category_id=params.category_id,
                    language=params.language,
                    featured_only=params.featured_only,
                )
            )
            .order_by(*_newest_first)
            .limit(params.limit)
            .offset(params.offset)
        )
        latest = (await session.execute(latest_stmt)).scalars().all()

        categories = await get_categories(session, active_only=True)

        # featured_only and paging deliberately left out of the total
        count_stmt = (
            select(func.count())
            .select_from(NewsArticle)
            .where(*article_filters(category_id=params.category_id, language=params.language))
        )
        total = (await session.execute(count_stmt)).scalar_one()
    except Exception:
        logger.exception("Homepage data query failed", extra={"event": "homepage_failed"})
        raise

    return HomepageData(
        featured_articles=_to_out(featured),
        latest_articles=_to_out(latest),
        categories=categories,
        total_articles=int(total or 0),
    )


async def list_articles(session: AsyncSession, params: PaginationInput) -> List[NewsArticleOut]:
    stmt = (
        select(NewsArticle)
        .where(
            *article_filters(
                category_id=params.category_id,
                language=params.language,
                featured_only=params.featured_only,
            )
        )
        .order_by(*_newest_first)
        .limit(params.limit)
        .offset(params.offset)
    )
    try:
        rows = (await session.execute(stmt)).scalars().all()
    except Exception:
        logger.exception("Article listing failed", extra={"event": "list_articles_failed"})
        raise
    return _to_out(rows)


async def get_featured_articles(
    session: AsyncSession, limit: int = 5, language: Optional[str] = None
) -> List[NewsArticleOut]:
    """Featured articles for the carousel, highest score first."""
    stmt = (
        select(NewsArticle)
        .where(*article_filters(language=language, featured_only=True))
        .order_by(NewsArticle.score.desc(), NewsArticle.published_at.desc())
        .limit(limit)
    )
    try:
        rows = (await session.execute(stmt)).scalars().all()
    except Exception:
        logger.exception("Featured articles query failed", extra={"event": "featured_failed"})
        raise
    return _to_out(rows)


async def search_articles(session: AsyncSession, query: SearchQuery) -> List[NewsArticleOut]:
    """Substring search, newest first. No relevance ranking."""
    stmt = (
        select(NewsArticle)
        .where(
            text_match(query.query),
            *article_filters(category_id=query.category_id, language=query.language),
        )
        .order_by(*_newest_first)
        .limit(query.limit)
        .offset(query.offset)
    )
    try:
        rows = (await session.execute(stmt)).scalars().all()
    except Exception:
        logger.exception("Article search failed", extra={"event": "search_failed", "query": query.query})
        raise
    return _to_out(rows)


async def create_news_article(session: AsyncSession, payload: CreateNewsArticleInput) -> NewsArticleOut:
    now = utcnow()
    article = NewsArticle(**payload.model_dump(), created_at=now, updated_at=now)
    session.add(article)
    try:
        await session.flush()
        await session.commit()
    except Exception:
        logger.exception("Article creation failed", extra={"event": "article_create_failed"})
        raise
    logger.info(
        "Article created",
        extra={"event": "article_created", "article_id": article.id, "language": article.language},
    )
    return NewsArticleOut.model_validate(article)


async def update_news_article(session: AsyncSession, payload: UpdateNewsArticleInput) -> NewsArticleOut:
    changes = payload.model_dump(exclude_unset=True, exclude={"id"})
    try:
        article = await session.get(NewsArticle, payload.id)
    except Exception:
        logger.exception("Article lookup failed", extra={"event": "article_lookup_failed", "article_id": payload.id})
        raise
    if article is None:
        logger.warning("Article not found for update", extra={"event": "article_not_found", "article_id": payload.id})
        raise NotFoundError(f"News article with id {payload.id} not found")

    for field, value in changes.items():
        setattr(article, field, value)
    article.updated_at = utcnow()
    try:
        await session.commit()
    except Exception:
        logger.exception("Article update failed", extra={"event": "article_update_failed", "article_id": payload.id})
        raise
    logger.info(
        "Article updated",
        extra={"event": "article_updated", "article_id": article.id, "fields": sorted(changes)},
    )
    return NewsArticleOut.model_validate(article)
