# technews/api/rpc.py
from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from technews.core.errors import ErrorResponse
from technews.db.sa import get_session
from technews.schemas.news import (
    CategoriesInput,
    Category,
    CreateCategoryInput,
    CreateNewsArticleInput,
    FeaturedArticlesInput,
    HealthStatus,
    HomepageData,
    NewsArticle,
    PaginationInput,
    SearchQuery,
    UpdateNewsArticleInput,
    UpdateUserPreferencesInput,
    UserPreferences,
    UserPreferencesQuery,
)
from technews.services import articles as svc
from technews.services import categories as cat_svc
from technews.services import preferences as pref_svc


router = APIRouter(prefix="/api/rpc", tags=["rpc"])

# -----------------------
#  Queries
# -----------------------

@router.get("/healthcheck", response_model=HealthStatus)
async def healthcheck() -> HealthStatus:
    return HealthStatus(status="ok", timestamp=datetime.now(timezone.utc))


@router.post("/get-homepage-data", response_model=HomepageData,
             summary="Featured carousel, latest window, active categories and total count")
async def get_homepage_data(
    payload: Optional[PaginationInput] = Body(default=None),
    session: AsyncSession = Depends(get_session),
) -> HomepageData:
    return await svc.get_homepage_data(session, payload)


@router.post("/get-news-articles", response_model=List[NewsArticle])
async def get_news_articles(
    payload: PaginationInput,
    session: AsyncSession = Depends(get_session),
) -> List[NewsArticle]:
    return await svc.list_articles(session, payload)


@router.post("/get-featured-articles", response_model=List[NewsArticle])
async def get_featured_articles(
    payload: Optional[FeaturedArticlesInput] = Body(default=None),
    session: AsyncSession = Depends(get_session),
) -> List[NewsArticle]:
    payload = payload or FeaturedArticlesInput()
    return await svc.get_featured_articles(session, limit=payload.limit, language=payload.language)


@router.post("/search-articles", response_model=List[NewsArticle])
async def search_articles(
    payload: SearchQuery,
    session: AsyncSession = Depends(get_session),
) -> List[NewsArticle]:
    return await svc.search_articles(session, payload)


@router.post("/get-categories", response_model=List[Category])
async def get_categories(
    payload: Optional[CategoriesInput] = Body(default=None),
    session: AsyncSession = Depends(get_session),
) -> List[Category]:
    payload = payload or CategoriesInput()
    return await cat_svc.get_categories(session, active_only=payload.active_only)


@router.post("/get-user-preferences", response_model=UserPreferences,
             summary="Stored preferences, or defaults for an unknown user id")
async def get_user_preferences(
    payload: UserPreferencesQuery,
    session: AsyncSession = Depends(get_session),
) -> UserPreferences:
    return await pref_svc.get_user_preferences(session, payload.user_id)

# -----------------------
#  Mutations
# -----------------------

@router.post("/create-news-article", response_model=NewsArticle)
async def create_news_article(
    payload: CreateNewsArticleInput,
    session: AsyncSession = Depends(get_session),
) -> NewsArticle:
    return await svc.create_news_article(session, payload)


@router.post("/update-news-article", response_model=NewsArticle,
             responses={404: {"model": ErrorResponse, "description": "Article not found"}})
async def update_news_article(
    payload: UpdateNewsArticleInput,
    session: AsyncSession = Depends(get_session),
) -> NewsArticle:
    return await svc.update_news_article(session, payload)


@router.post("/update-user-preferences", response_model=UserPreferences)
async def update_user_preferences(
    payload: UpdateUserPreferencesInput,
    session: AsyncSession = Depends(get_session),
) -> UserPreferences:
    return await pref_svc.update_user_preferences(session, payload)


@router.post("/create-category", response_model=Category,
             responses={409: {"model": ErrorResponse, "description": "Slug already exists"}})
async def create_category(
    payload: CreateCategoryInput,
    session: AsyncSession = Depends(get_session),
) -> Category:
    return await cat_svc.create_category(session, payload)
