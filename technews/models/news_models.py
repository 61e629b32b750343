from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from technews.db.base import Base
from technews.db.types import JSONList


LANGUAGES = ("zh", "en")
THEMES = ("light", "dark", "system")

DEFAULT_LANGUAGE = "zh"
DEFAULT_THEME = "system"

language_enum = Enum(*LANGUAGES, name="language", metadata=Base.metadata)
theme_enum = Enum(*THEMES, name="theme", metadata=Base.metadata)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Category(Base):
    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    name_zh: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    slug: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    icon_name: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, server_default="0", nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    articles: Mapped[list[NewsArticle]] = relationship(back_populates="category")

    __table_args__ = (
        Index("categories_sort_order_idx", "sort_order"),
        Index("categories_active_idx", "is_active"),
    )


class NewsArticle(Base):
    __tablename__ = "news_articles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    thumbnail_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    source_url: Mapped[str] = mapped_column(Text, nullable=False)
    author: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    source: Mapped[str] = mapped_column(String(100), nullable=False)
    score: Mapped[int] = mapped_column(Integer, default=0, server_default="0", nullable=False)
    comments_count: Mapped[int] = mapped_column(Integer, default=0, server_default="0", nullable=False)
    published_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )
    is_featured: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    category_id: Mapped[Optional[int]] = mapped_column(ForeignKey("categories.id"), nullable=True)
    language: Mapped[str] = mapped_column(language_enum, nullable=False)
    tags: Mapped[list[str]] = mapped_column(JSONList, default=list, server_default="[]", nullable=False)

    category: Mapped[Optional[Category]] = relationship(back_populates="articles")

    __table_args__ = (
        Index("news_articles_published_at_idx", "published_at"),
        Index("news_articles_score_idx", "score"),
        Index("news_articles_featured_idx", "is_featured"),
        Index("news_articles_category_idx", "category_id"),
        Index("news_articles_language_idx", "language"),
    )


class UserPreference(Base):
    __tablename__ = "user_preferences"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # session id or any other opaque client identifier
    user_id: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    theme: Mapped[str] = mapped_column(
        theme_enum, default=DEFAULT_THEME, server_default=DEFAULT_THEME, nullable=False
    )
    language: Mapped[str] = mapped_column(
        language_enum, default=DEFAULT_LANGUAGE, server_default=DEFAULT_LANGUAGE, nullable=False
    )
    categories_order: Mapped[list[int]] = mapped_column(JSONList, default=list, server_default="[]", nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )
