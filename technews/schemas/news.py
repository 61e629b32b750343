from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, List, Literal, Optional

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    TypeAdapter,
    ValidationError,
    field_validator,
)

from technews.db.types import decode_json_list


Language = Literal["zh", "en"]
Theme = Literal["light", "dark", "system"]

_http_url = TypeAdapter(HttpUrl)


def _check_url(value: str) -> str:
    # validated as http(s) URL, stored exactly as given
    try:
        _http_url.validate_python(value)
    except ValidationError:
        raise ValueError("invalid URL") from None
    return value


WebUrl = Annotated[str, AfterValidator(_check_url)]


def to_utc(value: datetime) -> datetime:
    """Normalize to an aware UTC datetime; naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# --- Entities (responses) ---

class NewsArticle(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    content: Optional[str] = None
    thumbnail_url: Optional[str] = None
    source_url: str
    author: Optional[str] = None
    source: str
    score: int
    comments_count: int
    published_at: datetime
    created_at: datetime
    updated_at: datetime
    is_featured: bool
    category_id: Optional[int] = None
    language: Language
    tags: List[str] = []

    model_config = ConfigDict(from_attributes=True)

    # SQLite hands back naive values; everything is stored as UTC
    @field_validator("published_at", "created_at", "updated_at")
    @classmethod
    def _as_utc(cls, v: datetime) -> datetime:
        return to_utc(v)

    @field_validator("tags", mode="before")
    @classmethod
    def _decode_tags(cls, v):
        return [str(t) for t in decode_json_list(v)]


class Category(BaseModel):
    id: int
    name: str
    name_zh: Optional[str] = None
    slug: str
    description: Optional[str] = None
    icon_name: Optional[str] = None
    sort_order: int
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_validator("created_at")
    @classmethod
    def _as_utc(cls, v: datetime) -> datetime:
        return to_utc(v)


class UserPreferences(BaseModel):
    # None when the preferences were synthesized and never stored
    id: Optional[int] = None
    user_id: str
    theme: Theme = "system"
    language: Language = "zh"
    categories_order: List[int] = []
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_validator("created_at", "updated_at")
    @classmethod
    def _as_utc(cls, v: datetime) -> datetime:
        return to_utc(v)

    @field_validator("categories_order", mode="before")
    @classmethod
    def _decode_order(cls, v):
        out = []
        for item in decode_json_list(v):
            try:
                out.append(int(item))
            except (TypeError, ValueError):
                continue
        return out


class HomepageData(BaseModel):
    featured_articles: List[NewsArticle]
    latest_articles: List[NewsArticle]
    categories: List[Category]
    total_articles: int


class HealthStatus(BaseModel):
    status: str
    timestamp: datetime


# --- Procedure inputs ---

class PaginationInput(BaseModel):
    limit: int = Field(default=20, ge=1, le=100)
    offset: int = Field(default=0, ge=0)
    category_id: Optional[int] = None
    language: Optional[Language] = None
    featured_only: bool = False


class FeaturedArticlesInput(BaseModel):
    limit: int = Field(default=5, ge=1, le=20)
    language: Optional[Language] = None


class SearchQuery(BaseModel):
    query: str = Field(min_length=1)
    category_id: Optional[int] = None
    language: Optional[Language] = None
    limit: int = Field(default=20, ge=1, le=100)
    offset: int = Field(default=0, ge=0)


class CategoriesInput(BaseModel):
    active_only: bool = Field(default=True, alias="activeOnly")

    model_config = ConfigDict(populate_by_name=True)


class CreateNewsArticleInput(BaseModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    content: Optional[str] = None
    thumbnail_url: Optional[WebUrl] = None
    source_url: WebUrl
    author: Optional[str] = Field(default=None, max_length=200)
    source: str = Field(max_length=100)
    score: int = Field(default=0, ge=0)
    comments_count: int = Field(default=0, ge=0)
    published_at: datetime
    is_featured: bool = False
    category_id: Optional[int] = None
    language: Language
    tags: List[str] = []

    @field_validator("published_at")
    @classmethod
    def _published_utc(cls, v: datetime) -> datetime:
        return to_utc(v)


class UpdateNewsArticleInput(BaseModel):
    """Partial update: only fields present in the request are written."""

    id: int
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    content: Optional[str] = None
    thumbnail_url: Optional[WebUrl] = None
    author: Optional[str] = Field(default=None, max_length=200)
    score: Optional[int] = Field(default=None, ge=0)
    comments_count: Optional[int] = Field(default=None, ge=0)
    is_featured: Optional[bool] = None
    category_id: Optional[int] = None
    tags: Optional[List[str]] = None

    @field_validator("title", "score", "comments_count", "is_featured", "tags")
    @classmethod
    def _not_null(cls, v):
        # explicit null is only allowed for nullable columns
        if v is None:
            raise ValueError("field may be omitted but not null")
        return v


class CreateCategoryInput(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    name_zh: Optional[str] = Field(default=None, max_length=100)
    slug: str = Field(min_length=1, max_length=100)
    description: Optional[str] = None
    icon_name: Optional[str] = Field(default=None, max_length=50)
    sort_order: int = 0
    is_active: bool = True


class UserPreferencesQuery(BaseModel):
    user_id: str = Field(min_length=1, max_length=255, alias="userId")

    model_config = ConfigDict(populate_by_name=True)


class UpdateUserPreferencesInput(BaseModel):
    user_id: str = Field(min_length=1, max_length=255)
    theme: Optional[Theme] = None
    language: Optional[Language] = None
    categories_order: Optional[List[int]] = None
