"""Composable WHERE predicates for article queries.

Each builder returns a list of boolean SQL expressions; callers pass them to
``select(...).where(*conditions)``, which joins them with AND. An empty list
means "no filter".
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import ColumnElement, Text, or_, type_coerce

from technews.models.news_models import NewsArticle


def article_filters(
    *,
    category_id: Optional[int] = None,
    language: Optional[str] = None,
    featured_only: bool = False,
) -> List[ColumnElement[bool]]:
    conditions: List[ColumnElement[bool]] = []
    if category_id is not None:
        conditions.append(NewsArticle.category_id == category_id)
    if language is not None:
        conditions.append(NewsArticle.language == language)
    if featured_only:
        conditions.append(NewsArticle.is_featured.is_(True))
    return conditions


def text_match(query: str) -> ColumnElement[bool]:
    """Case-insensitive substring match on title, description, content or tags.

    Tags are matched against their stored JSON text, so a hit on any tag
    counts. ``%`` and ``_`` in the query are matched literally.
    """
    return or_(
        NewsArticle.title.icontains(query, autoescape=True),
        NewsArticle.description.icontains(query, autoescape=True),
        NewsArticle.content.icontains(query, autoescape=True),
        # plain-text view of the JSON column, otherwise the pattern would be list-encoded
        type_coerce(NewsArticle.tags, Text).icontains(query, autoescape=True),
    )
