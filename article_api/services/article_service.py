"""
Article service: business logic for the Article resource.

Design notes
------------
- Listing is a fixed-size page (``settings.ARTICLES_PER_PAGE``) of live
  articles ordered by id, optionally filtered to rows whose title or
  content contains the search text.  Two statements are issued: a
  COUNT for the total and the page SELECT.
- The category relation is eager-loaded with ``selectinload``.  A
  soft-deleted category is rendered as ``null`` on the article, but the
  article itself stays visible.
- ``category_id`` only has to reference an existing row; soft-deleted
  categories still satisfy the rule.
- Updates are partial: every field is optional and validated only when
  present.  An empty payload changes nothing.
"""
import logging
import math
from typing import Any, Mapping

from sqlalchemy.ext.asyncio import AsyncSession

from article_api.dependencies import ArticleListParams
from article_api.exceptions import ValidationFailure
from article_api.models import Article, Category
from article_api.repositories import ArticleRepository
from article_api.schemas import PaginatedResponse
from article_api.validation import (
    Rule,
    as_int_key,
    exists,
    max_length,
    required,
    string,
    validate,
)

logger = logging.getLogger(__name__)


def article_rules(db: AsyncSession) -> list[Rule]:
    return [
        required("title"),
        string("title"),
        max_length("title", 255),
        required("content"),
        string("content"),
        required("author"),
        string("author"),
        max_length("author", 255),
        required("category_id"),
        exists("category_id", db, Category.id),
    ]


# ---------------------------------------------------------------------------
# Serialisation helpers
# ---------------------------------------------------------------------------

def _serialize_category(category: Category | None) -> dict | None:
    if category is None or category.is_deleted:
        return None
    return {
        "id": category.id,
        "name": category.name,
        "created_at": category.created_at.isoformat() if category.created_at else None,
        "updated_at": category.updated_at.isoformat() if category.updated_at else None,
    }


def _article_to_dict(article: Article) -> dict:
    return {
        "id": article.id,
        "title": article.title,
        "content": article.content,
        "author": article.author,
        "category_id": article.category_id,
        "created_at": article.created_at.isoformat() if article.created_at else None,
        "updated_at": article.updated_at.isoformat() if article.updated_at else None,
        "category": _serialize_category(article.category),
    }


def _normalise(values: dict[str, Any]) -> dict[str, Any]:
    if "category_id" in values:
        values["category_id"] = as_int_key(values["category_id"])
    return values


# ---------------------------------------------------------------------------
# Public service functions
# ---------------------------------------------------------------------------

async def list_articles(db: AsyncSession, params: ArticleListParams) -> PaginatedResponse:
    repo = ArticleRepository(db)
    total = await repo.count(params.search)
    articles = await repo.page(params.search, offset=params.offset, limit=params.per_page)

    return PaginatedResponse(
        items=[_article_to_dict(a) for a in articles],
        total=total,
        page=params.page,
        page_size=params.per_page,
        pages=math.ceil(total / params.per_page) if total > 0 else 0,
    )


async def get_article(db: AsyncSession, article_id: int) -> dict | None:
    """Return the article with its category, or None when missing or deleted."""
    article = await ArticleRepository(db).find(article_id)
    if article is None:
        return None
    return _article_to_dict(article)


async def create_article(db: AsyncSession, payload: Mapping[str, Any]) -> dict:
    try:
        values = await validate(payload, article_rules(db))
    except ValidationFailure as exc:
        logger.warning("Validation failed during article creation: %s", exc.errors)
        raise

    repo = ArticleRepository(db)
    article = await repo.create(_normalise(values))
    logger.info("Article created: id=%s", article.id)

    # Re-read so the category relation is loaded.
    return _article_to_dict(await repo.find(article.id))


async def update_article(
    db: AsyncSession, article_id: int, payload: Mapping[str, Any]
) -> dict | None:
    """
    Apply the fields present in *payload* to the article.

    Returns None when the article does not exist.
    """
    repo = ArticleRepository(db)
    article = await repo.find(article_id)
    if article is None:
        return None

    try:
        values = await validate(payload, article_rules(db), partial=True)
    except ValidationFailure as exc:
        logger.warning("Validation failed during article update: %s", exc.errors)
        raise

    if not values:
        return _article_to_dict(article)

    await repo.update(article, _normalise(values))
    logger.info("Article updated: id=%s", article_id)
    return _article_to_dict(await repo.find(article_id))


async def delete_article(db: AsyncSession, article_id: int) -> bool:
    repo = ArticleRepository(db)
    article = await repo.find(article_id)
    if article is None:
        return False

    await repo.soft_delete(article)
    logger.info("Article deleted: id=%s", article_id)
    return True
