"""
Category service: business logic for the Category resource.

Names are unique among live categories only; a soft-deleted category
frees its name.  Deleting a category never touches the articles that
reference it.
"""
import logging
from typing import Any, Mapping

from sqlalchemy.ext.asyncio import AsyncSession

from article_api.exceptions import ValidationFailure
from article_api.models import Category
from article_api.repositories import CategoryRepository
from article_api.validation import Rule, max_length, required, string, unique, validate

logger = logging.getLogger(__name__)

NAME_MAX_LENGTH = 100


def category_rules(db: AsyncSession, ignore_id: int | None = None) -> list[Rule]:
    return [
        required("name"),
        string("name"),
        max_length("name", NAME_MAX_LENGTH),
        unique("name", db, Category.name, ignore_id=ignore_id),
    ]


def _category_to_dict(category: Category) -> dict:
    return {
        "id": category.id,
        "name": category.name,
        "created_at": category.created_at.isoformat() if category.created_at else None,
        "updated_at": category.updated_at.isoformat() if category.updated_at else None,
    }


async def list_categories(db: AsyncSession) -> list[dict]:
    categories = await CategoryRepository(db).list()
    logger.info("Fetched all categories")
    return [_category_to_dict(c) for c in categories]


async def create_category(db: AsyncSession, payload: Mapping[str, Any]) -> dict:
    try:
        values = await validate(payload, category_rules(db))
    except ValidationFailure as exc:
        logger.warning("Validation failed during category creation: %s", exc.errors)
        raise

    category = await CategoryRepository(db).create({"name": values["name"]})
    logger.info("Category created: id=%s", category.id)
    return _category_to_dict(category)


async def update_category(
    db: AsyncSession, category_id: int, payload: Mapping[str, Any]
) -> dict | None:
    """Rename a category.  Returns None when it does not exist."""
    repo = CategoryRepository(db)
    category = await repo.find(category_id)
    if category is None:
        logger.error("Category not found: id=%s", category_id)
        return None

    try:
        values = await validate(payload, category_rules(db, ignore_id=category_id))
    except ValidationFailure as exc:
        logger.warning("Validation failed during category update: %s", exc.errors)
        raise

    await repo.update(category, {"name": values["name"]})
    logger.info("Category updated: id=%s", category_id)
    return _category_to_dict(category)


async def delete_category(db: AsyncSession, category_id: int) -> bool:
    repo = CategoryRepository(db)
    category = await repo.find(category_id)
    if category is None:
        logger.error("Delete failed, category not found: id=%s", category_id)
        return False

    await repo.soft_delete(category)
    logger.info("Category soft deleted: id=%s", category_id)
    return True
