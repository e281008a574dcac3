"""
Repositories: persistence for the mapped records.

Each repository wraps the request's ``AsyncSession`` and exposes the
same small surface: ``find``, ``list``, ``create``, ``update`` and
``soft_delete``.  Reads exclude soft-deleted rows.  Writes flush but
never commit; the transaction boundary is owned by the ``get_db``
dependency.
"""
from typing import Any, Generic, Mapping, Sequence, TypeVar

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from article_api.models import MAX_ID, Article, Category, User, utcnow

ModelT = TypeVar("ModelT", Article, Category, User)


class Repository(Generic[ModelT]):
    model: type[ModelT]

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    def _live(self):
        return select(self.model).where(self.model.deleted_at.is_(None))

    async def find(self, record_id: int) -> ModelT | None:
        # Ids outside the column range cannot name a row.
        if not 0 < record_id <= MAX_ID:
            return None
        result = await self.db.execute(self._live().where(self.model.id == record_id))
        return result.scalar_one_or_none()

    async def list(self) -> Sequence[ModelT]:
        result = await self.db.execute(self._live().order_by(self.model.id))
        return result.scalars().all()

    async def create(self, values: Mapping[str, Any]) -> ModelT:
        record = self.model(**values)
        self.db.add(record)
        await self.db.flush()
        return record

    async def update(self, record: ModelT, values: Mapping[str, Any]) -> ModelT:
        for field, value in values.items():
            setattr(record, field, value)
        if values:
            await self.db.flush()
        return record

    async def soft_delete(self, record: ModelT) -> ModelT:
        record.deleted_at = utcnow()
        await self.db.flush()
        return record


class UserRepository(Repository[User]):
    model = User

    async def find_by_email(self, email: str) -> User | None:
        result = await self.db.execute(self._live().where(User.email == email))
        return result.scalar_one_or_none()


class CategoryRepository(Repository[Category]):
    model = Category


class ArticleRepository(Repository[Article]):
    model = Article

    def _live(self):
        # populate_existing refreshes rows already in the identity map, so a
        # record re-read after a write comes back with its category loaded.
        return (
            super()
            ._live()
            .options(selectinload(Article.category))
            .execution_options(populate_existing=True)
        )

    def _search_filter(self, search: str | None):
        if search is None:
            return None
        return or_(
            Article.title.contains(search, autoescape=True),
            Article.content.contains(search, autoescape=True),
        )

    async def count(self, search: str | None = None) -> int:
        q = select(func.count()).select_from(Article).where(Article.deleted_at.is_(None))
        condition = self._search_filter(search)
        if condition is not None:
            q = q.where(condition)
        return (await self.db.execute(q)).scalar_one()

    async def page(
        self, search: str | None = None, offset: int = 0, limit: int = 10
    ) -> Sequence[Article]:
        q = self._live()
        condition = self._search_filter(search)
        if condition is not None:
            q = q.where(condition)
        q = q.order_by(Article.id).offset(offset).limit(limit)
        result = await self.db.execute(q)
        return result.scalars().all()
