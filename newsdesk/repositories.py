"""
Persistence boundary for the News aggregate.

Each repository wraps the request-scoped ``AsyncSession``.  Writes flush but
never commit; the transaction belongs to the ``get_db`` dependency.
``save`` turns a database ``IntegrityError`` into ``EntityConflictError`` so
callers above this layer never handle SQLAlchemy exceptions directly.
"""
from typing import Generic, TypeVar

from sqlalchemy import asc, desc, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from newsdesk.database import Base, queue_after_commit
from newsdesk.exceptions import EntityConflictError
from newsdesk.models import Author, News, Tag
from newsdesk.pagination import Page, PageRequest, SortDirection

ModelT = TypeVar("ModelT", bound=Base)


class SQLAlchemyRepository(Generic[ModelT]):
    model: type[ModelT]

    # Columns that are safe to sort by; guards against arbitrary attribute access.
    sortable_columns: frozenset[str] = frozenset({"id"})
    default_sort_column: str = "id"

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    def after_commit(self, hook) -> None:
        """Run coroutine function *hook* once the surrounding transaction commits."""
        queue_after_commit(self.db, hook)

    def _load_options(self) -> list:
        return []

    def _resolve_sort_column(self, name: str | None):
        """Unknown or missing column names fall back to ``default_sort_column``."""
        if name in self.sortable_columns:
            return getattr(self.model, name)
        return getattr(self.model, self.default_sort_column)

    async def find_by_id(self, entity_id: int) -> ModelT | None:
        q = select(self.model).where(self.model.id == entity_id).options(*self._load_options())
        result = await self.db.execute(q)
        return result.scalar_one_or_none()

    async def exists_by_id(self, entity_id: int) -> bool:
        result = await self.db.execute(select(self.model.id).where(self.model.id == entity_id))
        return result.first() is not None

    async def count(self) -> int:
        result = await self.db.execute(select(func.count()).select_from(self.model))
        return result.scalar_one()

    async def find_all(self, page_request: PageRequest) -> Page[ModelT]:
        """
        Return one page of rows.

        Two statements are issued: a COUNT for the page total and the
        LIMIT/OFFSET select (plus one per eager-loaded relationship).
        """
        total = await self.count()

        sort = page_request.sort
        sort_col = self._resolve_sort_column(sort.field if sort else None)
        if sort is not None and sort.direction is SortDirection.ASC:
            order_expr = asc(sort_col)
        else:
            order_expr = desc(sort_col)

        q = (
            select(self.model)
            .options(*self._load_options())
            # id as tie-breaker keeps page boundaries stable
            .order_by(order_expr, self.model.id)
            .offset(page_request.offset)
            .limit(page_request.page_size)
        )
        result = await self.db.execute(q)
        return Page(
            items=list(result.scalars().all()),
            page_number=page_request.page_number,
            page_size=page_request.page_size,
            total=total,
        )

    async def save(self, entity: ModelT) -> ModelT:
        self.db.add(entity)
        try:
            await self.db.flush()
        except IntegrityError as exc:
            raise EntityConflictError(str(exc.orig)) from exc
        return entity

    async def delete_by_id(self, entity_id: int) -> None:
        # Loaded through the ORM so many-to-many link rows are removed too.
        entity = await self.find_by_id(entity_id)
        if entity is None:
            return
        await self.db.delete(entity)
        await self.db.flush()


class NamedEntityRepository(SQLAlchemyRepository[ModelT]):
    """Repository for entities identified by a unique ``name`` column."""

    sortable_columns = frozenset({"id", "name"})

    async def find_by_name(self, name: str) -> ModelT | None:
        result = await self.db.execute(select(self.model).where(self.model.name == name))
        return result.scalar_one_or_none()


class AuthorRepository(NamedEntityRepository[Author]):
    model = Author


class TagRepository(NamedEntityRepository[Tag]):
    model = Tag


class NewsRepository(SQLAlchemyRepository[News]):
    model = News
    sortable_columns = frozenset(
        {"id", "title", "content", "create_date", "last_update_date"}
    )
    default_sort_column = "create_date"

    def _load_options(self) -> list:
        return [selectinload(News.author), selectinload(News.tags)]
