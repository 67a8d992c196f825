from fastapi import Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.config import settings
from newsdesk.database import get_db
from newsdesk.mapper import NewsModelMapper
from newsdesk.repositories import AuthorRepository, NewsRepository, TagRepository
from newsdesk.services.news_service import NewsService


class PaginationParams:
    """
    Reusable FastAPI dependency that parses pagination / sorting query
    parameters.

    Attributes
    ----------
    page:
        1-based page number (minimum 1).
    page_size:
        Number of items per page, clamped to ``settings.MAX_PAGE_SIZE``
        regardless of the value supplied by the caller.
    sort:
        ``"field:direction"``, e.g. ``title:asc``.  Direction ``asc`` (any
        case) sorts ascending, anything else descending.  Unknown fields
        fall back to ``create_date``.
    """

    def __init__(
        self,
        page: int = Query(1, ge=1, description="Page number (1-based)."),
        page_size: int = Query(
            settings.DEFAULT_PAGE_SIZE,
            ge=1,
            le=100,
            description="Number of items returned per page (max 100).",
        ),
        sort: str = Query(
            settings.DEFAULT_SORT,
            description="Sort expression 'field:direction', e.g. 'title:asc'.",
        ),
    ) -> None:
        self.page = page
        self.page_size = min(page_size, settings.MAX_PAGE_SIZE)
        self.sort = sort


def get_news_service(db: AsyncSession = Depends(get_db)) -> NewsService:
    """Wire a ``NewsService`` onto the request's session."""
    return NewsService(
        news_repository=NewsRepository(db),
        author_repository=AuthorRepository(db),
        tag_repository=TagRepository(db),
        mapper=NewsModelMapper(),
    )
