"""
News service: business logic for the News aggregate.

Design notes
------------
- Persistence goes through the three repositories and DTO conversion
  through ``NewsModelMapper``; the service never touches the session.
- Authors and tags are referenced by name.  Missing ones are created on
  the fly before the News row is written.  The check-then-insert is not
  atomic: two requests introducing the same name concurrently can collide,
  and that collision surfaces as ``EntityConflictError`` untranslated.
- Reads go through the cache-aside layer.  Every write drops the affected
  keys at once and again after commit, so a read racing the open
  transaction cannot leave the old row cached.
"""
import logging

from newsdesk.cache import cache
from newsdesk.config import settings
from newsdesk.exceptions import (
    EntityConflictError,
    NotFoundError,
    ResourceConflictError,
    ServiceErrorCode,
)
from newsdesk.mapper import NewsModelMapper
from newsdesk.models import Author, Tag, utcnow
from newsdesk.pagination import Page, PageRequest, parse_sort
from newsdesk.repositories import AuthorRepository, NewsRepository, TagRepository
from newsdesk.schemas import NewsCreate, NewsResponse, NewsUpdate

logger = logging.getLogger(__name__)


class NewsService:
    def __init__(
        self,
        news_repository: NewsRepository,
        author_repository: AuthorRepository,
        tag_repository: TagRepository,
        mapper: NewsModelMapper,
    ) -> None:
        self.news_repository = news_repository
        self.author_repository = author_repository
        self.tag_repository = tag_repository
        self.mapper = mapper

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def read_all(
        self,
        page_number: int = 1,
        page_size: int = settings.DEFAULT_PAGE_SIZE,
        sort: str = settings.DEFAULT_SORT,
    ) -> Page[NewsResponse]:
        """
        Return one page of News ordered by ``sort`` (``"field:direction"``).

        ``asc`` in any case sorts ascending; any other direction token sorts
        descending.  ``PageRequest`` raises ``ValueError`` for a page number
        or size below 1.
        """
        sort_spec = parse_sort(sort)
        page_request = PageRequest(page_number, page_size, sort_spec)

        cache_key = cache.news_list_key(
            page_number, page_size, sort_spec.field, sort_spec.direction.value
        )
        cached = await cache.get(cache_key)
        if cached:
            return Page(
                items=[NewsResponse.model_validate(item) for item in cached["items"]],
                page_number=cached["page_number"],
                page_size=cached["page_size"],
                total=cached["total"],
            )

        page = self.mapper.news_page_to_dto_page(await self.news_repository.find_all(page_request))
        await cache.set(
            cache_key,
            {
                "items": [item.model_dump(mode="json") for item in page.items],
                "page_number": page.page_number,
                "page_size": page.page_size,
                "total": page.total,
            },
            ttl=settings.CACHE_TTL_LIST,
        )
        return page

    async def read_by_id(self, news_id: int) -> NewsResponse:
        cache_key = cache.news_detail_key(news_id)
        cached = await cache.get(cache_key)
        if cached:
            return NewsResponse.model_validate(cached)

        news = await self.news_repository.find_by_id(news_id)
        if news is None:
            raise NotFoundError.from_code(ServiceErrorCode.NEWS_ID_DOES_NOT_EXIST, news_id)

        dto = self.mapper.model_to_dto(news)
        await cache.set(cache_key, dto.model_dump(mode="json"), ttl=settings.CACHE_TTL_DETAIL)
        return dto

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create(self, request: NewsCreate) -> NewsResponse:
        author = await self.create_non_existent_author(request.author)
        await self.create_non_existent_tags(request.tags)
        tags = await self._find_tags_by_name(request.tags)

        news = self.mapper.dto_to_model(request, author=author, tags=tags)
        try:
            news = await self.news_repository.save(news)
        except EntityConflictError as exc:
            code = ServiceErrorCode.NEWS_CONFLICT
            raise ResourceConflictError(code.message, code.error_code, str(exc)) from exc

        logger.info("Created news id=%s title=%r", news.id, news.title)
        await self._invalidate_cache()
        return self.mapper.model_to_dto(news)

    async def update(self, news_id: int, request: NewsUpdate) -> NewsResponse:
        """
        Overwrite title, content, author and tags of an existing News and
        bump its ``last_update_date``.
        """
        news = await self.news_repository.find_by_id(news_id)
        if news is None:
            raise NotFoundError.from_code(ServiceErrorCode.NEWS_ID_DOES_NOT_EXIST, news_id)

        author = await self.create_non_existent_author(request.author)
        await self.create_non_existent_tags(request.tags)

        news.title = request.title
        news.content = request.content
        news.author = author
        news.tags = await self._find_tags_by_name(request.tags)
        news.last_update_date = utcnow()

        news = await self.news_repository.save(news)
        logger.info("Updated news id=%s", news_id)
        await self._invalidate_cache(news_id)
        return self.mapper.model_to_dto(news)

    async def delete_by_id(self, news_id: int) -> None:
        if not await self.news_repository.exists_by_id(news_id):
            raise NotFoundError.from_code(ServiceErrorCode.NEWS_ID_DOES_NOT_EXIST, news_id)

        await self.news_repository.delete_by_id(news_id)
        logger.info("Deleted news id=%s", news_id)
        await self._invalidate_cache(news_id)

    async def _invalidate_cache(self, news_id: int | None = None) -> None:
        await cache.invalidate_news(news_id)
        self.news_repository.after_commit(lambda: cache.invalidate_news(news_id))

    # ------------------------------------------------------------------
    # Author / tag resolution
    # ------------------------------------------------------------------

    async def create_non_existent_author(self, name: str | None) -> Author | None:
        """
        Return the Author called *name*, inserting it first if needed.

        ``None`` or an empty name means "no author" and touches nothing.
        """
        if not name:
            return None
        author = await self.author_repository.find_by_name(name)
        if author is None:
            author = await self.author_repository.save(Author(name=name))
            logger.debug("Auto-created author %r (id=%s)", name, author.id)
        return author

    async def create_non_existent_tags(self, names: list[str]) -> None:
        for name in dict.fromkeys(names):
            if await self.tag_repository.find_by_name(name) is None:
                tag = await self.tag_repository.save(Tag(name=name))
                logger.debug("Auto-created tag %r (id=%s)", name, tag.id)

    async def _find_tags_by_name(self, names: list[str]) -> list[Tag]:
        # Duplicate names collapse to one link; order of first appearance is kept.
        tags: list[Tag] = []
        for name in dict.fromkeys(names):
            tag = await self.tag_repository.find_by_name(name)
            if tag is None:
                raise NotFoundError.from_code(ServiceErrorCode.TAG_NAME_DOES_NOT_EXIST, name)
            tags.append(tag)
        return tags
