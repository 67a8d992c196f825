from newsdesk.models import Author, News, Tag, utcnow
from newsdesk.pagination import Page
from newsdesk.schemas import NewsCreate, NewsResponse


class NewsModelMapper:
    """Converts between ``News`` ORM rows and the pydantic transfer objects."""

    def model_to_dto(self, news: News) -> NewsResponse:
        # Relationships must already be loaded (they are lazy="noload").
        return NewsResponse.model_validate(news)

    def dto_to_model(
        self,
        request: NewsCreate,
        author: Author | None = None,
        tags: list[Tag] | None = None,
    ) -> News:
        now = utcnow()
        return News(
            title=request.title,
            content=request.content,
            author=author,
            tags=list(tags or []),
            create_date=now,
            last_update_date=now,
        )

    def news_page_to_dto_page(self, page: Page[News]) -> Page[NewsResponse]:
        return page.map(self.model_to_dto)
