from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.cache import cache
from newsdesk.database import get_db
from newsdesk.models import news_tags
from newsdesk.repositories import AuthorRepository, NewsRepository, TagRepository
from newsdesk.schemas import MetricsResponse

router = APIRouter(prefix="/api/v1/metrics", tags=["metrics"])


@router.get("", response_model=MetricsResponse)
async def get_metrics(db: AsyncSession = Depends(get_db)):
    total_news = await NewsRepository(db).count()
    total_authors = await AuthorRepository(db).count()
    total_tags = await TagRepository(db).count()
    total_links = (await db.execute(select(func.count()).select_from(news_tags))).scalar_one()

    avg_tags = total_links / total_news if total_news > 0 else 0

    return MetricsResponse(
        total_news=total_news,
        total_authors=total_authors,
        total_tags=total_tags,
        avg_tags_per_news=round(avg_tags, 2),
        cache_info=cache.stats,
    )
