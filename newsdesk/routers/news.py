from fastapi import APIRouter, Depends

from newsdesk.dependencies import PaginationParams, get_news_service
from newsdesk.schemas import NewsCreate, NewsResponse, NewsUpdate, PageResponse
from newsdesk.services.news_service import NewsService

router = APIRouter(prefix="/api/v1/news", tags=["news"])


@router.get("", response_model=PageResponse)
async def list_news(
    pagination: PaginationParams = Depends(),
    service: NewsService = Depends(get_news_service),
):
    page = await service.read_all(pagination.page, pagination.page_size, pagination.sort)
    return PageResponse(
        items=page.items,
        page_number=page.page_number,
        page_size=page.page_size,
        total=page.total,
        total_pages=page.total_pages,
    )


@router.get("/{news_id}", response_model=NewsResponse)
async def get_news(news_id: int, service: NewsService = Depends(get_news_service)):
    return await service.read_by_id(news_id)


@router.post("", status_code=201, response_model=NewsResponse)
async def create_news(data: NewsCreate, service: NewsService = Depends(get_news_service)):
    return await service.create(data)


@router.put("/{news_id}", response_model=NewsResponse)
async def update_news(
    news_id: int, data: NewsUpdate, service: NewsService = Depends(get_news_service)
):
    return await service.update(news_id, data)


@router.delete("/{news_id}", status_code=204)
async def delete_news(news_id: int, service: NewsService = Depends(get_news_service)):
    await service.delete_by_id(news_id)
