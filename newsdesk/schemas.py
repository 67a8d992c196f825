from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

TagName = Annotated[str, Field(min_length=3, max_length=15)]


# --- Author ---

class AuthorResponse(BaseModel):
    id: int
    name: str
    model_config = ConfigDict(from_attributes=True)


# --- Tag ---

class TagResponse(BaseModel):
    id: int
    name: str
    model_config = ConfigDict(from_attributes=True)


# --- News ---

class NewsBase(BaseModel):
    title: str = Field(min_length=5, max_length=30)
    content: str = Field(min_length=5, max_length=255)
    author: str | None = Field(None, min_length=3, max_length=15)  # author name
    tags: list[TagName] = []  # tag names


class NewsCreate(NewsBase):
    pass


class NewsUpdate(NewsBase):
    """Full replacement of a News; every field is overwritten."""


class NewsResponse(BaseModel):
    id: int
    title: str
    content: str
    author: AuthorResponse | None = None
    tags: list[TagResponse] = []
    create_date: datetime
    last_update_date: datetime
    model_config = ConfigDict(from_attributes=True)


# --- Pagination ---

class PageResponse(BaseModel):
    items: list[NewsResponse]
    page_number: int
    page_size: int
    total: int
    total_pages: int


# --- Metrics ---

class MetricsResponse(BaseModel):
    total_news: int
    total_authors: int
    total_tags: int
    avg_tags_per_news: float
    cache_info: dict = {}
