"""
Test infrastructure for the newsdesk API.

- SQLite in-memory through aiosqlite; StaticPool keeps every session on the
  one connection that holds the in-memory database.
- ``get_db`` is overridden so HTTP requests use the test session factory.
- Tables are created before and dropped after every test.
- Redis stays disconnected (``cache._redis = None``); the cache then reports
  misses and skips writes, so every read hits the database.
"""
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from newsdesk.cache import cache
from newsdesk.database import Base, build_engine, commit_session, get_db
from newsdesk.main import app
from newsdesk.mapper import NewsModelMapper
from newsdesk.repositories import AuthorRepository, NewsRepository, TagRepository
from newsdesk.services.news_service import NewsService

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

engine_test = build_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

async_session_test = async_sessionmaker(
    engine_test,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def override_get_db():
    async with async_session_test() as session:
        try:
            yield session
            await commit_session(session)
        except Exception:
            await session.rollback()
            raise


app.dependency_overrides[get_db] = override_get_db


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture(autouse=True)
async def setup_db():
    cache._redis = None
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def db_session() -> AsyncSession:
    """A live session for tests that drive repositories or services directly."""
    async with async_session_test() as session:
        yield session


@pytest_asyncio.fixture
async def news_service(db_session: AsyncSession) -> NewsService:
    return NewsService(
        news_repository=NewsRepository(db_session),
        author_repository=AuthorRepository(db_session),
        tag_repository=TagRepository(db_session),
        mapper=NewsModelMapper(),
    )


@pytest_asyncio.fixture
async def async_client() -> AsyncClient:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
