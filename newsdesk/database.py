"""
Engine, declarative base and the request-scoped session.

A request's transaction is closed by ``commit_session``: it commits, then
runs the coroutines queued under ``session.info["after_commit"]``.  Cache
invalidation is queued there so no reader can repopulate the cache with
rows the transaction is about to replace.
"""
from typing import Awaitable, Callable

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from newsdesk.config import settings
from newsdesk.middleware import install_query_counter

AFTER_COMMIT_KEY = "after_commit"


class Base(DeclarativeBase):
    pass


def build_engine(url: str, **kwargs) -> AsyncEngine:
    """Create an async engine with the per-request query counter attached."""
    new_engine = create_async_engine(url, **kwargs)
    install_query_counter(new_engine)
    return new_engine


engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG, pool_pre_ping=True)
async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


def queue_after_commit(session: AsyncSession, hook: Callable[[], Awaitable[None]]) -> None:
    session.info.setdefault(AFTER_COMMIT_KEY, []).append(hook)


async def commit_session(session: AsyncSession) -> None:
    await session.commit()
    hooks = session.info.pop(AFTER_COMMIT_KEY, [])
    for hook in hooks:
        await hook()


async def get_db():
    async with async_session() as session:
        try:
            yield session
            await commit_session(session)
        except Exception:
            session.info.pop(AFTER_COMMIT_KEY, None)
            await session.rollback()
            raise
