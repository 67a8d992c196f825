"""Populate the newsdesk database with demo authors, tags and news."""
import argparse
import asyncio
import logging
import random
import time

from newsdesk.database import Base, async_session, commit_session, engine
from newsdesk.mapper import NewsModelMapper
from newsdesk.repositories import AuthorRepository, NewsRepository, TagRepository
from newsdesk.schemas import NewsCreate
from newsdesk.services.news_service import NewsService

logger = logging.getLogger("seed")

AUTHORS = ["alice", "bob", "carol", "dmitry", "erin", "farid", "grace", "heidi"]
TAGS = ["politics", "economy", "science", "sports", "culture", "health",
        "technology", "travel", "weather", "education"]


async def seed(count: int, reset: bool) -> None:
    start = time.perf_counter()

    async with engine.begin() as conn:
        if reset:
            await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as session:
        service = NewsService(
            NewsRepository(session),
            AuthorRepository(session),
            TagRepository(session),
            NewsModelMapper(),
        )
        # Going through the service exercises author/tag auto-creation.
        for i in range(count):
            await service.create(
                NewsCreate(
                    title=f"Headline number {i:05d}",
                    content=f"Body of news item {i}. " * 3,
                    author=random.choice(AUTHORS),
                    tags=random.sample(TAGS, k=random.randint(1, 3)),
                )
            )
        await commit_session(session)

    logger.info("Seeded %d news in %.1fs", count, time.perf_counter() - start)


def main():
    parser = argparse.ArgumentParser(description="Seed the newsdesk database")
    parser.add_argument("--count", type=int, default=20, help="Number of news to create")
    parser.add_argument("--reset", action="store_true", help="Drop all tables first")
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    asyncio.run(seed(args.count, args.reset))


if __name__ == "__main__":
    main()
