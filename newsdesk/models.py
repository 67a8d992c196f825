from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Table
from sqlalchemy.orm import Mapped, mapped_column, relationship

from newsdesk.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Association table: News <-> Tag (many-to-many)
# ---------------------------------------------------------------------------
news_tags = Table(
    "news_tags",
    Base.metadata,
    Column("news_id", Integer, ForeignKey("news.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", Integer, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)


# ---------------------------------------------------------------------------
# Author
# ---------------------------------------------------------------------------
class Author(Base):
    __tablename__ = "authors"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(15), unique=True, nullable=False, index=True)

    news: Mapped[List["News"]] = relationship("News", back_populates="author", lazy="noload")


# ---------------------------------------------------------------------------
# Tag
# ---------------------------------------------------------------------------
class Tag(Base):
    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(15), unique=True, nullable=False, index=True)

    news: Mapped[List["News"]] = relationship(
        "News", secondary=news_tags, back_populates="tags", lazy="noload"
    )


# ---------------------------------------------------------------------------
# News
# ---------------------------------------------------------------------------
class News(Base):
    __tablename__ = "news"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(30), unique=True, nullable=False, index=True)
    content: Mapped[str] = mapped_column(String(255), nullable=False)
    create_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False, index=True
    )
    last_update_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    author_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("authors.id", ondelete="SET NULL"), nullable=True, index=True
    )

    # lazy="noload" everywhere; repositories load relations explicitly with selectinload
    author: Mapped[Optional["Author"]] = relationship(
        "Author", back_populates="news", lazy="noload"
    )
    tags: Mapped[List["Tag"]] = relationship(
        "Tag", secondary=news_tags, back_populates="news", lazy="noload"
    )
