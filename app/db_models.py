"""SQLAlchemy ORM models backing the content collections."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .database import Base


class ContentRecord(Base):
    """A persisted movie, show or anime document."""

    __tablename__ = "contents"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    type: Mapped[str] = mapped_column(String(16), index=True)
    title: Mapped[str] = mapped_column(String(255))
    slug: Mapped[str | None] = mapped_column(String(255), nullable=True)
    year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    synopsis: Mapped[str | None] = mapped_column(Text, nullable=True)
    runtime: Mapped[int | None] = mapped_column(Integer, nullable=True)
    released: Mapped[int | None] = mapped_column(Integer, nullable=True)
    latest_episode: Mapped[int | None] = mapped_column(Integer, nullable=True)
    num_seasons: Mapped[int | None] = mapped_column(Integer, nullable=True)
    rating_percentage: Mapped[int] = mapped_column(Integer, default=0)
    rating_watching: Mapped[int] = mapped_column(Integer, default=0)
    rating_votes: Mapped[int] = mapped_column(Integer, default=0)
    rating_loved: Mapped[int] = mapped_column(Integer, default=100)
    rating_hated: Mapped[int] = mapped_column(Integer, default=100)
    images: Mapped[dict[str, str] | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    genres: Mapped[list["ContentGenre"]] = relationship(
        back_populates="content",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="ContentGenre.position",
    )


class ContentGenre(Base):
    """A single genre tag attached to a content document."""

    __tablename__ = "content_genres"

    content_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("contents.id", ondelete="CASCADE"), primary_key=True
    )
    genre: Mapped[str] = mapped_column(String(64), primary_key=True, index=True)
    position: Mapped[int] = mapped_column(Integer, default=0)

    content: Mapped[ContentRecord] = relationship(back_populates="genres")
