"""Database engine, table models and session helpers.

Uses SQLAlchemy 2.x with a synchronous driver. Moves and listings are
stored as flat documents; tags are kept as a JSON array in a text column.
"""

from __future__ import annotations

import json
import uuid
from datetime import datetime, timezone
from pathlib import Path

from sqlalchemy import Column, DateTime, Integer, String, Text, create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from movewiki.config import settings

# Ensure the data directory exists for file-backed SQLite
if settings.database_url.startswith("sqlite:///"):
    _db_path = settings.database_url.replace("sqlite:///", "")
    Path(_db_path).parent.mkdir(parents=True, exist_ok=True)

engine = create_engine(settings.database_url, echo=settings.debug)
SessionLocal = sessionmaker(bind=engine)


class Base(DeclarativeBase):
    pass


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return uuid.uuid4().hex


class MoveRecord(Base):
    """A submitted move — condition, markdown definition and derived fields."""

    __tablename__ = "moves"

    id = Column(String(32), primary_key=True, default=_new_id)
    condition = Column(String(256), nullable=False, default="")
    definition = Column(Text, nullable=False, default="")
    slug = Column(String(256), nullable=False, index=True, default="")
    stat = Column(String(64), nullable=True)
    tags_json = Column(Text, nullable=False, default="[]")
    date = Column(DateTime, nullable=False, default=_utcnow, index=True)
    upvotes = Column(Integer, nullable=False, default=0)
    downvotes = Column(Integer, nullable=False, default=0)
    top_listing_id = Column(String(32), nullable=True)

    @property
    def tags(self) -> list[str]:
        return json.loads(self.tags_json) if self.tags_json else []

    @tags.setter
    def tags(self, value: list[str]) -> None:
        self.tags_json = json.dumps(list(value))

    @property
    def url(self) -> str:
        return f"/moves/{self.slug}"

    @property
    def definition_url(self) -> str:
        return f"/moves/{self.slug}/{self.id}"

    @property
    def id_url(self) -> str:
        return f"/moves/{self.id}"

    @property
    def edit_url(self) -> str:
        return f"/moves/{self.id}/edit"


class ListingRecord(Base):
    """A play example attached to a move by slug."""

    __tablename__ = "listings"

    id = Column(String(32), primary_key=True, default=_new_id)
    date = Column(DateTime, nullable=False, default=_utcnow)
    description = Column(Text, nullable=False, default="")
    success = Column(Text, nullable=False, default="")
    partial = Column(Text, nullable=False, default="")
    failure = Column(Text, nullable=False, default="")
    stat = Column(String(64), nullable=True)
    move_slug = Column(String(256), nullable=False, index=True)
    upvotes = Column(Integer, nullable=False, default=0)
    downvotes = Column(Integer, nullable=False, default=0)

    @property
    def url(self) -> str:
        return f"/listings/{self.id}"

    @property
    def move_url(self) -> str:
        return f"/moves/{self.move_slug}"


def init_db() -> None:
    """Create all tables if they do not exist."""
    Base.metadata.create_all(bind=engine)


def get_db() -> Session:  # type: ignore[type-arg]
    """FastAPI dependency that yields a DB session."""
    db = SessionLocal()
    try:
        yield db  # type: ignore[misc]
    finally:
        db.close()
