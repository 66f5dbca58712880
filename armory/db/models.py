"""SQLAlchemy declarative base and ORM models.

Characters are stored as a single JSON document, mirroring how the
engine treats a character as one immutable value.
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import JSON


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all database models."""


class CharacterModel(Base):
    """ORM model for characters."""

    __tablename__ = "characters"

    character_id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    data: Mapped[dict] = mapped_column(JSON, nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=_utcnow, onupdate=_utcnow
    )


class GameDataModel(Base):
    """Catalog snapshots keyed by name ("itemTemplates", "affixes")."""

    __tablename__ = "game_data"

    key: Mapped[str] = mapped_column(String, primary_key=True)
    data: Mapped[list] = mapped_column(JSON, nullable=False)


class CharacterEventModel(Base):
    """Append-only activity log, one row per delivered EventBus event."""

    __tablename__ = "character_events"

    event_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    character_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    event_type: Mapped[str] = mapped_column(String, nullable=False)
    source: Mapped[str] = mapped_column(String, nullable=False)
    data: Mapped[dict] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=_utcnow
    )
