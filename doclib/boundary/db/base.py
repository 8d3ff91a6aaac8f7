"""
SQLAlchemy declarative base and common mixins.

Provides base class for all ORM models and a reusable mixin for the
ingestion timestamp.

Dependencies: sqlalchemy
System role: Foundation for all database models
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """
    SQLAlchemy declarative base for ORM model registration.

    All database models inherit from this class to ensure they're
    registered with the metadata and included in table creation.
    """

    pass


class AddedAtMixin:
    """
    Mixin providing the ingestion timestamp.

    SQLite drops tzinfo on round trip, so readers must treat naive
    values as UTC (see as_utc).

    Attributes:
        added_at: Row creation timestamp (UTC, immutable)
    """

    added_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes read back from SQLite."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
