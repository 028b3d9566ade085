"""SQLAlchemy declarative base with common mixins."""
from datetime import UTC, datetime

from sqlalchemy import DateTime
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


def utc_now() -> datetime:
    """Current wall-clock time as a timezone-aware UTC datetime."""
    return datetime.now(UTC)


class CreatedAtMixin:
    """
    Mixin that adds a created_at column.

    Rows in this service are never updated after insert, so there is no
    updated_at. The timestamp is set on the Python side with microsecond
    precision so rows created within the same second still sort in creation
    order on SQLite, whose CURRENT_TIMESTAMP only has one-second resolution.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
        index=True,
    )
