"""User model for storing registered accounts."""
from typing import TYPE_CHECKING

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base, CreatedAtMixin

if TYPE_CHECKING:
    from models.bookmark import Bookmark


class User(Base, CreatedAtMixin):
    """User model - email login with a bcrypt password digest."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        comment="Login identifier, stored lower-cased",
    )
    password_hash: Mapped[str] = mapped_column(String(255))

    bookmarks: Mapped[list["Bookmark"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
    )
