"""SQLAlchemy models."""
from models.base import Base, CreatedAtMixin
from models.bookmark import Bookmark
from models.user import User

__all__ = ["Base", "Bookmark", "CreatedAtMixin", "User"]
