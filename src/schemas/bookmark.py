"""Pydantic schemas for bookmark endpoints."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, field_validator

from schemas.validators import validate_bookmark_url


class BookmarkCreate(BaseModel):
    """Schema for saving a new bookmark. Only the URL is supplied; the rest is derived."""

    url: str

    @field_validator("url")
    @classmethod
    def check_url(cls, v: str) -> str:
        """Validate the URL, keeping it as submitted."""
        return validate_bookmark_url(v)


class BookmarkResponse(BaseModel):
    """Schema for bookmark responses."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    url: str
    title: str
    favicon: str
    summary: str
    created_at: datetime


class BookmarkSavedResponse(BaseModel):
    """Returned after a bookmark is created."""

    message: str
    bookmark: BookmarkResponse


class BookmarkListResponse(BaseModel):
    """All of the caller's bookmarks, newest first."""

    bookmarks: list[BookmarkResponse]


class MessageResponse(BaseModel):
    """Plain confirmation message."""

    message: str
