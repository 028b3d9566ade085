"""Bookmark endpoints. Every operation is scoped to the authenticated user."""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import (
    get_async_session,
    get_current_user_id,
    get_settings,
    get_summary_generator,
)
from core.config import Settings
from schemas.bookmark import (
    BookmarkCreate,
    BookmarkListResponse,
    BookmarkResponse,
    BookmarkSavedResponse,
    MessageResponse,
)
from services import bookmark_service
from services.summarizer import SummaryGenerator

router = APIRouter(prefix="/api/bookmarks", tags=["bookmarks"])


@router.post("", response_model=BookmarkSavedResponse, status_code=201)
async def create_bookmark(
    data: BookmarkCreate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_async_session),
    summarizer: SummaryGenerator = Depends(get_summary_generator),
    settings: Settings = Depends(get_settings),
) -> BookmarkSavedResponse:
    """Save a URL: fetch its title and favicon, summarize it, and store it."""
    bookmark = await bookmark_service.create_bookmark(
        db, user_id, data.url, summarizer, fetch_timeout=settings.fetch_timeout,
    )
    return BookmarkSavedResponse(
        message="Bookmark saved successfully",
        bookmark=BookmarkResponse.model_validate(bookmark),
    )


@router.get("", response_model=BookmarkListResponse)
async def list_bookmarks(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkListResponse:
    """List the current user's bookmarks, newest first."""
    bookmarks = await bookmark_service.get_bookmarks(db, user_id)
    return BookmarkListResponse(
        bookmarks=[BookmarkResponse.model_validate(b) for b in bookmarks],
    )


@router.get("/{bookmark_id}", response_model=BookmarkResponse)
async def get_bookmark(
    bookmark_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkResponse:
    """Get a single bookmark by ID."""
    bookmark = await bookmark_service.get_bookmark(db, user_id, bookmark_id)
    if bookmark is None:
        raise HTTPException(status_code=404, detail="Bookmark not found")
    return BookmarkResponse.model_validate(bookmark)


@router.delete("/{bookmark_id}", response_model=MessageResponse)
async def delete_bookmark(
    bookmark_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_async_session),
) -> MessageResponse:
    """Delete a bookmark."""
    deleted = await bookmark_service.delete_bookmark(db, user_id, bookmark_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Bookmark not found")
    return MessageResponse(message="Bookmark deleted successfully")
