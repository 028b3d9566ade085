"""Service layer for bookmark ingestion and owner-scoped access."""
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.bookmark import Bookmark
from services.summarizer import SummaryGenerator
from services.url_scraper import DEFAULT_TIMEOUT, extract_metadata

logger = logging.getLogger(__name__)


async def create_bookmark(
    db: AsyncSession,
    user_id: int,
    url: str,
    summarizer: SummaryGenerator,
    fetch_timeout: float = DEFAULT_TIMEOUT,
) -> Bookmark:
    """
    Create a new bookmark for a user from a submitted URL.

    Flow:
    1. Fetch the page and extract its title and favicon
    2. Summarize the page using the extracted title
    3. Store the URL exactly as submitted along with the derived fields
    4. Return the persisted bookmark with its id and created_at

    Extraction and summarization are best-effort and never raise, so only the
    database write can fail this call; nothing is written before that point.

    Note: Does not commit. Caller (session generator) handles commit at request end.
    """
    metadata = await extract_metadata(url, timeout=fetch_timeout)
    summary = await summarizer.summarize(url, metadata.title)

    bookmark = Bookmark(
        user_id=user_id,
        url=url,
        title=metadata.title,
        favicon=metadata.favicon,
        summary=summary,
    )
    db.add(bookmark)
    await db.flush()
    await db.refresh(bookmark)
    logger.info("Saved bookmark %s for user %s", bookmark.id, user_id)
    return bookmark


async def get_bookmark(
    db: AsyncSession,
    user_id: int,
    bookmark_id: int,
) -> Bookmark | None:
    """Get a bookmark by ID, scoped to user. Returns None if not found or wrong user."""
    result = await db.execute(
        select(Bookmark).where(
            Bookmark.id == bookmark_id,
            Bookmark.user_id == user_id,
        ),
    )
    return result.scalar_one_or_none()


async def get_bookmarks(
    db: AsyncSession,
    user_id: int,
) -> list[Bookmark]:
    """Get all bookmarks for a user, newest first."""
    result = await db.execute(
        select(Bookmark)
        .where(Bookmark.user_id == user_id)
        .order_by(Bookmark.created_at.desc(), Bookmark.id.desc()),
    )
    return list(result.scalars().all())


async def delete_bookmark(
    db: AsyncSession,
    user_id: int,
    bookmark_id: int,
) -> bool:
    """
    Delete a bookmark. Returns True if deleted, False if not found for this user.

    Note: Does not commit. Caller (session generator) handles commit at request end.
    """
    bookmark = await get_bookmark(db, user_id, bookmark_id)
    if bookmark is None:
        return False

    await db.delete(bookmark)
    await db.flush()
    return True
