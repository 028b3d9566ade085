"""FastAPI dependencies for injection."""
from fastapi import Depends

from core.auth import get_current_user_id
from core.config import Settings, get_settings
from db.session import get_async_session
from services.summarizer import SummaryGenerator


def get_summary_generator(settings: Settings = Depends(get_settings)) -> SummaryGenerator:
    """Summary generator configured from the current settings."""
    return SummaryGenerator.from_settings(settings)


__all__ = [
    "get_async_session",
    "get_current_user_id",
    "get_settings",
    "get_summary_generator",
]
