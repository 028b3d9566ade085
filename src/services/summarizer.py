"""Summary generation for saved bookmarks, with a remote service and local fallbacks."""
import logging
from collections.abc import Awaitable, Callable
from urllib.parse import urlparse

import httpx

from core.config import Settings
from services.url_scraper import DEFAULT_TIMEOUT, normalize_url

logger = logging.getLogger(__name__)

JINA_READER_URL = 'https://r.jina.ai/'

# Roughly 15-20 lines of text
MAX_SUMMARY_CHARS = 1000

# A sentence break earlier than this share of the cap cuts off too much text
SENTENCE_BREAK_MIN_RATIO = 0.7


def limit_summary_length(summary: str, max_chars: int = MAX_SUMMARY_CHARS) -> str:
    """
    Cap a summary at max_chars.

    Over-long text is cut at the last period inside the cap when that period
    sits past 70% of the cap; otherwise it is hard-truncated and marked with
    '...'. Applying this to its own output returns it unchanged.
    """
    if len(summary) <= max_chars:
        return summary

    truncated = summary[:max_chars]
    last_period = truncated.rfind('.')
    if last_period > max_chars * SENTENCE_BREAK_MIN_RATIO:
        return truncated[:last_period + 1]
    return f'{truncated}...'


def basic_summary(url: str, title: str) -> str:
    """
    Deterministic summary built from the site name and page title.

    Raises:
        ValueError: If the URL has no host.
    """
    hostname = urlparse(url).hostname
    if not hostname:
        raise ValueError(f"Invalid URL (no hostname): {url}")
    clean_domain = hostname.removeprefix('www.').split('.')[0]
    return f'Bookmark from {clean_domain}: "{title or url}". Access this link to view the full content.'


def last_resort_summary(url: str, title: str) -> str:
    """Summary used when summary generation itself fails unexpectedly."""
    return limit_summary_length(f'Bookmark saved: {title or url}')


SummaryAttempt = Callable[[str, str], Awaitable[str | None]]


class SummaryGenerator:
    """
    Produces a bounded-length summary for a bookmarked URL.

    Attempts run in a fixed order and the first one that yields text wins:

    1. the remote summarization service, when an API key is configured
    2. the basic summary built from domain and title

    If anything raises along the way the last-resort summary is returned,
    so summarize() never fails the caller.
    """

    def __init__(
        self,
        api_key: str | None = None,
        api_url: str = JINA_READER_URL,
        timeout: float = DEFAULT_TIMEOUT,
        response_field: str = 'summary',
    ) -> None:
        self._api_key = api_key
        self._api_url = api_url
        self._timeout = timeout
        self._response_field = response_field

    @classmethod
    def from_settings(cls, settings: Settings) -> 'SummaryGenerator':
        """Build a generator from application settings."""
        return cls(
            api_key=settings.jina_api_key,
            api_url=settings.summary_api_url,
            timeout=settings.summary_timeout,
            response_field=settings.summary_response_field,
        )

    @property
    def attempts(self) -> tuple[SummaryAttempt, ...]:
        """Summary sources in the order they are tried."""
        return (self.remote_summary, self.local_summary)

    async def summarize(self, url: str, title: str) -> str:
        """Return a summary for the page, falling back through the attempt chain."""
        try:
            page_url = normalize_url(url)
            for attempt in self.attempts:
                summary = await attempt(page_url, title)
                if summary is not None:
                    return summary
            raise RuntimeError("No summary source produced a result")
        except Exception:
            logger.exception("Error in summary generation for %s", url)
            return last_resort_summary(url, title)

    async def local_summary(self, url: str, title: str) -> str:
        """Basic summary; always available."""
        return limit_summary_length(basic_summary(url, title))

    async def remote_summary(self, url: str, _title: str) -> str | None:
        """
        Ask the remote summarization service for a summary.

        Returns None, so the next attempt runs, when no API key is configured,
        the request fails, or the response carries no usable text.
        """
        if not self._api_key:
            logger.info("No summarization API key configured - using basic summary")
            return None

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(
                    self._api_url,
                    json={'url': url},
                    headers={'Authorization': f'Bearer {self._api_key}'},
                )
        except httpx.HTTPError as e:
            logger.warning("Summarization request failed for %s: %s", url, e)
            return None

        if not response.is_success:
            logger.warning(
                "Summarization service returned HTTP %s for %s - falling back to basic summary",
                response.status_code,
                url,
            )
            return None

        summary = self._parse_summary(response)
        if summary is None:
            logger.warning("Summarization response for %s had no summary text", url)
            return None
        return limit_summary_length(summary)

    def _parse_summary(self, response: httpx.Response) -> str | None:
        """
        Pull summary text out of a response.

        The service's response shape isn't pinned down, so both a JSON object
        with the configured field and a plain string body (JSON-encoded or raw)
        are accepted.
        """
        try:
            payload = response.json()
        except ValueError:
            payload = response.text

        if isinstance(payload, dict):
            payload = payload.get(self._response_field)
        if isinstance(payload, str) and payload.strip():
            return payload.strip()
        return None
