"""URL scraping service for fetching pages and extracting their title and favicon."""
import asyncio
import ipaddress
import logging
import socket
from dataclasses import dataclass
from urllib.parse import urlparse

import httpx
from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

USER_AGENT = 'Mozilla/5.0 (compatible; LinkSaver/1.0)'
DEFAULT_TIMEOUT = 10.0

# rel values that identify a page icon, compared lower-cased
FAVICON_RELS = ('icon', 'shortcut icon')


class SSRFBlockedError(Exception):
    """Raised when a URL targets a private/internal network address."""

    pass


def normalize_url(url: str) -> str:
    """Prepend https:// to URLs that have no http(s) scheme."""
    if url.lower().startswith(('http://', 'https://')):
        return url
    return f'https://{url}'


def is_private_ip(ip_str: str) -> bool:
    """
    Check if an IP address is private, loopback, or otherwise internal.

    Args:
        ip_str: IP address string (IPv4 or IPv6).

    Returns:
        True if the IP is private/internal, False if public.
    """
    try:
        ip = ipaddress.ip_address(ip_str)
        return (
            ip.is_private
            or ip.is_loopback
            or ip.is_link_local
            or ip.is_multicast
            or ip.is_reserved
            or ip.is_unspecified
        )
    except ValueError:
        # If we can't parse it, block it to be safe
        return True


async def validate_url_not_private(url: str, timeout: float = DEFAULT_TIMEOUT) -> None:  # noqa: ASYNC109
    """
    Validate that a URL does not target a private/internal network.

    Resolves the hostname to check the actual IP address, preventing
    DNS rebinding attacks where a hostname resolves to an internal IP.
    Resolution runs in the event loop's resolver and is bounded by timeout.

    Raises:
        SSRFBlockedError: If the URL targets a private network.
        ValueError: If the URL is malformed or the host can't be resolved in time.
    """
    hostname = urlparse(url).hostname

    if not hostname:
        raise ValueError(f"Invalid URL (no hostname): {url}")

    if hostname.lower() in ('localhost', 'localhost.localdomain'):
        raise SSRFBlockedError(f"Blocked request to localhost: {url}")

    loop = asyncio.get_running_loop()
    try:
        addrinfo = await asyncio.wait_for(
            loop.getaddrinfo(hostname, None, family=socket.AF_UNSPEC, type=socket.SOCK_STREAM),
            timeout,
        )
    except TimeoutError as e:
        raise ValueError(f"Timed out resolving hostname: {hostname}") from e
    except socket.gaierror as e:
        raise ValueError(f"Could not resolve hostname: {hostname}") from e

    # sockaddr is (ip, port) for IPv4 or (ip, port, flow, scope) for IPv6
    for _, _, _, _, sockaddr in addrinfo:
        ip_str = sockaddr[0]
        if is_private_ip(ip_str):
            raise SSRFBlockedError(
                f"Blocked request to private/internal address: {url} resolves to {ip_str}",
            )


def is_textual_content_type(content_type: str) -> bool:
    """Check whether a Content-Type header describes a text body worth parsing."""
    # A missing header is decoded as text, as browsers do
    if not content_type:
        return True
    lowered = content_type.lower()
    return lowered.startswith('text/') or 'html' in lowered or 'xml' in lowered


@dataclass
class FetchResult:
    """Result of fetching a URL (raw body before extraction)."""

    html: str | None
    final_url: str
    status_code: int | None
    content_type: str | None
    error: str | None


@dataclass
class PageMetadata:
    """Title and favicon URL derived from a page."""

    title: str
    favicon: str


async def fetch_url(url: str, timeout: float = DEFAULT_TIMEOUT) -> FetchResult:  # noqa: ASYNC109, PLR0911
    """
    Fetch a page's body as text.

    Best-effort fetch that returns error info on failure rather than raising.
    Follows redirects and captures the final URL.

    Security: Validates that the URL (and the final URL after redirects) does
    not target private/internal networks to prevent SSRF attacks.

    Args:
        url:
            The URL to fetch. Must already carry a scheme.
        timeout:
            Request timeout in seconds.

    Returns:
        FetchResult containing the text body or error info.
    """
    try:
        await validate_url_not_private(url, timeout)
    except (SSRFBlockedError, ValueError) as e:
        return FetchResult(
            html=None,
            final_url=url,
            status_code=None,
            content_type=None,
            error=str(e),
        )

    try:
        async with httpx.AsyncClient(
            follow_redirects=True,
            timeout=timeout,
            headers={'User-Agent': USER_AGENT},
            http2=True,
        ) as client:
            response = await client.get(url)

            final_url_str = str(response.url)
            try:
                await validate_url_not_private(final_url_str, timeout)
            except (SSRFBlockedError, ValueError) as e:
                return FetchResult(
                    html=None,
                    final_url=final_url_str,
                    status_code=response.status_code,
                    content_type=None,
                    error=f"Redirect blocked: {e}",
                )

            content_type = response.headers.get('content-type', '')

            # Error pages still carry a usable title and icon, so their body is kept
            if not response.is_success:
                logger.info("Fetched %s with HTTP %s", final_url_str, response.status_code)

            if not is_textual_content_type(content_type):
                return FetchResult(
                    html=None,
                    final_url=final_url_str,
                    status_code=response.status_code,
                    content_type=content_type,
                    error=f"Unsupported content type: {content_type}",
                )

            return FetchResult(
                html=response.text,
                final_url=final_url_str,
                status_code=response.status_code,
                content_type=content_type,
                error=None,
            )
    except httpx.TimeoutException:
        return FetchResult(
            html=None,
            final_url=url,
            status_code=None,
            content_type=None,
            error="Request timed out",
        )
    except (httpx.RequestError, httpx.InvalidURL) as e:
        return FetchResult(
            html=None,
            final_url=url,
            status_code=None,
            content_type=None,
            error=f"Request failed: {e}",
        )


def _site_root(url: str) -> str:
    parsed = urlparse(url)
    host = parsed.hostname or ''
    # urlparse strips the brackets from IPv6 literals
    if ':' in host:
        host = f'[{host}]'
    return f'{parsed.scheme}://{host}'


def default_favicon_url(url: str) -> str:
    """The conventional /favicon.ico location for the URL's host."""
    return f'{_site_root(url)}/favicon.ico'


def resolve_favicon_url(href: str, page_url: str) -> str:
    """
    Resolve a favicon href found in a page against that page's origin.

    - absolute (``http...``): used as-is
    - protocol-relative (``//cdn/...``): given the page's scheme
    - root-relative (``/path``): joined to ``scheme://host``
    - anything else: joined to ``scheme://host/``
    """
    if href.startswith('http'):
        return href
    if href.startswith('//'):
        return f'{urlparse(page_url).scheme}:{href}'
    root = _site_root(page_url)
    if href.startswith('/'):
        return f'{root}{href}'
    return f'{root}/{href}'


def extract_title(soup: BeautifulSoup) -> str:
    """Text of the first <title> element, stripped. Empty when there is none."""
    title_tag = soup.find('title')
    if title_tag is None:
        return ''
    return title_tag.get_text().strip()


def extract_favicon_href(soup: BeautifulSoup) -> str | None:
    """The href of the first <link rel="icon"> or <link rel="shortcut icon">, if any."""
    for link in soup.find_all('link', href=True):
        rel = link.get('rel') or []
        if isinstance(rel, str):
            rel = rel.split()
        href = link['href'].strip()
        if ' '.join(rel).lower() in FAVICON_RELS and href:
            return href
    return None


def extract_page_metadata(html: str, page_url: str) -> PageMetadata | None:
    """
    Extract title and favicon from HTML.

    Pure function with no I/O. Uses BeautifulSoup for parsing. Only the first
    <title> and the first icon <link> are considered. The favicon defaults to
    /favicon.ico on the page's host when the page doesn't declare one.

    Args:
        html:
            Raw HTML string to parse.
        page_url:
            Scheme-normalized URL the HTML was fetched from.

    Returns:
        PageMetadata, or None if the document could not be parsed.
    """
    try:
        soup = BeautifulSoup(html, 'lxml')
        favicon = default_favicon_url(page_url)
        href = extract_favicon_href(soup)
        if href:
            favicon = resolve_favicon_url(href, page_url)
        return PageMetadata(title=extract_title(soup), favicon=favicon)
    except Exception:
        logger.warning("Could not parse page metadata for %s", page_url, exc_info=True)
        return None


async def extract_metadata(url: str, timeout: float = DEFAULT_TIMEOUT) -> PageMetadata:  # noqa: ASYNC109
    """
    Fetch a URL and derive its title and favicon.

    Never raises. Each step yields a result or nothing; the first step that
    yields nothing short-circuits to the fallback of the submitted URL as the
    title and no favicon.

    Args:
        url: The URL as submitted; https:// is assumed when it has no scheme.
        timeout: Request timeout in seconds.

    Returns:
        PageMetadata for the page, or the fallback pair.
    """
    fallback = PageMetadata(title=url, favicon='')
    page_url = normalize_url(url)

    result = await fetch_url(page_url, timeout)
    if result.html is None:
        logger.warning("Failed to fetch URL %s: %s", page_url, result.error)
        return fallback

    metadata = extract_page_metadata(result.html, page_url)
    if metadata is None:
        return fallback
    return metadata
