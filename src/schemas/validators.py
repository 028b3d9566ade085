"""
Shared validation functions for Pydantic schemas.

Requests are validated here, at the boundary; services assume clean input.
"""
import re

from pydantic import HttpUrl, TypeAdapter, ValidationError

from core.passwords import MAX_PASSWORD_BYTES
from services.url_scraper import normalize_url

# Deliberately loose: one @, no whitespace, and a dot in the domain part
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MAX_EMAIL_LENGTH = 255

MIN_PASSWORD_LENGTH = 6

MAX_URL_LENGTH = 2048

_http_url_adapter = TypeAdapter(HttpUrl)


def validate_email(email: str) -> str:
    """
    Normalize and validate an email address.

    Returns:
        The email trimmed and lower-cased.

    Raises:
        ValueError: If the email is malformed or too long.
    """
    normalized = email.strip().lower()
    if len(normalized) > MAX_EMAIL_LENGTH:
        raise ValueError(f"Email exceeds maximum length of {MAX_EMAIL_LENGTH} characters")
    if not EMAIL_PATTERN.match(normalized):
        raise ValueError("Please enter a valid email")
    return normalized


def validate_password_bytes(password: str) -> str:
    """Reject passwords bcrypt would silently truncate."""
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    return password


def validate_bookmark_url(url: str) -> str:
    """
    Validate a submitted bookmark URL.

    The scheme may be omitted (https:// is assumed), but if present it must be
    http or https. The returned value is the trimmed URL as submitted, not the
    scheme-normalized form.

    Raises:
        ValueError: If the URL is empty, too long, or not a valid HTTP(S) URL.
    """
    stripped = url.strip()
    if not stripped:
        raise ValueError("Please enter a valid URL")
    if len(stripped) > MAX_URL_LENGTH:
        raise ValueError(f"URL exceeds maximum length of {MAX_URL_LENGTH} characters")
    if any(char.isspace() for char in stripped):
        raise ValueError("Please enter a valid URL")
    if "://" in stripped and not stripped.lower().startswith(("http://", "https://")):
        raise ValueError("Please enter a valid URL")

    try:
        parsed = _http_url_adapter.validate_python(normalize_url(stripped))
    except ValidationError as e:
        raise ValueError("Please enter a valid URL") from e
    if not parsed.host:
        raise ValueError("Please enter a valid URL")
    return stripped
