"""Authentication module: stateless JWT session tokens for email/password users."""
import logging
from datetime import UTC, datetime, timedelta

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from core.config import Settings, get_settings

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"

# HTTP Bearer token scheme
security = HTTPBearer(auto_error=False)


def _credentials_error() -> HTTPException:
    # Every token failure gets the same response so callers can't tell
    # a missing token from a forged or expired one.
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )


def create_access_token(user_id: int, settings: Settings) -> str:
    """
    Issue a signed session token bound to a user id.

    The expiry is fixed at issuance; tokens are neither refreshed nor revocable.
    """
    issued_at = datetime.now(UTC)
    claims = {
        "sub": str(user_id),
        "iat": issued_at,
        "exp": issued_at + timedelta(days=settings.jwt_expires_days),
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str, settings: Settings) -> int:
    """
    Validate a session token and return the user id it carries.

    Raises:
        HTTPException: If the token is malformed, forged, expired, or has no usable subject.
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[JWT_ALGORITHM],
            options={"require": ["exp", "sub"]},
        )
    except jwt.PyJWTError as e:
        logger.info("Rejected session token: %s", e)
        raise _credentials_error() from e

    try:
        return int(payload["sub"])
    except (TypeError, ValueError) as e:
        raise _credentials_error() from e


async def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    settings: Settings = Depends(get_settings),
) -> int:
    """
    Dependency that validates the bearer token and returns the caller's user id.

    Sessions are stateless, so this never touches the database.
    """
    if credentials is None:
        raise _credentials_error()
    return decode_access_token(credentials.credentials, settings)
