"""Tests for session token issuing and validation."""
from datetime import UTC, datetime, timedelta

import jwt
import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials

from core.auth import (
    JWT_ALGORITHM,
    create_access_token,
    decode_access_token,
    get_current_user_id,
)
from core.config import Settings


def _encode(claims: dict, secret: str) -> str:
    return jwt.encode(claims, secret, algorithm=JWT_ALGORITHM)


class TestAccessTokens:
    """Tests for create_access_token / decode_access_token."""

    def test__create_access_token__round_trip(self, settings: Settings) -> None:
        token = create_access_token(42, settings)
        assert decode_access_token(token, settings) == 42

    def test__create_access_token__claims(self, settings: Settings) -> None:
        token = create_access_token(7, settings)
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[JWT_ALGORITHM])

        assert payload["sub"] == "7"
        assert payload["exp"] - payload["iat"] == settings.jwt_expires_days * 24 * 60 * 60

    def test__decode_access_token__wrong_secret(self, settings: Settings) -> None:
        token = create_access_token(1, settings.model_copy(update={"jwt_secret": "other-secret"}))

        with pytest.raises(HTTPException) as exc_info:
            decode_access_token(token, settings)

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Could not validate credentials"

    def test__decode_access_token__expired(self, settings: Settings) -> None:
        past = datetime.now(UTC) - timedelta(days=1)
        token = _encode({"sub": "1", "exp": past}, settings.jwt_secret)

        with pytest.raises(HTTPException) as exc_info:
            decode_access_token(token, settings)
        assert exc_info.value.status_code == 401

    def test__decode_access_token__missing_exp(self, settings: Settings) -> None:
        token = _encode({"sub": "1"}, settings.jwt_secret)

        with pytest.raises(HTTPException):
            decode_access_token(token, settings)

    def test__decode_access_token__non_numeric_subject(self, settings: Settings) -> None:
        future = datetime.now(UTC) + timedelta(days=1)
        token = _encode({"sub": "alice", "exp": future}, settings.jwt_secret)

        with pytest.raises(HTTPException) as exc_info:
            decode_access_token(token, settings)
        assert exc_info.value.status_code == 401

    def test__decode_access_token__garbage(self, settings: Settings) -> None:
        with pytest.raises(HTTPException) as exc_info:
            decode_access_token("not.a.token", settings)
        assert exc_info.value.headers == {"WWW-Authenticate": "Bearer"}


class TestGetCurrentUserId:
    """Tests for the get_current_user_id dependency."""

    async def test__get_current_user_id__valid(self, settings: Settings) -> None:
        credentials = HTTPAuthorizationCredentials(
            scheme="Bearer", credentials=create_access_token(5, settings),
        )
        assert await get_current_user_id(credentials, settings) == 5

    async def test__get_current_user_id__missing(self, settings: Settings) -> None:
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user_id(None, settings)
        assert exc_info.value.status_code == 401
