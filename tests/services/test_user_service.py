"""Tests for user registration and credential checks."""
import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.passwords import verify_password
from models.user import User
from services import user_service
from services.exceptions import EmailAlreadyExistsError


async def test__create_user__hashes_password(db_session: AsyncSession) -> None:
    user = await user_service.create_user(
        db_session, "new@example.com", "secret123", bcrypt_rounds=4,
    )

    assert user.id is not None
    assert user.email == "new@example.com"
    assert user.password_hash != "secret123"
    assert verify_password("secret123", user.password_hash)


async def test__create_user__duplicate_email_raises(db_session: AsyncSession) -> None:
    await user_service.create_user(db_session, "dup@example.com", "secret123", bcrypt_rounds=4)

    with pytest.raises(EmailAlreadyExistsError) as exc_info:
        await user_service.create_user(db_session, "dup@example.com", "other123", bcrypt_rounds=4)

    assert exc_info.value.email == "dup@example.com"
    count = await db_session.scalar(
        select(func.count()).select_from(User).where(User.email == "dup@example.com"),
    )
    assert count == 1


async def test__get_user_by_email_and_id(db_session: AsyncSession, test_user: User) -> None:
    assert (await user_service.get_user_by_email(db_session, "test@example.com")).id == test_user.id
    assert (await user_service.get_user_by_id(db_session, test_user.id)).email == "test@example.com"
    assert await user_service.get_user_by_email(db_session, "missing@example.com") is None
    assert await user_service.get_user_by_id(db_session, 999_999) is None


async def test__authenticate_user__correct_password(db_session: AsyncSession) -> None:
    created = await user_service.create_user(
        db_session, "login@example.com", "secret123", bcrypt_rounds=4,
    )

    user = await user_service.authenticate_user(db_session, "login@example.com", "secret123")

    assert user is not None
    assert user.id == created.id


async def test__authenticate_user__wrong_password(db_session: AsyncSession) -> None:
    await user_service.create_user(db_session, "login@example.com", "secret123", bcrypt_rounds=4)

    assert await user_service.authenticate_user(
        db_session, "login@example.com", "wrong-password",
    ) is None


async def test__authenticate_user__unknown_email(db_session: AsyncSession) -> None:
    assert await user_service.authenticate_user(
        db_session, "nobody@example.com", "secret123",
    ) is None


async def test__authenticate_user__malformed_stored_digest(
    db_session: AsyncSession,
    test_user: User,
) -> None:
    """A corrupt digest is a failed login, not a crash."""
    assert await user_service.authenticate_user(
        db_session, test_user.email, "anything",
    ) is None
