"""Service layer for user registration and credential checks."""
import asyncio
import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.passwords import hash_password, verify_password
from models.user import User
from services.exceptions import EmailAlreadyExistsError

logger = logging.getLogger(__name__)


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    """Get a user by (already normalized) email. Returns None if not found."""
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def get_user_by_id(db: AsyncSession, user_id: int) -> User | None:
    """Get a user by ID. Returns None if not found."""
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def create_user(
    db: AsyncSession,
    email: str,
    password: str,
    bcrypt_rounds: int = 10,
) -> User:
    """
    Register a new user with a hashed password.

    Args:
        db: Database session.
        email: Normalized email address.
        password: Plaintext password; only its bcrypt digest is stored.
        bcrypt_rounds: bcrypt cost factor.

    Returns:
        The created user.

    Raises:
        EmailAlreadyExistsError: If the email is already registered.

    Note:
        Does not commit. Caller (session generator) handles commit at request end.
    """
    if await get_user_by_email(db, email) is not None:
        raise EmailAlreadyExistsError(email)

    password_hash = await asyncio.to_thread(hash_password, password, bcrypt_rounds)
    user = User(email=email, password_hash=password_hash)
    db.add(user)
    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        # Fallback for race condition: a concurrent request registered the same email
        # between the lookup and the insert
        if await get_user_by_email(db, email) is not None:
            raise EmailAlreadyExistsError(email) from e
        raise
    await db.refresh(user)
    logger.info("Registered user %s", user.id)
    return user


async def authenticate_user(db: AsyncSession, email: str, password: str) -> User | None:
    """
    Return the user if the email exists and the password matches its digest.

    Unknown email and wrong password both return None so callers report them the same way.
    """
    user = await get_user_by_email(db, email)
    if user is None:
        return None
    if not await asyncio.to_thread(verify_password, password, user.password_hash):
        return None
    return user
