"""Tests for the database lifecycle."""
from pathlib import Path

import pytest
from sqlalchemy import text

from db.session import Database, get_async_session, get_database, set_database


async def test_connect_creates_tables() -> None:
    """Connecting creates the schema on a fresh database."""
    database = Database("sqlite+aiosqlite://")
    await database.connect()
    try:
        async with database.engine.connect() as conn:
            result = await conn.execute(
                text("SELECT name FROM sqlite_master WHERE type='table' ORDER BY name"),
            )
            tables = {row[0] for row in result}
        assert {"users", "bookmarks"} <= tables
    finally:
        await database.close()


async def test_foreign_keys_enforced(database: Database) -> None:
    """SQLite foreign key enforcement is on for every connection."""
    async with database.engine.connect() as conn:
        result = await conn.execute(text("PRAGMA foreign_keys"))
        assert result.scalar() == 1


async def test_file_database_creates_parent_directory(tmp_path: Path) -> None:
    """A file-backed database gets its directory created on connect."""
    db_file = tmp_path / "nested" / "linksaver.db"
    database = Database(f"sqlite+aiosqlite:///{db_file}")
    await database.connect()
    await database.close()
    assert db_file.parent.is_dir()
    assert db_file.exists()


async def test_not_connected_raises() -> None:
    """Using the database before connect is an error."""
    database = Database("sqlite+aiosqlite://")
    with pytest.raises(RuntimeError, match="not connected"):
        _ = database.session_factory
    with pytest.raises(RuntimeError, match="not connected"):
        _ = database.engine


def test_is_sqlite() -> None:
    """Backend detection follows the URL's dialect."""
    assert Database("sqlite+aiosqlite://").is_sqlite is True
    assert Database("postgresql+asyncpg://user:pw@localhost/db").is_sqlite is False


async def test_get_async_session_commits(database: Database) -> None:
    """Work done through the request session is committed at the end."""
    set_database(database)
    try:
        sessions = get_async_session()
        session = await anext(sessions)
        await session.execute(
            text("INSERT INTO users (email, password_hash, created_at) "
                 "VALUES ('a@example.com', 'x', CURRENT_TIMESTAMP)"),
        )
        with pytest.raises(StopAsyncIteration):
            await anext(sessions)

        async with database.session_factory() as check:
            count = await check.scalar(text("SELECT count(*) FROM users"))
        assert count == 1
    finally:
        set_database(None)


async def test_get_async_session_rolls_back_on_error(database: Database) -> None:
    """An exception during the request discards its changes."""
    set_database(database)
    try:
        sessions = get_async_session()
        session = await anext(sessions)
        await session.execute(
            text("INSERT INTO users (email, password_hash, created_at) "
                 "VALUES ('b@example.com', 'x', CURRENT_TIMESTAMP)"),
        )
        with pytest.raises(ValueError, match="boom"):
            await sessions.athrow(ValueError("boom"))

        async with database.session_factory() as check:
            count = await check.scalar(text("SELECT count(*) FROM users"))
        assert count == 0
    finally:
        set_database(None)


def test_get_database_requires_registration() -> None:
    """get_database fails before startup has registered one."""
    set_database(None)
    with pytest.raises(RuntimeError, match="not been initialized"):
        get_database()
