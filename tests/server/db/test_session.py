"""Tests for session management."""

import pytest
from sqlalchemy import inspect, text

from scratchpad.server.db.session import DatabaseSessionManager


async def test_session_manager_session() -> None:
    """Test that sessionmanager can provide a session."""
    manager = DatabaseSessionManager("sqlite+aiosqlite:///:memory:")

    async with manager.session() as session:
        result = await session.execute(text("SELECT 1"))
        assert result.scalar() == 1

    await manager.close()


async def test_create_all(tmp_path) -> None:
    """Test that the tables for all models are created."""
    manager = DatabaseSessionManager(f"sqlite+aiosqlite:///{tmp_path / 'db.sqlite'}")
    await manager.create_all()

    async with manager.session() as session:
        connection = await session.connection()
        tables = await connection.run_sync(
            lambda sync_conn: inspect(sync_conn).get_table_names()
        )
    assert set(tables) == {"users", "notes"}

    await manager.close()


async def test_session_manager_closed() -> None:
    manager = DatabaseSessionManager("sqlite+aiosqlite:///:memory:")
    await manager.close()

    with pytest.raises(Exception, match="not initialized"):
        async with manager.session():
            pass
