"""Fixtures for testing services without running the web server."""

from collections.abc import AsyncGenerator

import pytest

from scratchpad.server.config import ServerConfig
from scratchpad.server.db.session import DatabaseSessionManager
from scratchpad.server.services.note import NoteService
from scratchpad.server.services.user import UserService


@pytest.fixture
async def session_manager(
    server_config: ServerConfig,
) -> AsyncGenerator[DatabaseSessionManager, None]:
    manager = DatabaseSessionManager(server_config.database_url)
    await manager.create_all()
    yield manager
    await manager.close()


@pytest.fixture
def user_service(
    server_config: ServerConfig, session_manager: DatabaseSessionManager
) -> UserService:
    return UserService(
        server_config.auth, session_manager, server_url=server_config.server_url
    )


@pytest.fixture
def note_service(session_manager: DatabaseSessionManager) -> NoteService:
    return NoteService(session_manager)
