"""Shared pytest fixtures for server tests."""

import pytest
from aiohttp.test_utils import TestClient

from scratchpad.server.app import create_app
from scratchpad.server.config import ServerConfig
from scratchpad.server.db.models.user import UserDO
from scratchpad.server.services.note import NoteService
from scratchpad.server.services.user import UserService

TEST_USERNAME = "alice"
TEST_EMAIL = "alice@example.com"
TEST_PASSWORD = "correct horse"
TEST_DISPLAY_NAME = "Alice Example"


@pytest.fixture
async def client(aiohttp_client, server_config: ServerConfig) -> TestClient:
    """Test client for a server backed by a temporary database."""
    return await aiohttp_client(create_app(server_config))


@pytest.fixture
def user_service(client: TestClient) -> UserService:
    return client.app["user_service"]


@pytest.fixture
def note_service(client: TestClient) -> NoteService:
    return client.app["note_service"]


@pytest.fixture
async def test_user(user_service: UserService) -> UserDO:
    return await user_service.create_user(
        username=TEST_USERNAME,
        email=TEST_EMAIL,
        password=TEST_PASSWORD,
        display_name=TEST_DISPLAY_NAME,
    )


@pytest.fixture(name="auth_headers")
def auth_headers_fixture(user_service: UserService, test_user: UserDO) -> dict[str, str]:
    """Session headers for the test user."""
    return {"x-access-token": user_service.create_token(test_user)}
