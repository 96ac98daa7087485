"""Root conftest for all tests."""

from pathlib import Path
from typing import Awaitable, Callable

import pytest
from aiohttp.test_utils import TestClient
from aiohttp.web import Application

from scratchpad.server.config import AuthConfig, ServerConfig

# Type alias for the aiohttp_client fixture - shared across all tests
AiohttpClient = Callable[[Application], Awaitable[TestClient]]


@pytest.fixture
def mock_trace_log() -> str | None:
    """Trace logging is off unless a test module overrides this fixture."""
    return None


@pytest.fixture
def server_config(tmp_path: Path, mock_trace_log: str | None) -> ServerConfig:
    """Create a ServerConfig object for testing."""
    return ServerConfig(
        base_url="http://notes.example.com",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        trace_log_file=mock_trace_log,
        auth=AuthConfig(secret_key="test-secret-key"),
    )
