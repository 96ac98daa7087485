import os
from pathlib import Path
from unittest.mock import patch

import yaml

from scratchpad.server.config import ServerConfig


def test_server_config_defaults(tmp_path: Path) -> None:
    """Test loading configuration with defaults."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()

    with patch.dict(os.environ, {}, clear=True):
        config = ServerConfig.load(config_dir)

    assert config.host == "0.0.0.0"
    assert config.port == 8080
    assert config.server_url == "http://localhost:8080"
    assert config.database_url == f"sqlite+aiosqlite:///{config_dir / 'scratchpad.db'}"
    assert config.export.compression_level == 3
    assert config.auth.secret_key != ""  # Should be generated in-memory

    # Verify NO config file was created (read-only)
    assert not (config_dir / "config.yaml").exists()


def test_server_config_load_from_file(tmp_path: Path) -> None:
    """Test loading configuration from a file."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    data = {
        "host": "127.0.0.1",
        "port": 9090,
        "base_url": "https://notes.example.com/",
        "database_url": "sqlite+aiosqlite:///:memory:",
        "allow_gravatar": False,
        "auth": {"secret_key": "my-secret-key", "cookie_name": "sid"},
        "export": {"compression_level": 9},
    }
    with open(config_dir / "config.yaml", "w") as f:
        yaml.safe_dump(data, f)

    with patch.dict(os.environ, {}, clear=True):
        config = ServerConfig.load(config_dir)

    assert config.host == "127.0.0.1"
    assert config.port == 9090
    assert config.server_url == "https://notes.example.com"
    assert config.database_url == "sqlite+aiosqlite:///:memory:"
    assert config.allow_gravatar is False
    assert config.auth.secret_key == "my-secret-key"
    assert config.auth.cookie_name == "sid"
    assert config.export.compression_level == 9


def test_server_config_env_var_override(tmp_path: Path) -> None:
    """Test that environment variables override config file."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()

    with patch.dict(
        os.environ,
        {
            "SCRATCHPAD_JWT_SECRET": "env-secret",
            "SCRATCHPAD_HOST": "1.2.3.4",
            "SCRATCHPAD_PORT": "5555",
            "SCRATCHPAD_BASE_URL": "http://proxy.example.com",
            "SCRATCHPAD_DATABASE_URL": "sqlite+aiosqlite:///other.db",
        },
    ):
        config = ServerConfig.load(config_dir)

    assert config.auth.secret_key == "env-secret"
    assert config.host == "1.2.3.4"
    assert config.port == 5555
    assert config.server_url == "http://proxy.example.com"
    assert config.database_url == "sqlite+aiosqlite:///other.db"
