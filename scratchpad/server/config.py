"""Server configuration.

Configuration is read from `config.yaml` inside the config directory and
may be overridden with `SCRATCHPAD_*` environment variables. The file is
never written by the server.
"""

import logging
import os
import secrets
from dataclasses import dataclass, field
from pathlib import Path

import yaml
from mashumaro.mixins.dict import DataClassDictMixin

logger = logging.getLogger(__name__)

CONFIG_FILE = "config.yaml"
DATABASE_FILE = "scratchpad.db"


@dataclass
class AuthConfig(DataClassDictMixin):
    """Session token settings."""

    secret_key: str = ""
    """Key used to sign session tokens. Generated in memory when empty."""

    cookie_name: str = "scratchpad_session"
    """Cookie that carries the session token for browser clients."""

    token_ttl: int = 14 * 24 * 60 * 60
    """Lifetime of issued session tokens in seconds."""


@dataclass
class ExportConfig(DataClassDictMixin):
    """Settings for the account data export."""

    compression_level: int = 3
    """Deflate level used for the exported zip archive."""


@dataclass
class ServerConfig(DataClassDictMixin):
    """Top level server configuration."""

    host: str = "0.0.0.0"
    port: int = 8080

    base_url: str | None = None
    """Public URL of the server, used to build absolute redirects."""

    database_url: str = f"sqlite+aiosqlite:///{DATABASE_FILE}"
    """Database location, next to config.yaml unless configured."""

    trace_log_file: str | None = None
    """When set, every request is appended to this file as a JSON line."""

    language: str = "en"
    """Default language when the client does not ask for one."""

    allow_gravatar: bool = True

    auth: AuthConfig = field(default_factory=AuthConfig)
    export: ExportConfig = field(default_factory=ExportConfig)

    @property
    def server_url(self) -> str:
        """Absolute base URL without a trailing slash."""
        if self.base_url:
            return self.base_url.rstrip("/")
        return f"http://localhost:{self.port}"

    @classmethod
    def load(cls, config_dir: str | Path) -> "ServerConfig":
        """Load the configuration from a directory."""
        config_dir = Path(config_dir)
        config_file = config_dir / CONFIG_FILE
        data: dict = {}
        if config_file.exists():
            with open(config_file, "r") as f:
                data = yaml.safe_load(f) or {}
        else:
            logger.info("No config file at %s, using defaults", config_file)
        data.setdefault(
            "database_url", f"sqlite+aiosqlite:///{config_dir / DATABASE_FILE}"
        )

        config = cls.from_dict(data)

        if host := os.getenv("SCRATCHPAD_HOST"):
            config.host = host
        if port := os.getenv("SCRATCHPAD_PORT"):
            config.port = int(port)
        if base_url := os.getenv("SCRATCHPAD_BASE_URL"):
            config.base_url = base_url
        if database_url := os.getenv("SCRATCHPAD_DATABASE_URL"):
            config.database_url = database_url
        if secret := os.getenv("SCRATCHPAD_JWT_SECRET"):
            config.auth.secret_key = secret

        if not config.auth.secret_key:
            logger.warning(
                "No secret key configured; sessions will not survive a restart"
            )
            config.auth.secret_key = secrets.token_hex(32)
        return config
