import argparse
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from scratchpad.cli import server
from scratchpad.server.config import ServerConfig
from scratchpad.server.db.session import DatabaseSessionManager
from scratchpad.server.services.user import UserService


def _parse(*argv: str) -> argparse.Namespace:
    parser = argparse.ArgumentParser()
    subparsers = parser.add_subparsers(dest="command")
    server.add_parser(subparsers)
    return parser.parse_args(argv)


def test_parse_serve() -> None:
    args = _parse("serve", "--config-dir", "/etc/scratchpad")
    assert args.func is server.serve
    assert args.config_dir == "/etc/scratchpad"


async def test_add_user(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    args = _parse(
        "add-user",
        "alice",
        "--email",
        "alice@example.com",
        "--password",
        "secret",
        "--config-dir",
        str(tmp_path),
    )
    assert args.func is server.add_user

    with patch.dict(os.environ, {"SCRATCHPAD_JWT_SECRET": "cli-secret"}):
        await server._add_user(args)
        config = ServerConfig.load(tmp_path)

    out = capsys.readouterr().out
    assert "User id:       1" in out
    assert "Delete token:" in out

    session_manager = DatabaseSessionManager(config.database_url)
    user_service = UserService(config.auth, session_manager)
    user = await user_service.get_user(1)
    assert user is not None
    assert user.username == "alice"
    assert await user_service.verify_password(user, "secret")
    await session_manager.close()
