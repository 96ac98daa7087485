"""Commands for running and administering the server."""

import argparse
import asyncio
import logging

from scratchpad.server import app
from scratchpad.server.config import ServerConfig
from scratchpad.server.db.session import DatabaseSessionManager
from scratchpad.server.services.user import UserService


def serve(args: argparse.Namespace) -> None:
    config = ServerConfig.load(args.config_dir)
    app.run(config)


async def _add_user(args: argparse.Namespace) -> None:
    config = ServerConfig.load(args.config_dir)
    session_manager = DatabaseSessionManager(config.database_url)
    try:
        await session_manager.create_all()
        user_service = UserService(config.auth, session_manager)
        user = await user_service.create_user(
            username=args.username,
            email=args.email,
            password=args.password,
            display_name=args.display_name,
        )
        print(f"User id:       {user.id}")
        print(f"Delete token:  {user.delete_token}")
        print(f"Session token: {user_service.create_token(user)}")
    finally:
        await session_manager.close()


def add_user(args: argparse.Namespace) -> None:
    logging.basicConfig(level=logging.INFO)
    asyncio.run(_add_user(args))


def add_parser(subparsers: argparse._SubParsersAction) -> None:
    serve_parser = subparsers.add_parser("serve", help="Run the web server")
    serve_parser.add_argument(
        "--config-dir", default="config", help="Directory holding config.yaml"
    )
    serve_parser.set_defaults(func=serve)

    user_parser = subparsers.add_parser("add-user", help="Create a user account")
    user_parser.add_argument("username", help="Login name of the new user")
    user_parser.add_argument("--email", required=True, help="Email address")
    user_parser.add_argument("--password", required=True, help="Initial password")
    user_parser.add_argument("--display-name", default=None, help="Display name")
    user_parser.add_argument(
        "--config-dir", default="config", help="Directory holding config.yaml"
    )
    user_parser.set_defaults(func=add_user)
