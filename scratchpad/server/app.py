import json
import logging
import time
from typing import Awaitable, Callable

import aiohttp_jinja2
import jinja2
from aiohttp import web

from .config import ServerConfig
from .db.session import DatabaseSessionManager
from .routes import account
from .services.note import NoteService
from .services.user import UserService

logger = logging.getLogger(__name__)

# Header values that must never end up in the trace log.
_REDACTED_HEADERS = {"authorization", "cookie", "x-access-token"}


@web.middleware
async def trace_middleware(
    request: web.Request,
    handler: Callable[[web.Request], Awaitable[web.StreamResponse]],
) -> web.StreamResponse:
    config: ServerConfig = request.app["config"]
    if not config.trace_log_file:
        return await handler(request)

    headers = {
        key: ("<redacted>" if key.lower() in _REDACTED_HEADERS else value)
        for key, value in request.headers.items()
    }
    # Bodies may hold passwords, so only the size is recorded.
    log_entry = {
        "timestamp": time.time(),
        "method": request.method,
        "url": str(request.url),
        "headers": headers,
        "body_size": request.content_length or 0,
    }

    try:
        with open(config.trace_log_file, "a") as f:
            f.write(json.dumps(log_entry) + "\n")
            f.flush()
    except Exception as e:
        logger.error(f"Failed to write to trace log: {e}")

    logger.info(f"Trace: {request.method} {request.path}")
    return await handler(request)


def _request_token(request: web.Request, cookie_name: str) -> str | None:
    if token := request.headers.get("x-access-token"):
        return token
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header.split(" ", 1)[1]
    return request.cookies.get(cookie_name)


@web.middleware
async def jwt_auth_middleware(
    request: web.Request,
    handler: Callable[[web.Request], Awaitable[web.StreamResponse]],
) -> web.StreamResponse:
    """Attach the id of the logged in user to the request, if any.

    Handlers decide for themselves whether a user is required.
    """
    config: ServerConfig = request.app["config"]
    token = _request_token(request, config.auth.cookie_name)
    if token:
        user_service: UserService = request.app["user_service"]
        user_id = user_service.decode_token(token)
        if user_id is not None:
            request["user_id"] = user_id
    return await handler(request)


async def _init_db(app: web.Application) -> None:
    session_manager: DatabaseSessionManager = app["session_manager"]
    await session_manager.create_all()


async def _close_db(app: web.Application) -> None:
    session_manager: DatabaseSessionManager = app["session_manager"]
    await session_manager.close()


def create_app(config: ServerConfig) -> web.Application:
    app = web.Application(middlewares=[trace_middleware, jwt_auth_middleware])
    app["config"] = config

    # Initialize services
    session_manager = DatabaseSessionManager(config.database_url)
    app["session_manager"] = session_manager
    app["user_service"] = UserService(
        config.auth,
        session_manager,
        server_url=config.server_url,
        allow_gravatar=config.allow_gravatar,
    )
    app["note_service"] = NoteService(session_manager)

    aiohttp_jinja2.setup(
        app, loader=jinja2.PackageLoader("scratchpad.server", "templates")
    )

    # Register routes
    app.add_routes(account.routes)

    app.on_startup.append(_init_db)
    app.on_cleanup.append(_close_db)
    return app


def run(config: ServerConfig) -> None:
    logging.basicConfig(level=logging.INFO)
    app = create_app(config)
    web.run_app(app, host=config.host, port=config.port)
