"""Decorators for route handlers."""

import functools
from typing import Awaitable, Callable

from aiohttp import web

from ..db.models.user import UserDO
from ..exceptions import ForbiddenError, NotFoundError, ScratchpadError
from ..services.user import UserService

UserHandler = Callable[[web.Request, UserDO], Awaitable[web.StreamResponse]]


def with_user(
    handler: UserHandler,
) -> Callable[[web.Request], Awaitable[web.StreamResponse]]:
    """Decorator that loads the logged in user and passes it to the handler.

    Answers 403 when the request is not authenticated, 404 when the session
    refers to a user that no longer exists and 500 when the lookup fails.
    """

    @functools.wraps(handler)
    async def wrapper(request: web.Request) -> web.StreamResponse:
        user_id = request.get("user_id")
        if user_id is None:
            return ForbiddenError("Authentication required").to_response()

        user_service: UserService = request.app["user_service"]
        try:
            user = await user_service.get_user(user_id)
        except Exception as err:
            return ScratchpadError.uncaught(err).to_response()
        if user is None:
            return NotFoundError("User not found").to_response()
        return await handler(request, user)

    return wrapper
