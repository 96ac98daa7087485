"""Exceptions raised by the server and their HTTP representation."""

import logging

from aiohttp import web

from scratchpad.models.base import create_error_response

logger = logging.getLogger(__name__)


class ScratchpadError(Exception):
    """Base error that knows how to render itself as a response."""

    status: int = 500
    error_code: str = "E0500"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_response(self) -> web.Response:
        return web.json_response(
            create_error_response(self.message, self.error_code).to_dict(),
            status=self.status,
        )

    @classmethod
    def uncaught(cls, err: Exception) -> "ScratchpadError":
        """Wrap an unexpected exception, logging it with its traceback."""
        if isinstance(err, ScratchpadError):
            return err
        logger.error("Unexpected error: %s", err, exc_info=err)
        return InternalError("Internal server error")


class ForbiddenError(ScratchpadError):
    status = 403
    error_code = "E0403"


class NotFoundError(ScratchpadError):
    status = 404
    error_code = "E0404"


class InternalError(ScratchpadError):
    status = 500
    error_code = "E0500"


class AccountValidationError(ScratchpadError):
    """The account could not be saved because some fields are invalid.

    This is shown to the user next to the form rather than returned as an
    error response.
    """

    status = 400
    error_code = "E0400"

    def __init__(self, errors: list[str]) -> None:
        super().__init__("; ".join(errors))
        self.errors = errors
