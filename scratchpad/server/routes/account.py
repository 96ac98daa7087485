"""Account settings pages: profile, update, delete and data export."""

import hmac
import logging

import aiohttp_jinja2
from aiohttp import web

from scratchpad.models.account import AccountProfileVO, AccountUpdateDTO
from scratchpad.server.config import ServerConfig
from scratchpad.server.db.models.user import UserDO
from scratchpad.server.exceptions import (
    AccountValidationError,
    ForbiddenError,
    ScratchpadError,
)
from scratchpad.server.i18n import localize
from scratchpad.server.services.export import iter_note_archive
from scratchpad.server.services.note import NoteService
from scratchpad.server.services.user import UserService

from .decorators import with_user

logger = logging.getLogger(__name__)
routes = web.RouteTableDef()

ACCOUNT_TEMPLATE = "settings/account.html"
EXPORT_FILENAME = "archive.zip"


def _wants_json(request: web.Request) -> bool:
    """Whether the client asked for data rather than a page."""
    if request.headers.get("X-Requested-With") == "XMLHttpRequest":
        return True
    accept = request.headers.get("Accept", "")
    return "application/json" in accept and "text/html" not in accept


def _render_account(
    request: web.Request,
    title: str,
    user: UserDO,
    validation_errors: AccountValidationError | None = None,
) -> web.Response:
    return aiohttp_jinja2.render_template(
        ACCOUNT_TEMPLATE,
        request,
        {
            "title": title,
            "validation_errors": validation_errors,
            "user": user,
        },
    )


@routes.get("/settings/account")
@with_user
async def handle_get_account(request: web.Request, user: UserDO) -> web.Response:
    # Endpoint: GET /settings/account
    # Purpose: Show the profile of the logged in user.
    # Response: settings page, or AccountProfileVO for scripted clients
    if _wants_json(request):
        user_service: UserService = request.app["user_service"]
        profile = user_service.get_profile(user)
        return web.json_response(
            AccountProfileVO(
                id=request["user_id"], name=profile.name, photo=profile.photo
            ).to_dict()
        )
    return _render_account(request, localize(request, "Profile for %s", user.name), user)


@routes.post("/settings/account")
@with_user
async def handle_update_account(request: web.Request, user: UserDO) -> web.Response:
    # Endpoint: POST /settings/account
    # Purpose: Update the account from the settings form.
    # Response: redirect back to the page, or the page with validation errors
    form = await request.post()
    req_data = AccountUpdateDTO.from_dict(
        {key: value for key, value in form.items() if isinstance(value, str)}
    )
    user_service: UserService = request.app["user_service"]
    config: ServerConfig = request.app["config"]

    # Only these attributes may be changed from the form, and only when a
    # value was entered.
    if req_data.email:
        user.email = req_data.email
    if req_data.username:
        user.username = req_data.username
    if req_data.displayname:
        user.display_name = req_data.displayname
    if req_data.old_password and await user_service.verify_password(
        user, req_data.old_password
    ):
        user.password = req_data.new_password
        user.password_confirmation = req_data.password_confirmation
    elif req_data.old_password:
        user.invalid_password_given = True

    try:
        await user_service.save_user(user)
    except AccountValidationError as err:
        return _render_account(
            request, localize(request, "Account Settings for %s", user.name), user, err
        )
    raise web.HTTPFound(config.server_url + "/settings/account")


@routes.get("/settings/account/delete")
@routes.get("/settings/account/delete/{token}")
@with_user
async def handle_delete_account(request: web.Request, user: UserDO) -> web.Response:
    # Endpoint: GET /settings/account/delete/{token}
    # Purpose: Delete the logged in user. The token is shown on the settings
    # page and must match exactly.
    token = request.match_info.get("token")
    if token is None or not hmac.compare_digest(
        token.encode(), user.delete_token.encode()
    ):
        return ForbiddenError("Invalid delete token").to_response()

    user_service: UserService = request.app["user_service"]
    config: ServerConfig = request.app["config"]
    try:
        await user_service.delete_user(user)
    except Exception as err:
        return ScratchpadError.uncaught(err).to_response()
    raise web.HTTPFound(config.server_url + "/")


@routes.get("/settings/account/export")
@with_user
async def handle_export_account(
    request: web.Request, user: UserDO
) -> web.StreamResponse:
    # Endpoint: GET /settings/account/export
    # Purpose: Download all notes of the logged in user as markdown files.
    # Response: application/zip stream
    note_service: NoteService = request.app["note_service"]
    config: ServerConfig = request.app["config"]
    try:
        notes = await note_service.list_notes(user.id)
    except Exception as err:
        return ScratchpadError.uncaught(err).to_response()

    response = web.StreamResponse(
        headers={
            "Content-Type": "application/zip",
            "Content-Disposition": f'attachment; filename="{EXPORT_FILENAME}"',
        }
    )
    await response.prepare(request)

    try:
        async for chunk in iter_note_archive(notes, config.export.compression_level):
            if chunk:
                await response.write(chunk)
    except Exception as err:
        # Headers are already sent, so the status cannot change anymore.
        # aiohttp still ends the chunked body after the partial archive, so
        # the client sees a complete 200 response holding a zip without a
        # central directory. The connection is not reused afterwards.
        logger.error("export user data failed: %s", err, exc_info=err)
        response.force_close()
        return response

    await response.write_eof()
    return response
