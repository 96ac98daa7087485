import asyncio
import hashlib
import hmac
import logging
import re
import secrets
import time
import urllib.parse
from dataclasses import dataclass

import jwt
from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError

from ..config import AuthConfig
from ..db.models.note import NoteDO
from ..db.models.user import UserDO
from ..db.session import DatabaseSessionManager
from ..exceptions import AccountValidationError

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"

PASSWORD_ITERATIONS = 260000

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def hash_password(password: str, salt: str | None = None) -> str:
    """Hash a password as `pbkdf2_sha256$<iterations>$<salt>$<hex digest>`."""
    if salt is None:
        salt = secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode(), salt.encode(), PASSWORD_ITERATIONS
    )
    return f"pbkdf2_sha256${PASSWORD_ITERATIONS}${salt}${digest.hex()}"


def check_password(password: str, password_hash: str | None) -> bool:
    if not password_hash:
        return False
    try:
        algorithm, iterations, salt, expected = password_hash.split("$")
    except ValueError:
        logger.warning("Malformed password hash")
        return False
    if algorithm != "pbkdf2_sha256":
        logger.warning("Unsupported password hash algorithm: %s", algorithm)
        return False
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode(), salt.encode(), int(iterations)
    )
    return hmac.compare_digest(digest.hex(), expected)


@dataclass
class UserProfile:
    """Public view of a user."""

    name: str
    photo: str


class UserService:
    """Loads, updates and removes user accounts."""

    def __init__(
        self,
        config: AuthConfig,
        session_manager: DatabaseSessionManager,
        server_url: str = "",
        allow_gravatar: bool = True,
    ) -> None:
        self._config = config
        self._session_manager = session_manager
        self._server_url = server_url
        self._allow_gravatar = allow_gravatar

    async def create_user(
        self,
        username: str | None,
        email: str | None,
        password: str,
        display_name: str | None = None,
    ) -> UserDO:
        """Create a new user with a fresh delete token."""
        password_hash = await asyncio.to_thread(hash_password, password)
        async with self._session_manager.session() as session:
            user = UserDO(
                username=username,
                email=email,
                display_name=display_name,
                password_hash=password_hash,
            )
            session.add(user)
            await session.commit()
            await session.refresh(user)
        logger.info("Created user %s (id=%s)", username or email, user.id)
        return user

    async def get_user(self, user_id: int) -> UserDO | None:
        async with self._session_manager.session() as session:
            return await session.get(UserDO, user_id)

    async def verify_password(self, user: UserDO, password: str) -> bool:
        # Hashing is slow on purpose, keep it off the event loop.
        return await asyncio.to_thread(check_password, password, user.password_hash)

    def validate(self, user: UserDO) -> None:
        """Check the pending changes of a user.

        Raises:
          AccountValidationError: listing every problem found.
        """
        errors = []
        if user.email is not None and not _EMAIL_RE.match(user.email):
            errors.append("Email address is not valid.")
        if user.username is not None and (
            not user.username or any(c.isspace() for c in user.username)
        ):
            errors.append("Username must not be empty or contain whitespace.")
        staged = user.staged_password
        if staged is not None:
            if not staged:
                errors.append("New password must not be empty.")
            elif staged != user.password_confirmation:
                errors.append("New password and confirmation do not match.")
        if errors:
            raise AccountValidationError(errors)

    async def save_user(self, user: UserDO) -> None:
        """Validate and persist the changes made to a user.

        On failure the user keeps the attempted changes so the form can be
        shown again, but nothing is written.

        Raises:
          AccountValidationError: if the changes are invalid.
        """
        self.validate(user)
        if user.staged_password is not None:
            user.password_hash = await asyncio.to_thread(
                hash_password, user.staged_password
            )
        async with self._session_manager.session() as session:
            # Merge copies the detached user into this session so that a
            # failed flush leaves the caller's object untouched.
            await session.merge(user)
            try:
                await session.commit()
            except IntegrityError as err:
                logger.info("Rejected account update for user %s: %s", user.id, err)
                raise AccountValidationError(
                    ["Username or email address is already in use."]
                ) from err
        user.clear_staged_password()

    async def delete_user(self, user: UserDO) -> None:
        """Remove a user together with all of their notes."""
        async with self._session_manager.session() as session:
            await session.execute(delete(NoteDO).where(NoteDO.owner_id == user.id))
            await session.execute(delete(UserDO).where(UserDO.id == user.id))
            await session.commit()
        logger.info("Deleted user %s", user.id)

    def get_profile(self, user: UserDO) -> UserProfile:
        """Build the public profile of a user."""
        name = user.name
        if self._allow_gravatar and user.email:
            digest = hashlib.md5(user.email.strip().lower().encode()).hexdigest()
            photo = f"https://www.gravatar.com/avatar/{digest}?s=96&d=identicon"
        else:
            quoted = urllib.parse.quote(name, safe="")
            photo = f"{self._server_url}/user/{quoted}/avatar.svg"
        return UserProfile(name=name, photo=photo)

    def create_token(self, user: UserDO) -> str:
        """Issue a session token for the user."""
        now = int(time.time())
        payload = {
            "sub": str(user.id),
            "iat": now,
            "exp": now + self._config.token_ttl,
        }
        return jwt.encode(payload, self._config.secret_key, algorithm=JWT_ALGORITHM)

    def decode_token(self, token: str) -> int | None:
        """Return the user id of a valid session token."""
        try:
            payload = jwt.decode(
                token, self._config.secret_key, algorithms=[JWT_ALGORITHM]
            )
            return int(payload["sub"])
        except (jwt.InvalidTokenError, KeyError, ValueError) as err:
            logger.debug("Rejected session token: %s", err)
            return None
