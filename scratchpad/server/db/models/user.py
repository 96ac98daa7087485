import time
import uuid
from typing import Optional

from sqlalchemy import BigInteger, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from scratchpad.server.db.base import Base


def _now_ms() -> int:
    return int(time.time() * 1000)


class UserDO(Base):
    """User database model."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    email: Mapped[Optional[str]] = mapped_column(
        String, unique=True, index=True, nullable=True
    )

    username: Mapped[Optional[str]] = mapped_column(
        String, unique=True, index=True, nullable=True
    )

    display_name: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    password_hash: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    """Salted hash of the password, see `services.user.hash_password`."""

    delete_token: Mapped[str] = mapped_column(
        String, nullable=False, default=lambda: str(uuid.uuid4())
    )
    """One-time secret that authorizes deleting the account."""

    create_time: Mapped[int] = mapped_column(BigInteger, default=_now_ms)

    update_time: Mapped[int] = mapped_column(
        BigInteger, default=_now_ms, onupdate=_now_ms
    )

    # Form state that never reaches the database. The password is staged
    # here until the user service validates and hashes it on save.
    _staged_password = None
    password_confirmation = None
    invalid_password_given = False

    @property
    def password(self) -> str:
        raise AttributeError("password is write-only")

    @password.setter
    def password(self, value: str) -> None:
        self._staged_password = value

    @property
    def staged_password(self) -> Optional[str]:
        """The new password waiting to be validated and hashed, if any."""
        return self._staged_password

    def clear_staged_password(self) -> None:
        self._staged_password = None
        self.password_confirmation = None

    @property
    def name(self) -> str:
        """Name shown to other people."""
        if self.display_name:
            return self.display_name
        if self.username:
            return self.username
        if self.email:
            return self.email.split("@", 1)[0]
        return ""

    def __repr__(self) -> str:
        return f"<UserDO(id={self.id}, username='{self.username}')>"
