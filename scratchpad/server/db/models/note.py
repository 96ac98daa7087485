import time
from typing import Optional

from sqlalchemy import BigInteger, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from scratchpad.server.db.base import Base


class NoteDO(Base):
    """Database model for a markdown note."""

    __tablename__ = "notes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    """Internal database ID."""

    owner_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    """Owner user ID."""

    title: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    """Title of the note, derived from its first heading."""

    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    """Markdown source of the note."""

    last_change_time: Mapped[int] = mapped_column(
        BigInteger, default=lambda: int(time.time() * 1000)
    )
    """Time of the last edit in milliseconds."""

    create_time: Mapped[int] = mapped_column(
        BigInteger, default=lambda: int(time.time() * 1000)
    )
    """System creation timestamp."""

    def __repr__(self) -> str:
        return f"<NoteDO(id={self.id}, owner_id={self.owner_id}, title='{self.title}')>"
