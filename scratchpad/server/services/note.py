import logging
import time

from sqlalchemy import select

from ..db.models.note import NoteDO
from ..db.session import DatabaseSessionManager

logger = logging.getLogger(__name__)


class NoteService:
    """Read and write access to notes."""

    def __init__(self, session_manager: DatabaseSessionManager) -> None:
        self._session_manager = session_manager

    async def create_note(
        self,
        owner_id: int,
        title: str | None,
        content: str,
        last_change_time: int | None = None,
    ) -> NoteDO:
        now = int(time.time() * 1000)
        async with self._session_manager.session() as session:
            note = NoteDO(
                owner_id=owner_id,
                title=title,
                content=content,
                last_change_time=last_change_time or now,
                create_time=now,
            )
            session.add(note)
            await session.commit()
            await session.refresh(note)
        return note

    async def list_notes(self, owner_id: int) -> list[NoteDO]:
        """All notes owned by a user, oldest first."""
        async with self._session_manager.session() as session:
            stmt = (
                select(NoteDO).where(NoteDO.owner_id == owner_id).order_by(NoteDO.id)
            )
            result = await session.execute(stmt)
            return list(result.scalars().all())
