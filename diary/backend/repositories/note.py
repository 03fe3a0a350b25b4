"""
Note Repository.

Data access layer for notes. Every per-note query here is owner-scoped: a note
belonging to another user is indistinguishable from one that does not
exist.
"""

from sqlalchemy import func, select

from diary.backend.core.exceptions import NotFoundError
from diary.backend.core.utils import utc_now
from diary.backend.models.note import Note
from diary.backend.models.user import User
from diary.backend.repositories.base import BaseRepository

NOTE_NOT_FOUND = "Note not found"


class NoteRepository(BaseRepository[Note]):
    """Repository for Note model."""

    model = Note

    async def list_for_owner(self, user_id: int) -> list[Note]:
        """
        Get every note owned by a user, most recently touched first.

        Ties on updated_at fall back to created_at, then id, both descending.
        """
        result = await self.session.execute(
            select(Note)
            .where(Note.user_id == user_id)
            .order_by(
                Note.updated_at.desc(),
                Note.created_at.desc(),
                Note.id.desc(),
            )
        )
        return list(result.scalars().all())

    async def get_for_owner(self, note_id: int, user_id: int) -> Note:
        """
        Get a note by (id, owner).

        Raises:
            NotFoundError: If the note is absent or owned by someone else
        """
        result = await self.session.execute(
            select(Note).where(Note.id == note_id, Note.user_id == user_id)
        )
        note = result.scalar_one_or_none()
        if note is None:
            raise NotFoundError(NOTE_NOT_FOUND)
        return note

    async def create_for_owner(self, user_id: int, title: str, content: str) -> Note:
        """Create a note with identical creation and update timestamps."""
        now = utc_now()
        return await self.create(
            user_id=user_id,
            title=title,
            content=content,
            created_at=now,
            updated_at=now,
        )

    async def update_for_owner(
        self,
        note_id: int,
        user_id: int,
        title: str,
        content: str,
    ) -> Note:
        """
        Replace title and content, always refreshing updated_at.

        Raises:
            NotFoundError: If the note is absent or owned by someone else
        """
        note = await self.get_for_owner(note_id, user_id)
        note.title = title
        note.content = content
        note.updated_at = utc_now()
        return await self.save(note)

    async def delete_for_owner(self, note_id: int, user_id: int) -> None:
        """
        Hard-delete a note.

        Raises:
            NotFoundError: If the note is absent or owned by someone else
        """
        note = await self.get_for_owner(note_id, user_id)
        await self.remove(note)

    async def count_by_owner(self, limit: int = 10) -> list[tuple[str, int]]:
        """
        Tally notes per user, busiest first.

        Users without notes are omitted. Ties are ordered by email.
        """
        total = func.count(Note.id).label("total")
        result = await self.session.execute(
            select(User.email, total)
            .join(Note, Note.user_id == User.id)
            .group_by(User.id, User.email)
            .order_by(total.desc(), User.email)
            .limit(limit)
        )
        return [(email, count) for email, count in result.all()]
