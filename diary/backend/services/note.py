"""
Note Service.

Business logic layer for notes. Every operation is scoped to the
authenticated owner.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from diary.backend.models.note import Note
from diary.backend.repositories.note import NoteRepository
from diary.backend.schemas.note import NoteCreate, NoteUpdate
from diary.backend.services.base import BaseService

TITLE_AND_CONTENT_REQUIRED = "Title and content are required"


class NoteService(BaseService):
    """
    Service for note business logic.

    Handles note creation, updates, and retrieval with
    proper validation and error handling.
    """

    def __init__(self, session: AsyncSession, user_id: int) -> None:
        super().__init__(session)
        self.user_id = user_id
        self.repo = NoteRepository(session)

    def _validate_body(self, data: NoteCreate) -> None:
        self._validate_required(
            data.model_dump(),
            ["title", "content"],
            message=TITLE_AND_CONTENT_REQUIRED,
        )

    async def list_notes(self) -> list[Note]:
        """List the owner's notes, most recently updated first."""
        return await self.repo.list_for_owner(self.user_id)

    async def create_note(self, data: NoteCreate) -> Note:
        """
        Create a new note for the owner.

        Raises:
            ValidationError: If title or content is missing or empty
        """
        self._validate_body(data)

        note = await self._execute_db_operation(
            "create_note",
            self.repo.create_for_owner(self.user_id, data.title, data.content),
        )

        self._log_operation("Note created", note_id=note.id, user_id=self.user_id)
        return note

    async def get_note(self, note_id: int) -> Note:
        """
        Get one of the owner's notes.

        Raises:
            NotFoundError: If the note is absent or belongs to someone else
        """
        return await self.repo.get_for_owner(note_id, self.user_id)

    async def update_note(self, note_id: int, data: NoteUpdate) -> Note:
        """
        Replace title and content of one of the owner's notes.

        The body is validated before the note is looked up.

        Raises:
            ValidationError: If title or content is missing or empty
            NotFoundError: If the note is absent or belongs to someone else
        """
        self._validate_body(data)

        note = await self._execute_db_operation(
            "update_note",
            self.repo.update_for_owner(note_id, self.user_id, data.title, data.content),
        )

        self._log_operation("Note updated", note_id=note_id, user_id=self.user_id)
        return note

    async def delete_note(self, note_id: int) -> None:
        """
        Hard-delete one of the owner's notes.

        Raises:
            NotFoundError: If the note is absent or belongs to someone else
        """
        await self._execute_db_operation(
            "delete_note",
            self.repo.delete_for_owner(note_id, self.user_id),
        )
        self._log_operation("Note deleted", note_id=note_id, user_id=self.user_id)
