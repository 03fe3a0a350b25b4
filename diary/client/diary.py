"""
Diary Controller.

Widget-independent state machine behind the terminal diary. The TUI
forwards user intents here and re-renders from the controller's
attributes afterwards.

Editor modes:

    EMPTY    nothing selected, blank draft
    VIEWING  a saved note, read-only
    EDITING  an existing note loaded for changes (``current`` is set),
             or a new note not yet saved (``current`` is None)

Server calls are never applied optimistically: a failed call only sets
``error`` and leaves every other attribute as it was.
"""

from enum import Enum

from diary.backend.core.exceptions import (
    ApplicationError,
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from diary.backend.core.logging import get_logger, log_with_source
from diary.backend.schemas.note import NoteResponse
from diary.client.client import DiaryClient
from diary.client.session import SessionUser

logger = get_logger(__name__)

TITLE_AND_CONTENT_REQUIRED = "Title and content are required"
SESSION_EXPIRED = "Your session has expired. Please log in again."

# Errors whose server message is meant for the user as-is
_USER_FACING_ERRORS = (ValidationError, NotFoundError, ConflictError)


class EditorMode(str, Enum):
    EMPTY = "empty"
    VIEWING = "viewing"
    EDITING = "editing"


class DiaryController:
    """
    Holds the signed-in user, the note list and the editor state.

    Usage:
        controller = DiaryController(DiaryClient())
        if not await controller.start():
            await controller.login(email, password)
        controller.set_draft(title="Monday", content="Rain.")
        await controller.save()
    """

    def __init__(self, client: DiaryClient) -> None:
        self.client = client
        self.user: SessionUser | None = None
        self.notes: list[NoteResponse] = []
        self.mode = EditorMode.EMPTY
        self.current: NoteResponse | None = None
        self.draft_title = ""
        self.draft_content = ""
        self.pending_delete: int | None = None
        self.error: str | None = None

    # -------------------------------------------------------------------------
    # Derived state
    # -------------------------------------------------------------------------

    @property
    def signed_in(self) -> bool:
        return self.user is not None

    @property
    def is_new(self) -> bool:
        """True while editing a note that has never been saved."""
        return self.mode is EditorMode.EDITING and self.current is None

    @property
    def selected_id(self) -> int | None:
        return self.current.id if self.current else None

    def find(self, note_id: int) -> NoteResponse | None:
        return next((note for note in self.notes if note.id == note_id), None)

    # -------------------------------------------------------------------------
    # Session
    # -------------------------------------------------------------------------

    async def start(self) -> bool:
        """
        Resume a stored session and load its notes.

        Returns:
            Whether a usable session exists
        """
        session = self.client.session
        if session is None:
            return False

        self.user = session.user
        await self.refresh()
        return self.signed_in

    async def signup(self, email: str, name: str, password: str, confirm_password: str) -> bool:
        try:
            session = await self.client.signup(email, name, password, confirm_password)
        except ApplicationError as e:
            self._auth_failed("Signup failed. Please try again.", e)
            return False

        return await self._signed_in(session.user)

    async def login(self, email: str, password: str) -> bool:
        try:
            session = await self.client.login(email, password)
        except ApplicationError as e:
            self._auth_failed("Login failed. Please try again.", e)
            return False

        return await self._signed_in(session.user)

    async def logout(self) -> None:
        """
        Sign out. Local state is cleared even if the server call fails,
        and unsaved edits are dropped without asking.
        """
        try:
            await self.client.logout()
        except ApplicationError as e:
            log_with_source(logger, "tui", "warning", "Logout request failed", error=e.message)
        finally:
            self._reset()

    async def refresh(self) -> None:
        """Reload the note list from the server."""
        try:
            self.notes = await self.client.list_notes()
        except ApplicationError as e:
            self._fail("Failed to load notes", e)

    # -------------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------------

    def select(self, note_id: int) -> None:
        """Show a note read-only."""
        note = self.find(note_id)
        if note is None:
            return
        self._load(EditorMode.VIEWING, note)

    def edit(self, note_id: int | None = None) -> None:
        """
        Start editing a note: the one being viewed, or ``note_id`` from
        the list.
        """
        if note_id is None:
            if self.mode is not EditorMode.VIEWING or self.current is None:
                return
            note = self.current
        else:
            note = self.find(note_id)
            if note is None:
                return
        self._load(EditorMode.EDITING, note)

    def new_note(self) -> None:
        """Clear the editor."""
        self.mode = EditorMode.EMPTY
        self.current = None
        self.draft_title = ""
        self.draft_content = ""
        self.error = None

    def set_draft(self, title: str | None = None, content: str | None = None) -> None:
        """
        Record editor input. Typing into an empty editor starts a new note.
        Viewed notes are read-only and ignore input.
        """
        if self.mode is EditorMode.VIEWING:
            return

        if title is not None:
            self.draft_title = title
        if content is not None:
            self.draft_content = content

        if self.mode is EditorMode.EMPTY and (self.draft_title or self.draft_content):
            self.mode = EditorMode.EDITING

    def cancel(self) -> None:
        """Abandon the draft."""
        if self.mode is not EditorMode.EDITING:
            return
        if self.current is None:
            self.new_note()
        else:
            self._load(EditorMode.VIEWING, self.current)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    async def save(self) -> bool:
        """
        Create or update the note in the editor.

        Blank titles or contents are rejected locally without a request.

        Returns:
            Whether the note was saved
        """
        if self.mode is EditorMode.VIEWING:
            return False

        if not self.draft_title.strip() or not self.draft_content.strip():
            self.error = TITLE_AND_CONTENT_REQUIRED
            return False

        try:
            if self.current is not None:
                saved = await self.client.update_note(
                    self.current.id, self.draft_title, self.draft_content,
                )
                self.notes = [saved] + [n for n in self.notes if n.id != saved.id]
            else:
                saved = await self.client.create_note(self.draft_title, self.draft_content)
                self.notes = [saved] + self.notes
        except ApplicationError as e:
            self._fail("Failed to save note", e)
            return False

        log_with_source(logger, "tui", "info", "Note saved", note_id=saved.id)
        self._load(EditorMode.VIEWING, saved)
        return True

    def request_delete(self, note_id: int) -> None:
        """Ask for confirmation before deleting."""
        self.pending_delete = note_id

    def dismiss_delete(self) -> None:
        self.pending_delete = None

    async def confirm_delete(self) -> bool:
        """
        Delete the note awaiting confirmation.

        Deleting the open note clears the editor; other notes simply
        leave the list.
        """
        note_id = self.pending_delete
        if note_id is None:
            return False

        try:
            await self.client.delete_note(note_id)
        except ApplicationError as e:
            self._fail("Failed to delete note", e)
            return False

        self.notes = [n for n in self.notes if n.id != note_id]
        if self.current is not None and self.current.id == note_id:
            self.new_note()
        self.pending_delete = None
        log_with_source(logger, "tui", "info", "Note deleted", note_id=note_id)
        return True

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _load(self, mode: EditorMode, note: NoteResponse) -> None:
        self.mode = mode
        self.current = note
        self.draft_title = note.title
        self.draft_content = note.content
        self.error = None

    async def _signed_in(self, user: SessionUser) -> bool:
        self._reset()
        self.user = user
        await self.refresh()
        return self.signed_in

    def _reset(self) -> None:
        self.user = None
        self.notes = []
        self.pending_delete = None
        self.new_note()

    def _auth_failed(self, fallback: str, exc: ApplicationError) -> None:
        if isinstance(exc, (AuthenticationError, *_USER_FACING_ERRORS)):
            self.error = exc.message
        else:
            self.error = fallback

    def _fail(self, fallback: str, exc: ApplicationError) -> None:
        log_with_source(
            logger, "tui", "warning", fallback,
            error_type=type(exc).__name__, error=exc.message,
        )
        if isinstance(exc, AuthenticationError):
            # The client has already dropped the stored session
            self._reset()
            self.error = SESSION_EXPIRED
        elif isinstance(exc, _USER_FACING_ERRORS):
            self.error = exc.message
        else:
            self.error = fallback
