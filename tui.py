"""
Diary TUI Client.

Terminal diary backed by the Diary API. All state lives in
DiaryController; this module only maps widgets to controller calls and
re-renders afterwards.

Usage:
    python tui.py
    python tui.py --debug
"""

from __future__ import annotations

import sys

from rich.text import Text
from textual import on, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import (
    Button,
    Footer,
    Header,
    Input,
    Label,
    ListItem,
    ListView,
    Static,
    TextArea,
)

from diary.backend.core.logging import setup_logging
from diary.backend.schemas.note import NoteResponse
from diary.client.client import DiaryClient
from diary.client.diary import DiaryController, EditorMode
from diary.client.markup import TOOLBAR, apply_format, render_rich, summarize

TOOL_LABELS = {
    "bold": "B",
    "italic": "I",
    "underline": "U",
    "heading": "H",
    "quote": "❝",
    "bullet_list": "•",
    "numbered_list": "1.",
    "code": "<>",
    "divider": "—",
    "link": "🔗",
}


def location_to_offset(text: str, location: tuple[int, int]) -> int:
    """Convert a TextArea (row, column) location into a string offset."""
    row, column = location
    lines = text.split("\n")
    return sum(len(line) + 1 for line in lines[:row]) + column


class NoteListItem(ListItem):
    """One note in the sidebar."""

    def __init__(self, note: NoteResponse) -> None:
        summary = summarize(note)
        super().__init__(
            Label(summary.title, classes="note-title"),
            Label(summary.preview, classes="note-preview"),
            Label(summary.timestamp, classes="note-stamp"),
        )
        self.note_id = note.id


class ConfirmDeleteScreen(ModalScreen[bool]):
    """Delete confirmation dialog."""

    BINDINGS = [Binding("escape", "dismiss(False)", "Cancel")]

    def __init__(self, title: str) -> None:
        super().__init__()
        self._title = title

    def compose(self) -> ComposeResult:
        with Vertical(id="dialog"):
            yield Label("Delete Note", id="dialog-title")
            yield Label(
                f'Delete "{self._title}"? This action cannot be undone.',
                id="dialog-body",
            )
            with Horizontal(id="dialog-buttons"):
                yield Button("Cancel", id="cancel")
                yield Button("Delete", variant="error", id="confirm")

    @on(Button.Pressed)
    def on_choice(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "confirm")


class DiaryTUI(App):
    """Terminal diary."""

    TITLE = "Diary"
    SUB_TITLE = "Personal notes"

    CSS = """
    #auth {
        align: center middle;
        height: 1fr;
    }

    #auth-form {
        width: 60;
        height: auto;
        border: solid $primary;
        padding: 1 2;
    }

    #auth-buttons, #dialog-buttons {
        height: auto;
        margin-top: 1;
    }

    #diary {
        height: 1fr;
    }

    #sidebar {
        width: 40;
        border-right: solid $primary;
    }

    #notes {
        height: 1fr;
    }

    .note-title {
        text-style: bold;
    }

    .note-preview, .note-stamp {
        color: $text-muted;
    }

    #empty-list {
        padding: 1;
        color: $text-muted;
    }

    #pane {
        padding: 0 1;
    }

    #toolbar {
        height: auto;
    }

    #toolbar Button {
        min-width: 5;
    }

    #content {
        height: 1fr;
    }

    #error {
        dock: bottom;
        height: auto;
        color: $error;
        padding: 0 1;
    }

    ConfirmDeleteScreen {
        align: center middle;
    }

    #dialog {
        width: 60;
        height: auto;
        border: thick $error;
        background: $surface;
        padding: 1 2;
    }

    #dialog-title {
        text-style: bold;
    }
    """

    BINDINGS = [
        Binding("ctrl+n", "new_note", "New"),
        Binding("ctrl+s", "save", "Save"),
        Binding("ctrl+e", "edit", "Edit"),
        Binding("ctrl+d", "delete", "Delete"),
        Binding("escape", "cancel", "Cancel"),
        Binding("ctrl+l", "logout", "Logout"),
        Binding("ctrl+q", "quit", "Quit"),
    ]

    def __init__(self, controller: DiaryController | None = None) -> None:
        super().__init__()
        self.controller = controller or DiaryController(DiaryClient())

    def compose(self) -> ComposeResult:
        yield Header()
        with Vertical(id="auth"):
            with Vertical(id="auth-form"):
                yield Label("Welcome to your diary")
                yield Input(placeholder="Email", id="email")
                yield Input(placeholder="Name (sign up only)", id="name")
                yield Input(placeholder="Password", password=True, id="password")
                yield Input(placeholder="Confirm password (sign up only)", password=True, id="confirm")
                with Horizontal(id="auth-buttons"):
                    yield Button("Log in", variant="primary", id="login")
                    yield Button("Sign up", id="signup")
        with Horizontal(id="diary"):
            with Vertical(id="sidebar"):
                yield Label("", id="user")
                yield Button("New Note", variant="primary", id="new-note")
                yield Static("No diary notes yet\nCreate your first one!", id="empty-list")
                yield ListView(id="notes")
            with Vertical(id="pane"):
                with VerticalScroll(id="viewer"):
                    yield Static("", id="viewer-body")
                with Vertical(id="editor"):
                    yield Label("", id="editor-mode")
                    yield Input(placeholder="Note title...", id="title")
                    with Horizontal(id="toolbar"):
                        for tool in TOOLBAR:
                            yield Button(TOOL_LABELS[tool], id=f"fmt-{tool}")
                    yield TextArea(id="content")
        yield Static("", id="error")
        yield Footer()

    async def on_mount(self) -> None:
        await self.render_state()
        self.start_session()

    async def on_unmount(self) -> None:
        await self.controller.client.close()

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    async def render_state(self) -> None:
        """Bring every widget in line with the controller."""
        c = self.controller

        self.query_one("#auth").display = not c.signed_in
        self.query_one("#diary").display = c.signed_in
        self.query_one("#error", Static).update(c.error or "")

        if not c.signed_in:
            return

        self.query_one("#user", Label).update(f"{c.user.name} <{c.user.email}>")

        notes = self.query_one("#notes", ListView)
        await notes.clear()
        if c.notes:
            await notes.extend(NoteListItem(note) for note in c.notes)
        self.query_one("#empty-list").display = not c.notes
        notes.display = bool(c.notes)

        viewing = c.mode is EditorMode.VIEWING
        self.query_one("#viewer").display = viewing
        self.query_one("#editor").display = not viewing

        if viewing and c.current is not None:
            body = Text(c.current.title, style="bold underline")
            body.append("\n\n")
            body.append_text(render_rich(c.current.content))
            self.query_one("#viewer-body", Static).update(body)
            return

        mode_label = "Editing" if c.mode is EditorMode.EDITING and not c.is_new else "New note"
        self.query_one("#editor-mode", Label).update(mode_label)

        title = self.query_one("#title", Input)
        if title.value != c.draft_title:
            title.value = c.draft_title
        content = self.query_one("#content", TextArea)
        if content.text != c.draft_content:
            content.load_text(c.draft_content)

    # -------------------------------------------------------------------------
    # Workers
    # -------------------------------------------------------------------------

    @work(exclusive=True)
    async def start_session(self) -> None:
        await self.controller.start()
        await self.render_state()

    @work(exclusive=True)
    async def login(self, email: str, password: str) -> None:
        await self.controller.login(email, password)
        await self.render_state()

    @work(exclusive=True)
    async def signup(self, email: str, name: str, password: str, confirm: str) -> None:
        await self.controller.signup(email, name, password, confirm)
        await self.render_state()

    @work(exclusive=True)
    async def save_note(self) -> None:
        await self.controller.save()
        await self.render_state()

    @work(exclusive=True)
    async def delete_note(self) -> None:
        await self.controller.confirm_delete()
        await self.render_state()

    @work(exclusive=True)
    async def sign_out(self) -> None:
        await self.controller.logout()
        await self.render_state()

    # -------------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------------

    @on(Button.Pressed, "#login")
    def on_login(self) -> None:
        self.login(
            self.query_one("#email", Input).value,
            self.query_one("#password", Input).value,
        )

    @on(Button.Pressed, "#signup")
    def on_signup(self) -> None:
        self.signup(
            self.query_one("#email", Input).value,
            self.query_one("#name", Input).value,
            self.query_one("#password", Input).value,
            self.query_one("#confirm", Input).value,
        )

    @on(Button.Pressed, "#new-note")
    async def on_new_note(self) -> None:
        await self.action_new_note()

    @on(Button.Pressed, "#toolbar Button")
    def on_format(self, event: Button.Pressed) -> None:
        tool = (event.button.id or "").removeprefix("fmt-")
        if tool not in TOOLBAR or self.controller.mode is EditorMode.VIEWING:
            return

        content = self.query_one("#content", TextArea)
        text = content.text
        selection = content.selection
        start = location_to_offset(text, selection.start)
        end = location_to_offset(text, selection.end)
        content.load_text(apply_format(text, start, end, tool))
        content.focus()

    @on(Input.Changed, "#title")
    def on_title_changed(self, event: Input.Changed) -> None:
        if event.value != self.controller.draft_title:
            self.controller.set_draft(title=event.value)

    @on(TextArea.Changed, "#content")
    def on_content_changed(self, event: TextArea.Changed) -> None:
        text = event.text_area.text
        if text != self.controller.draft_content:
            self.controller.set_draft(content=text)

    @on(ListView.Selected, "#notes")
    async def on_note_selected(self, event: ListView.Selected) -> None:
        if isinstance(event.item, NoteListItem):
            self.controller.select(event.item.note_id)
            await self.render_state()

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    def _highlighted_note_id(self) -> int | None:
        notes = self.query_one("#notes", ListView)
        if notes.has_focus and isinstance(notes.highlighted_child, NoteListItem):
            return notes.highlighted_child.note_id
        return None

    async def action_new_note(self) -> None:
        if not self.controller.signed_in:
            return
        self.controller.new_note()
        await self.render_state()
        self.query_one("#title", Input).focus()

    def action_save(self) -> None:
        if self.controller.signed_in:
            self.save_note()

    async def action_edit(self) -> None:
        self.controller.edit(self._highlighted_note_id())
        await self.render_state()

    async def action_cancel(self) -> None:
        self.controller.cancel()
        await self.render_state()

    def action_delete(self) -> None:
        c = self.controller
        note_id = self._highlighted_note_id() or c.selected_id
        note = c.find(note_id) if note_id is not None else None
        if note is None:
            return

        c.request_delete(note.id)

        def on_dismiss(confirmed: bool | None) -> None:
            if confirmed:
                self.delete_note()
            else:
                c.dismiss_delete()

        self.push_screen(ConfirmDeleteScreen(note.title), on_dismiss)

    def action_logout(self) -> None:
        if self.controller.signed_in:
            self.sign_out()


def main() -> None:
    debug = "--debug" in sys.argv
    # Console logs would draw over the UI
    setup_logging(level="DEBUG" if debug else None, enable_console=False)
    app = DiaryTUI()
    app.run()


if __name__ == "__main__":
    main()
