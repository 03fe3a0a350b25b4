"""
Integration Tests for the Diary HTTP client.

Drives the real API through DiaryClient over an in-process transport.
"""

import pytest
from httpx import ASGITransport

from diary.backend.core.exceptions import AuthenticationError, NotFoundError, ValidationError
from diary.client.client import DiaryClient
from diary.client.diary import DiaryController, EditorMode
from diary.client.session import SessionStore


@pytest.fixture
def store(tmp_path) -> SessionStore:
    return SessionStore(tmp_path / "session.json")


@pytest.fixture
async def diary_client(app, store):
    async with DiaryClient(
        base_url="http://test/api/v1",
        timeout=5,
        session_store=store,
        transport=ASGITransport(app=app),
    ) as client:
        yield client


class TestDiaryClientAgainstApi:
    """The HTTP client speaks the API's envelope and error codes."""

    @pytest.mark.asyncio
    async def test_full_cycle(self, diary_client, store):
        session = await diary_client.signup("ada@example.com", "Ada", "secret1", "secret1")
        assert store.load() == session

        note = await diary_client.create_note("Monday", "Rain")
        updated = await diary_client.update_note(note.id, "Monday", "Sun")
        assert [n.id for n in await diary_client.list_notes()] == [note.id]
        assert (await diary_client.get_note(note.id)).content == updated.content

        assert await diary_client.delete_note(note.id) == "Note deleted successfully"
        with pytest.raises(NotFoundError, match="Note not found"):
            await diary_client.get_note(note.id)

        await diary_client.logout()
        assert store.load() is None

    @pytest.mark.asyncio
    async def test_server_validation_message(self, diary_client):
        with pytest.raises(ValidationError, match="Passwords do not match"):
            await diary_client.signup("ada@example.com", "Ada", "secret1", "secret2")

    @pytest.mark.asyncio
    async def test_signed_out_request(self, diary_client):
        with pytest.raises(AuthenticationError):
            await diary_client.list_notes()

    @pytest.mark.asyncio
    async def test_controller_session(self, diary_client):
        controller = DiaryController(diary_client)
        assert await controller.signup("ada@example.com", "Ada", "secret1", "secret1")

        controller.set_draft(title="Monday", content="**Rain**")
        assert await controller.save()
        assert controller.mode is EditorMode.VIEWING

        resumed = DiaryController(diary_client)
        assert await resumed.start()
        assert [n.title for n in resumed.notes] == ["Monday"]
