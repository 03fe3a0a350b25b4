"""
Notes API Endpoints.

REST API endpoints for note management. Every route requires a bearer
token and only ever touches the caller's own notes.
"""

from fastapi import APIRouter

from diary.backend.core.dependencies import CurrentUserId, DbSession
from diary.backend.schemas.base import ApiResponse, MessageResponse
from diary.backend.schemas.note import NoteCreate, NoteResponse, NoteUpdate
from diary.backend.services.note import NoteService

router = APIRouter()


@router.get(
    "",
    response_model=ApiResponse[list[NoteResponse]],
    summary="List notes",
    description="List the caller's notes, most recently updated first.",
)
async def list_notes(
    db: DbSession,
    user_id: CurrentUserId,
) -> ApiResponse[list[NoteResponse]]:
    service = NoteService(db, user_id)
    notes = await service.list_notes()
    return ApiResponse(data=[NoteResponse.model_validate(note) for note in notes])


@router.post(
    "",
    response_model=ApiResponse[NoteResponse],
    status_code=201,
    summary="Create a note",
    description="Create a new note. Title and content are both required.",
)
async def create_note(
    data: NoteCreate,
    db: DbSession,
    user_id: CurrentUserId,
) -> ApiResponse[NoteResponse]:
    """Create a new note."""
    service = NoteService(db, user_id)
    note = await service.create_note(data)
    return ApiResponse(data=NoteResponse.model_validate(note))


@router.get(
    "/{note_id}",
    response_model=ApiResponse[NoteResponse],
    summary="Get a note",
    description="Get a single note by ID.",
)
async def get_note(
    note_id: int,
    db: DbSession,
    user_id: CurrentUserId,
) -> ApiResponse[NoteResponse]:
    """Get a note by ID."""
    service = NoteService(db, user_id)
    note = await service.get_note(note_id)
    return ApiResponse(data=NoteResponse.model_validate(note))


@router.put(
    "/{note_id}",
    response_model=ApiResponse[NoteResponse],
    summary="Update a note",
    description="Replace the title and content of an existing note.",
)
async def update_note(
    note_id: int,
    data: NoteUpdate,
    db: DbSession,
    user_id: CurrentUserId,
) -> ApiResponse[NoteResponse]:
    """Update a note."""
    service = NoteService(db, user_id)
    note = await service.update_note(note_id, data)
    return ApiResponse(data=NoteResponse.model_validate(note))


@router.delete(
    "/{note_id}",
    response_model=ApiResponse[MessageResponse],
    summary="Delete a note",
    description="Permanently delete a note.",
)
async def delete_note(
    note_id: int,
    db: DbSession,
    user_id: CurrentUserId,
) -> ApiResponse[MessageResponse]:
    """Delete a note."""
    service = NoteService(db, user_id)
    await service.delete_note(note_id)
    return ApiResponse(data=MessageResponse(message="Note deleted successfully"))
