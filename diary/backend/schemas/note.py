"""
Note Schemas.

Pydantic schemas for note API request/response validation.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from diary.backend.models.note import TITLE_MAX_LENGTH


class NoteCreate(BaseModel):
    """
    Schema for creating a new note.

    Emptiness is checked by the service so that missing and blank
    fields share one error message.
    """

    title: str | None = Field(
        default=None,
        max_length=TITLE_MAX_LENGTH,
        description="Note title",
        examples=["Monday"],
    )
    content: str | None = Field(
        default=None,
        description="Note content, may contain markup",
        examples=["Went for a **long** walk."],
    )


class NoteUpdate(NoteCreate):
    """Schema for replacing the title and content of a note."""


class NoteResponse(BaseModel):
    """Schema for note in API responses."""

    id: int = Field(description="Note unique identifier")
    title: str = Field(description="Note title")
    content: str = Field(description="Note content")
    user_id: int = Field(description="Owning user")
    created_at: datetime = Field(description="Creation timestamp")
    updated_at: datetime = Field(description="Last update timestamp")

    model_config = ConfigDict(from_attributes=True)
