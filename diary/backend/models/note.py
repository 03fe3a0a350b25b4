"""
Note Model.

A diary entry owned by exactly one user. Content is stored as opaque text;
the markup subset it may contain is interpreted only by clients.
"""

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from diary.backend.models.base import Base, IntegerIDMixin, TimestampMixin

TITLE_MAX_LENGTH = 255

if TYPE_CHECKING:
    from diary.backend.models.user import User


class Note(IntegerIDMixin, TimestampMixin, Base):
    """Note database model."""

    __tablename__ = "notes"

    title: Mapped[str] = mapped_column(
        String(TITLE_MAX_LENGTH),
        nullable=False,
    )
    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    owner: Mapped["User"] = relationship(back_populates="notes")

    __table_args__ = (
        Index("ix_notes_user_updated", "user_id", "updated_at"),
    )

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, user_id={self.user_id}, title={self.title!r})>"
