"""
User Model.

Credential store entry. Only the bcrypt hash of the password is persisted.
"""

from typing import TYPE_CHECKING

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from diary.backend.models.base import Base, IntegerIDMixin, TimestampMixin

if TYPE_CHECKING:
    from diary.backend.models.note import Note


class User(IntegerIDMixin, TimestampMixin, Base):
    """User database model."""

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    hashed_password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    notes: Mapped[list["Note"]] = relationship(
        back_populates="owner",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email!r})>"
