"""
Database models.

Importing this package registers every table on Base.metadata.
"""

from diary.backend.models.base import Base
from diary.backend.models.note import Note
from diary.backend.models.user import User

__all__ = ["Base", "Note", "User"]
