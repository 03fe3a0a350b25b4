"""
User Repository.

Data access for the credential store.
"""

from sqlalchemy import select

from diary.backend.models.user import User
from diary.backend.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository for User model."""

    model = User

    async def get_by_email(self, email: str) -> User | None:
        """Get a user by exact email, or None."""
        result = await self.session.execute(
            select(User).where(User.email == email)
        )
        return result.scalar_one_or_none()

    async def exists_by_email(self, email: str) -> bool:
        """Check whether an email is already registered."""
        result = await self.session.execute(
            select(User.id).where(User.email == email)
        )
        return result.scalar_one_or_none() is not None
