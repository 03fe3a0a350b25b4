"""
FastAPI Dependencies.

Shared dependencies for request handling.
"""

from typing import Annotated

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from diary.backend.core.database import get_db_session
from diary.backend.core.logging import get_logger
from diary.backend.core.security import parse_bearer_header, user_id_from_token

logger = get_logger(__name__)

# Type alias for database session dependency
DbSession = Annotated[AsyncSession, Depends(get_db_session)]

async def get_current_user_id(
    authorization: Annotated[str | None, Header()] = None,
) -> int:
    """
    Resolve the bearer token on the request to a user identifier.

    The identifier is trusted as-is for ownership checks; it is not
    re-validated against the users table on each request.

    Raises:
        AuthenticationError: Missing, malformed, invalid or expired token.
    """
    token = parse_bearer_header(authorization)
    return user_id_from_token(token)

CurrentUserId = Annotated[int, Depends(get_current_user_id)]
