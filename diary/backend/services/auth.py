"""
Auth Service.

Account creation, credential checks and token issuance.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from diary.backend.core.exceptions import (
    AuthenticationError,
    ConflictError,
    ValidationError,
)
from diary.backend.core.security import (
    MIN_PASSWORD_LENGTH,
    create_access_token,
    hash_password,
    verify_password,
)
from diary.backend.models.user import User
from diary.backend.repositories.user import UserRepository
from diary.backend.schemas.auth import LoginRequest, SignupRequest
from diary.backend.services.base import BaseService

USER_EXISTS = "User already exists"
INVALID_CREDENTIALS = "Invalid credentials"
LOGGED_OUT = "Logged out successfully"


class AuthService(BaseService):
    """Service for signup, login and logout."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.users = UserRepository(session)

    async def signup(self, data: SignupRequest) -> tuple[User, str]:
        """
        Register a new user and issue a token.

        Checks run in order and the first failure wins: required fields,
        password confirmation, password length, then email uniqueness.

        Returns:
            Tuple of (created user, bearer token)

        Raises:
            ValidationError: Missing fields or unacceptable password
            ConflictError: Email already registered
        """
        self._validate_required(
            data.model_dump(),
            ["email", "name", "password", "confirm_password"],
            message="All fields are required",
        )

        if data.password != data.confirm_password:
            raise ValidationError("Passwords do not match")

        if len(data.password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
            )

        if await self.users.exists_by_email(data.email):
            self._log_debug("Signup rejected, email taken")
            raise ConflictError(USER_EXISTS)

        user = await self._execute_db_operation(
            "signup",
            self.users.create(
                email=data.email,
                name=data.name,
                hashed_password=hash_password(data.password),
            ),
            conflict_message=USER_EXISTS,
        )

        self._log_operation("User signed up", user_id=user.id)
        return user, create_access_token(user.id, email=user.email)

    async def login(self, data: LoginRequest) -> tuple[User, str]:
        """
        Check credentials and issue a token.

        Unknown email and wrong password produce the same error.

        Raises:
            ValidationError: Missing email or password
            AuthenticationError: Credentials do not match
        """
        self._validate_required(
            data.model_dump(),
            ["email", "password"],
            message="Email and password are required",
        )

        user = await self.users.get_by_email(data.email)
        if user is None or not verify_password(data.password, user.hashed_password):
            self._logger.warning("Login failed", extra={"reason": "bad_credentials"})
            raise AuthenticationError(INVALID_CREDENTIALS)

        self._log_operation("User logged in", user_id=user.id)
        return user, create_access_token(user.id, email=user.email)

