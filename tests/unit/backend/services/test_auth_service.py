"""
Tests for Auth Service.

Runs against the in-memory test database.
"""

import pytest
from sqlalchemy import func, select

from diary.backend.core.exceptions import (
    AuthenticationError,
    ConflictError,
    ValidationError,
)
from diary.backend.core.security import decode_token, verify_password
from diary.backend.models.user import User
from diary.backend.schemas.auth import LoginRequest, SignupRequest
from diary.backend.services.auth import AuthService


def _signup(**overrides) -> SignupRequest:
    data = {
        "email": "ada@example.com",
        "name": "Ada",
        "password": "secret1",
        "confirm_password": "secret1",
    }
    data.update(overrides)
    return SignupRequest(**data)


@pytest.fixture
def service(db_session, jwt_secret):
    return AuthService(db_session)


class TestSignup:
    """Tests for account creation."""

    @pytest.mark.asyncio
    async def test_creates_user_and_token(self, service):
        user, token = await service.signup(_signup())

        assert user.id is not None
        assert user.email == "ada@example.com"
        assert user.name == "Ada"
        assert decode_token(token)["sub"] == str(user.id)

    @pytest.mark.asyncio
    async def test_password_is_hashed(self, service):
        user, _ = await service.signup(_signup())

        assert user.hashed_password != "secret1"
        assert verify_password("secret1", user.hashed_password)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("field", ["email", "name", "password", "confirm_password"])
    async def test_each_field_is_required(self, service, field):
        with pytest.raises(ValidationError, match="All fields are required"):
            await service.signup(_signup(**{field: ""}))

    @pytest.mark.asyncio
    async def test_mismatched_passwords(self, service):
        with pytest.raises(ValidationError, match="Passwords do not match"):
            await service.signup(_signup(confirm_password="secret2"))

    @pytest.mark.asyncio
    async def test_short_password(self, service):
        with pytest.raises(ValidationError, match="Password must be at least 6 characters"):
            await service.signup(_signup(password="abc", confirm_password="abc"))

    @pytest.mark.asyncio
    async def test_mismatch_reported_before_length(self, service):
        """The first failing check wins."""
        with pytest.raises(ValidationError, match="Passwords do not match"):
            await service.signup(_signup(password="abc", confirm_password="abd"))

    @pytest.mark.asyncio
    async def test_validation_reported_before_conflict(self, service):
        await service.signup(_signup())

        with pytest.raises(ValidationError, match="Passwords do not match"):
            await service.signup(_signup(confirm_password="other1"))

    @pytest.mark.asyncio
    async def test_duplicate_email_conflicts(self, service, db_session):
        await service.signup(_signup())

        with pytest.raises(ConflictError, match="User already exists"):
            await service.signup(_signup(name="Someone Else"))

        count = await db_session.scalar(
            select(func.count()).select_from(User).where(User.email == "ada@example.com")
        )
        assert count == 1


class TestLogin:
    """Tests for credential checks."""

    @pytest.mark.asyncio
    async def test_login_returns_same_user(self, service):
        created, _ = await service.signup(_signup())

        user, token = await service.login(LoginRequest(email="ada@example.com", password="secret1"))

        assert user.id == created.id
        assert decode_token(token)["email"] == "ada@example.com"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "email, password",
        [("", "secret1"), ("ada@example.com", ""), (None, None)],
    )
    async def test_missing_fields(self, service, email, password):
        with pytest.raises(ValidationError, match="Email and password are required"):
            await service.login(LoginRequest(email=email, password=password))

    @pytest.mark.asyncio
    async def test_wrong_password_and_unknown_email_look_alike(self, service):
        await service.signup(_signup())

        with pytest.raises(AuthenticationError) as wrong_password:
            await service.login(LoginRequest(email="ada@example.com", password="nope123"))
        with pytest.raises(AuthenticationError) as unknown_email:
            await service.login(LoginRequest(email="bob@example.com", password="secret1"))

        assert wrong_password.value.message == "Invalid credentials"
        assert unknown_email.value.message == wrong_password.value.message
