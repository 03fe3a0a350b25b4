"""
Auth Schemas.

Request and response bodies for signup, login and logout.

Request fields are optional at the schema level so that missing values
reach the service and produce the same "All fields are required" error
as empty ones.
"""

from pydantic import BaseModel, ConfigDict, Field


class SignupRequest(BaseModel):
    """Signup form body. Accepts ``confirmPassword`` or ``confirm_password``."""

    email: str | None = Field(default=None, examples=["ada@example.com"])
    name: str | None = Field(default=None, examples=["Ada"])
    password: str | None = Field(default=None)
    confirm_password: str | None = Field(default=None, alias="confirmPassword")

    model_config = ConfigDict(populate_by_name=True)


class LoginRequest(BaseModel):
    """Login form body."""

    email: str | None = Field(default=None, examples=["ada@example.com"])
    password: str | None = Field(default=None)


class UserResponse(BaseModel):
    """Public view of a user. Never includes the password hash."""

    id: int
    email: str
    name: str

    model_config = ConfigDict(from_attributes=True)


class AuthResponse(BaseModel):
    """Authenticated user plus a freshly issued bearer token."""

    user: UserResponse
    token: str
