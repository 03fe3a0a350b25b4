# Pydantic schemas package
from diary.backend.schemas.auth import (
    AuthResponse,
    LoginRequest,
    SignupRequest,
    UserResponse,
)
from diary.backend.schemas.base import (
    ApiResponse,
    ErrorDetail,
    ErrorResponse,
    MessageResponse,
    ResponseMetadata,
)
from diary.backend.schemas.note import NoteCreate, NoteResponse, NoteUpdate

__all__ = [
    "ApiResponse",
    "AuthResponse",
    "ErrorDetail",
    "ErrorResponse",
    "LoginRequest",
    "MessageResponse",
    "NoteCreate",
    "NoteResponse",
    "NoteUpdate",
    "ResponseMetadata",
    "SignupRequest",
    "UserResponse",
]
