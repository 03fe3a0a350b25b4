"""
Custom Exceptions.

Application-specific exception classes for consistent error handling.
The same taxonomy is raised by the HTTP client when it decodes error
responses, so callers on both sides handle one set of types.
"""


class ApplicationError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, code: str = "SYS_INTERNAL_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(self.message)


class NotFoundError(ApplicationError):
    """Raised when a resource cannot be found or is not owned by the caller."""

    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message, code="RES_NOT_FOUND")


class ValidationError(ApplicationError):
    """Raised when validation fails."""

    def __init__(self, message: str = "Validation failed", details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message, code="VAL_VALIDATION_ERROR")


class AuthenticationError(ApplicationError):
    """Raised when authentication fails. The reason is never disclosed."""

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message, code="AUTH_UNAUTHORIZED")


class ConflictError(ApplicationError):
    """Raised when a unique field is already taken."""

    def __init__(self, message: str = "Resource conflict") -> None:
        super().__init__(message, code="RES_CONFLICT")


class InternalError(ApplicationError):
    """Raised for unexpected failures. Details stay in the server log."""

    def __init__(self, message: str = "An unexpected error occurred", code: str = "SYS_INTERNAL_ERROR") -> None:
        super().__init__(message, code=code)


class DatabaseError(InternalError):
    """Raised when a database operation fails."""

    def __init__(self, message: str = "Database error") -> None:
        super().__init__(message, code="SYS_DATABASE_ERROR")
