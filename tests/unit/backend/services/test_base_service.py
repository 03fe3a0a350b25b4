"""
Unit Tests for Base Service.

Tests the BaseService class methods and error handling.
"""

from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from diary.backend.core.exceptions import (
    ConflictError,
    DatabaseError,
    NotFoundError,
    ValidationError,
)
from diary.backend.services.base import BaseService


@pytest.fixture
def service():
    """Create a BaseService instance."""
    return BaseService(AsyncMock())


class TestBaseServiceInit:
    """Tests for BaseService initialization."""

    def test_init_stores_session(self):
        mock_session = AsyncMock()

        service = BaseService(mock_session)

        assert service.session is mock_session


class TestExecuteDbOperation:
    """Tests for _execute_db_operation method."""

    @pytest.mark.asyncio
    async def test_returns_result_on_success(self, service):
        async def successful_operation():
            return 42

        assert await service._execute_db_operation("op", successful_operation()) == 42

    @pytest.mark.asyncio
    async def test_unique_violation_uses_conflict_message(self, service):
        """Should raise ConflictError carrying the caller's message."""
        async def failing_operation():
            raise IntegrityError("statement", {}, Exception("UNIQUE constraint failed: users.email"))

        with pytest.raises(ConflictError) as exc_info:
            await service._execute_db_operation(
                "signup",
                failing_operation(),
                conflict_message="User already exists",
            )

        assert exc_info.value.message == "User already exists"

    @pytest.mark.asyncio
    async def test_duplicate_key_is_conflict(self, service):
        async def failing_operation():
            raise IntegrityError("statement", {}, Exception("duplicate key value"))

        with pytest.raises(ConflictError):
            await service._execute_db_operation("create", failing_operation())

    @pytest.mark.asyncio
    async def test_other_integrity_error_is_database_error(self, service):
        async def failing_operation():
            raise IntegrityError("statement", {}, Exception("foreign key constraint"))

        with pytest.raises(DatabaseError) as exc_info:
            await service._execute_db_operation("create_note", failing_operation())

        assert "constraint violation" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_sqlalchemy_error_is_database_error(self, service):
        async def failing_operation():
            raise SQLAlchemyError("Connection lost")

        with pytest.raises(DatabaseError) as exc_info:
            await service._execute_db_operation("list_notes", failing_operation())

        assert "operation failed" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_application_errors_pass_through(self, service):
        async def failing_operation():
            raise NotFoundError("Note not found")

        with pytest.raises(NotFoundError, match="Note not found"):
            await service._execute_db_operation("update_note", failing_operation())


class TestValidateRequired:
    """Tests for _validate_required method."""

    def test_passes_when_all_fields_present(self, service):
        service._validate_required({"title": "a", "content": "b"}, ["title", "content"])

    def test_whitespace_counts_as_present(self, service):
        """Only truthiness is checked."""
        service._validate_required({"title": "   ", "content": " "}, ["title", "content"])

    def test_raises_with_message_and_missing_fields(self, service):
        fields = {"title": "", "content": None}

        with pytest.raises(ValidationError) as exc_info:
            service._validate_required(
                fields,
                ["title", "content"],
                message="Title and content are required",
            )

        assert exc_info.value.message == "Title and content are required"
        assert exc_info.value.details["missing_fields"] == ["title", "content"]

    def test_absent_key_is_missing(self, service):
        with pytest.raises(ValidationError) as exc_info:
            service._validate_required({}, ["email"])

        assert exc_info.value.details["missing_fields"] == ["email"]


class TestLoggingMethods:
    """Tests for logging helper methods."""

    def test_log_operation_includes_service_name(self, service):
        with patch.object(service._logger, "info") as mock_info:
            service._log_operation("Note created", note_id=1)

            extra = mock_info.call_args[1]["extra"]
            assert extra["service"] == "BaseService"
            assert extra["note_id"] == 1

    def test_log_debug_includes_service_name(self, service):
        with patch.object(service._logger, "debug") as mock_debug:
            service._log_debug("Signup rejected", step=1)

            extra = mock_debug.call_args[1]["extra"]
            assert extra["service"] == "BaseService"
            assert extra["step"] == 1
