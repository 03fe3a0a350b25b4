"""
Unit Test Fixtures.

Fixtures for unit tests - all external dependencies are mocked.
Unit tests should be fast and isolated, never touching real databases.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from diary.backend.core.config_schema import (
    ApplicationSchema,
    FeaturesSchema,
    SecuritySchema,
)


# =============================================================================
# Database Mock Fixtures
# =============================================================================


@pytest.fixture
def mock_db_session() -> AsyncMock:
    """
    Mock database session for unit tests.

    Usage:
        def test_repository(mock_db_session: AsyncMock):
            repo = NoteRepository(mock_db_session)
    """
    session = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.flush = AsyncMock()
    session.refresh = AsyncMock()
    session.execute = AsyncMock()
    session.add = MagicMock()
    session.delete = AsyncMock()
    return session


# =============================================================================
# Configuration Fixtures
# =============================================================================


def _application(**overrides) -> ApplicationSchema:
    data = {
        "name": "Test Diary",
        "version": "1.0.0",
        "description": "Test application",
        "environment": "test",
        "debug": True,
        "api_prefix": "/api/v1",
        "docs_enabled": True,
        "server": {"host": "127.0.0.1", "port": 8000},
        "cors": {"origins": ["http://localhost:3000"]},
        "timeouts": {"database": 5, "external_api": 5},
        "client": {"base_url": "http://test/api/v1", "session_file": ".diary/session.json"},
    }
    data.update(overrides)
    return ApplicationSchema(**data)


@pytest.fixture
def make_app_config():
    """
    Build a validated configuration object for tests.

    Usage:
        def test_prod(make_app_config):
            app_config = make_app_config(environment="production", debug=False)
    """

    def factory(api_detailed_errors: bool = False, **application_overrides) -> MagicMock:
        config = MagicMock()
        config.application = _application(**application_overrides)
        config.features = FeaturesSchema(
            api_detailed_errors=api_detailed_errors,
            api_request_logging=False,
            security_startup_checks_enabled=True,
        )
        config.security = SecuritySchema(
            jwt={"algorithm": "HS256", "audience": "diary-api"},
            secrets_validation={"jwt_secret_min_length": 32},
            cors={"enforce_in_production": True},
        )
        return config

    return factory


# =============================================================================
# Logging Mock Fixtures
# =============================================================================


@pytest.fixture
def mock_logger() -> MagicMock:
    """
    Mock logger for testing logging calls.

    Usage:
        def test_logging(mock_logger):
            with patch("module.logger", mock_logger):
                ...
                mock_logger.info.assert_called_once()
    """
    logger = MagicMock()
    logger.debug = MagicMock()
    logger.info = MagicMock()
    logger.warning = MagicMock()
    logger.error = MagicMock()
    logger.exception = MagicMock()
    return logger
