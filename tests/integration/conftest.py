"""
Integration Test Fixtures.

Fixtures for integration tests - uses real database and services.
These fixtures build on the root conftest.py database fixtures.
"""

from collections.abc import AsyncGenerator, Awaitable, Callable, Generator
from typing import Any

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from diary.backend.core.database import get_db_session

API = "/api/v1"


# =============================================================================
# API Client Fixtures
# =============================================================================


@pytest.fixture
def app(db_session: AsyncSession, jwt_secret: str) -> Generator[FastAPI, None, None]:
    """
    Application wired to the test database session.

    The lifespan is not run; every request shares the test session, which
    is rolled back after the test.
    """
    from diary.backend.main import create_app

    async def override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app = create_app()
    app.dependency_overrides[get_db_session] = override_get_db_session
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """
    Create a test client with database session override.

    Usage:
        async def test_health_endpoint(client: AsyncClient):
            response = await client.get("/health")
            assert response.status_code == 200
    """
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as test_client:
        yield test_client


# =============================================================================
# API Response Assertion Helpers
# =============================================================================


class ApiAssertions:
    """Helper class for API response assertions."""

    @staticmethod
    def assert_success(response: Any, expected_status: int = 200) -> dict[str, Any]:
        """
        Assert API response is successful.

        Returns:
            Response JSON data
        """
        assert response.status_code == expected_status, (
            f"Expected status {expected_status}, got {response.status_code}: "
            f"{response.text}"
        )
        data = response.json()
        assert data.get("success") is True, f"Response not successful: {data}"
        assert data.get("error") is None
        return data

    @staticmethod
    def assert_error(
        response: Any,
        expected_status: int,
        expected_code: str | None = None,
        expected_message: str | None = None,
    ) -> dict[str, Any]:
        """
        Assert API response is an error envelope.

        Returns:
            Response JSON data
        """
        assert response.status_code == expected_status, (
            f"Expected status {expected_status}, got {response.status_code}: "
            f"{response.text}"
        )
        data = response.json()
        assert data.get("success") is False, f"Response should be error: {data}"
        assert data.get("data") is None
        assert data.get("error") is not None, f"Missing error details: {data}"

        if expected_code:
            actual_code = data["error"].get("code")
            assert actual_code == expected_code, (
                f"Expected error code {expected_code}, got {actual_code}"
            )
        if expected_message:
            assert data["error"]["message"] == expected_message

        return data

    @staticmethod
    def assert_validation_error(
        response: Any,
        field: str | None = None,
    ) -> dict[str, Any]:
        """Assert API response is a malformed-request error (400)."""
        data = ApiAssertions.assert_error(response, 400, "VAL_REQUEST_INVALID")

        if field:
            errors = data["error"].get("details", {}).get("validation_errors", [])
            fields = [e.get("field", "") for e in errors]
            assert any(field in f for f in fields), (
                f"Expected validation error for field '{field}', "
                f"got errors for: {fields}"
            )

        return data


@pytest.fixture
def api() -> ApiAssertions:
    """Provide API assertion helpers."""
    return ApiAssertions()


# =============================================================================
# Authentication Fixtures
# =============================================================================


async def _signup(
    client: AsyncClient,
    email: str = "ada@example.com",
    name: str = "Ada",
    password: str = "secret1",
) -> dict[str, Any]:
    """Register a user through the API and return the auth payload."""
    response = await client.post(
        f"{API}/auth/signup",
        json={
            "email": email,
            "name": name,
            "password": password,
            "confirmPassword": password,
        },
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def auth_headers(client: AsyncClient) -> dict[str, str]:
    """
    Provide authentication headers for a freshly registered user.

    Usage:
        async def test_protected_endpoint(client: AsyncClient, auth_headers: dict):
            response = await client.get("/api/v1/notes", headers=auth_headers)
            assert response.status_code == 200
    """
    data = await _signup(client)
    return bearer(data["token"])


SignupFn = Callable[..., Awaitable[dict[str, Any]]]


@pytest.fixture
def register(client: AsyncClient) -> SignupFn:
    """
    Register extra users.

    Usage:
        async def test_isolation(client, register):
            bob = await register(email="bob@example.com", name="Bob")
            headers = {"Authorization": f"Bearer {bob['token']}"}
    """

    async def factory(**kwargs: Any) -> dict[str, Any]:
        return await _signup(client, **kwargs)

    return factory
