"""
HTTP Client for the Diary API.

Async client used by the terminal UI. Attaches the bearer token from the
session file to every request, identifies itself with X-Frontend-ID for
log routing, and turns error envelopes back into the application
exception types so callers handle a single taxonomy.
"""

from typing import Any

import httpx

from diary.backend.core.exceptions import (
    ApplicationError,
    AuthenticationError,
    ConflictError,
    DatabaseError,
    InternalError,
    NotFoundError,
    ValidationError,
)
from diary.backend.core.logging import get_logger, log_with_source
from diary.backend.schemas.note import NoteResponse
from diary.client.session import ClientSession, SessionStore, SessionUser

logger = get_logger(__name__)

FRONTEND_ID = "tui"

ERRORS_BY_CODE: dict[str, type[ApplicationError]] = {
    "VAL_VALIDATION_ERROR": ValidationError,
    "VAL_REQUEST_INVALID": ValidationError,
    "AUTH_UNAUTHORIZED": AuthenticationError,
    "RES_NOT_FOUND": NotFoundError,
    "RES_CONFLICT": ConflictError,
    "SYS_DATABASE_ERROR": DatabaseError,
    "SYS_INTERNAL_ERROR": InternalError,
}

ERRORS_BY_STATUS: dict[int, type[ApplicationError]] = {
    400: ValidationError,
    401: AuthenticationError,
    404: NotFoundError,
    409: ConflictError,
    422: ValidationError,
}


def _get_client_config() -> tuple[str, float]:
    """Load API base URL and timeout from application.yaml."""
    from diary.backend.core.config import get_app_config

    app = get_app_config().application
    return app.client.base_url, float(app.timeouts.external_api)


def error_from_response(response: httpx.Response) -> ApplicationError:
    """
    Build the exception matching an error response.

    The envelope's ``error.code`` decides the type; when the body is not an
    envelope the HTTP status is used instead.
    """
    code = None
    message = f"Request failed with status {response.status_code}"

    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        code = body["error"].get("code")
        message = body["error"].get("message") or message

    error_cls = ERRORS_BY_CODE.get(code) or ERRORS_BY_STATUS.get(response.status_code, InternalError)
    return error_cls(message)


class DiaryClient:
    """
    HTTP client for the Diary API.

    Usage:
        async with DiaryClient() as client:
            await client.login("ada@example.com", "secret1")
            notes = await client.list_notes()
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        session_store: SessionStore | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            base_url: API base URL including the version prefix. Read from
                config/settings/application.yaml when omitted.
            timeout: Request timeout in seconds.
            session_store: Where the session lives. Defaults to client.session_file.
            transport: Custom httpx transport (tests mount the ASGI app here).
        """
        if base_url is None or timeout is None:
            config_base_url, config_timeout = _get_client_config()
            base_url = base_url or config_base_url
            timeout = timeout if timeout is not None else config_timeout

        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session_store = session_store if session_store is not None else SessionStore()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "DiaryClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers={"X-Frontend-ID": FRONTEND_ID},
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    @property
    def session(self) -> ClientSession | None:
        return self.session_store.load()

    async def request(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
        authenticated: bool = True,
    ) -> Any:
        """
        Make a request and unwrap the response envelope.

        Returns:
            The envelope's ``data`` payload

        Raises:
            ApplicationError: Subclass matching the error response. A 401
                also clears the stored session.
            InternalError: If the server could not be reached
        """
        headers = {}
        if authenticated:
            token = self.session_store.token
            if token:
                headers["Authorization"] = f"Bearer {token}"

        log_with_source(logger, FRONTEND_ID, "debug", "API request", method=method, path=path)

        try:
            response = await self._get_client().request(method, path, json=json, headers=headers)
        except httpx.HTTPError as e:
            log_with_source(
                logger, FRONTEND_ID, "error", "API request failed",
                method=method, path=path, error=str(e),
            )
            raise InternalError(
                "Could not reach the diary server",
                code="NET_UNAVAILABLE",
            ) from e

        log_with_source(
            logger, FRONTEND_ID, "debug", "API response",
            method=method, path=path, status_code=response.status_code,
        )

        if response.is_success:
            try:
                body = response.json()
            except ValueError:
                body = None
            if not isinstance(body, dict):
                log_with_source(
                    logger, FRONTEND_ID, "error", "Response is not an envelope",
                    method=method, path=path, status_code=response.status_code,
                )
                raise InternalError(
                    "Unexpected response from the diary server",
                    code="NET_BAD_RESPONSE",
                )
            return body.get("data")

        error = error_from_response(response)
        if isinstance(error, AuthenticationError):
            self.session_store.clear()
        raise error

    def _start_session(self, data: dict[str, Any]) -> ClientSession:
        session = ClientSession(user=SessionUser(**data["user"]), token=data["token"])
        self.session_store.save(session)
        return session

    async def signup(
        self,
        email: str,
        name: str,
        password: str,
        confirm_password: str,
    ) -> ClientSession:
        """Create an account and store the resulting session."""
        data = await self.request(
            "POST",
            "/auth/signup",
            json={
                "email": email,
                "name": name,
                "password": password,
                "confirmPassword": confirm_password,
            },
            authenticated=False,
        )
        return self._start_session(data)

    async def login(self, email: str, password: str) -> ClientSession:
        """Log in and store the resulting session."""
        data = await self.request(
            "POST",
            "/auth/login",
            json={"email": email, "password": password},
            authenticated=False,
        )
        return self._start_session(data)

    async def logout(self) -> None:
        """
        Tell the server and forget the local session.

        The session file is removed even when the server call fails.
        """
        try:
            await self.request("POST", "/auth/logout", authenticated=False)
        finally:
            self.session_store.clear()

    async def list_notes(self) -> list[NoteResponse]:
        data = await self.request("GET", "/notes")
        return [NoteResponse.model_validate(item) for item in data]

    async def create_note(self, title: str, content: str) -> NoteResponse:
        data = await self.request("POST", "/notes", json={"title": title, "content": content})
        return NoteResponse.model_validate(data)

    async def get_note(self, note_id: int) -> NoteResponse:
        data = await self.request("GET", f"/notes/{note_id}")
        return NoteResponse.model_validate(data)

    async def update_note(self, note_id: int, title: str, content: str) -> NoteResponse:
        data = await self.request(
            "PUT",
            f"/notes/{note_id}",
            json={"title": title, "content": content},
        )
        return NoteResponse.model_validate(data)

    async def delete_note(self, note_id: int) -> str:
        """Delete a note and return the server's confirmation message."""
        data = await self.request("DELETE", f"/notes/{note_id}")
        return data["message"]
