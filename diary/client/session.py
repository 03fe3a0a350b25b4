"""
Client Session Store.

The signed-in user and bearer token live in exactly one place: a JSON
file readable only by its owner. The HTTP client reads the token from
here on every request and clears the file when the server answers 401.
"""

import os
from pathlib import Path

from pydantic import BaseModel, ValidationError

from diary.backend.core.logging import get_logger, log_with_source

logger = get_logger(__name__)

SESSION_FILE_MODE = 0o600


class SessionUser(BaseModel):
    """The signed-in user as returned by signup/login."""

    id: int
    email: str
    name: str


class ClientSession(BaseModel):
    """Persisted client-side session."""

    user: SessionUser
    token: str


def default_session_path() -> Path:
    """Resolve client.session_file from application.yaml against the project root."""
    from diary.backend.core.config import find_project_root, get_app_config

    configured = Path(get_app_config().application.client.session_file).expanduser()
    if configured.is_absolute():
        return configured
    return find_project_root() / configured


class SessionStore:
    """
    Load, save and clear the session file.

    Usage:
        store = SessionStore(Path("~/.diary/session.json").expanduser())
        store.save(ClientSession(user=user, token=token))
        session = store.load()
        store.clear()
    """

    def __init__(self, path: Path | None = None) -> None:
        self.path = path if path is not None else default_session_path()

    def load(self) -> ClientSession | None:
        """
        Read the stored session.

        An unreadable or malformed file is treated as signed out and removed.
        """
        if not self.path.exists():
            return None

        try:
            return ClientSession.model_validate_json(self.path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as e:
            log_with_source(
                logger, "tui", "warning", "Discarding unreadable session file",
                path=str(self.path), error=str(e),
            )
            self.clear()
            return None

    def save(self, session: ClientSession) -> None:
        """Write the session, creating the file with owner-only permissions."""
        self.path.parent.mkdir(parents=True, exist_ok=True)

        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, SESSION_FILE_MODE)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(session.model_dump_json())
        # O_CREAT mode is ignored for a pre-existing file
        os.chmod(self.path, SESSION_FILE_MODE)

    def clear(self) -> None:
        """Forget the session. Safe to call when already signed out."""
        self.path.unlink(missing_ok=True)

    @property
    def token(self) -> str | None:
        session = self.load()
        return session.token if session else None
