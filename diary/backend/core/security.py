"""
Security Utilities.

Password hashing and bearer token issuance/verification.

Tokens are stateless: validity depends only on signature, audience and
expiry at verification time. There is no server-side revocation list, so a
token stays valid for its full lifetime even if the account changes.
"""

import base64
import hashlib
from datetime import timedelta
from typing import Any

import bcrypt
from jose import JWTError, jwt

from diary.backend.core.config import get_app_config, get_settings
from diary.backend.core.exceptions import AuthenticationError
from diary.backend.core.logging import get_logger
from diary.backend.core.utils import utc_now

logger = get_logger(__name__)

ACCESS_TOKEN_LIFETIME = timedelta(days=7)

MIN_PASSWORD_LENGTH = 6


def _password_digest(password: str) -> bytes:
    """
    Reduce a password to a fixed 44-byte input for bcrypt.

    bcrypt rejects inputs over 72 bytes, so the UTF-8 password is first
    digested with SHA-256 and base64-encoded.
    """
    digest = hashlib.sha256(password.encode("utf-8")).digest()
    return base64.b64encode(digest)


def hash_password(password: str) -> str:
    """Hash a password using bcrypt (salted, one-way)."""
    salt = bcrypt.gensalt()
    return bcrypt.hashpw(_password_digest(password), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return bcrypt.checkpw(
        _password_digest(plain_password),
        hashed_password.encode("utf-8"),
    )


def create_access_token(
    user_id: int,
    email: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """
    Create a signed access token for a user.

    Args:
        user_id: Identifier stored in the ``sub`` claim
        email: Optional email claim, informational only
        expires_delta: Override the fixed lifetime (tests only)

    Returns:
        Encoded JWT
    """
    settings = get_settings()
    jwt_config = get_app_config().security.jwt

    issued_at = utc_now()
    expire = issued_at + (expires_delta if expires_delta is not None else ACCESS_TOKEN_LIFETIME)

    to_encode: dict[str, Any] = {
        "sub": str(user_id),
        "type": "access",
        "aud": jwt_config.audience,
        "iat": issued_at,
        "exp": expire,
    }
    if email is not None:
        to_encode["email"] = email

    return jwt.encode(to_encode, settings.jwt_secret, algorithm=jwt_config.algorithm)


def decode_token(token: str) -> dict[str, Any]:
    """
    Decode and validate a JWT.

    Raises:
        AuthenticationError: If the token is malformed, tampered, expired or
            issued for another audience. The reason is only logged.
    """
    settings = get_settings()
    jwt_config = get_app_config().security.jwt
    try:
        return jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[jwt_config.algorithm],
            audience=jwt_config.audience,
        )
    except JWTError as e:
        logger.warning("Token decode failed", extra={"error": str(e)})
        raise AuthenticationError()


def user_id_from_token(token: str) -> int:
    """
    Resolve a bearer token to the user identifier it was issued for.

    Raises:
        AuthenticationError: On any verification failure or a payload
            without a usable integer ``sub`` claim.
    """
    payload = decode_token(token)
    if payload.get("type") != "access":
        logger.warning("Token rejected", extra={"reason": "wrong_type"})
        raise AuthenticationError()
    try:
        return int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        logger.warning("Token rejected", extra={"reason": "bad_subject"})
        raise AuthenticationError()


def parse_bearer_header(authorization: str | None) -> str:
    """
    Extract the token from an ``Authorization: Bearer <token>`` header.

    Raises:
        AuthenticationError: If the header is absent or malformed.
    """
    if not authorization or not authorization.startswith("Bearer "):
        raise AuthenticationError()
    token = authorization[len("Bearer "):].strip()
    if not token:
        raise AuthenticationError()
    return token
