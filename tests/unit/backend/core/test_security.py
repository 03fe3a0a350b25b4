"""
Unit Tests for Security Utilities.

Password hashing, token issuance and bearer header parsing.
"""

from datetime import timedelta
from unittest.mock import patch

import pytest
from jose import jwt

from diary.backend.core.exceptions import AuthenticationError
from diary.backend.core.security import (
    ACCESS_TOKEN_LIFETIME,
    create_access_token,
    decode_token,
    hash_password,
    parse_bearer_header,
    user_id_from_token,
    verify_password,
)
from diary.backend.core.utils import utc_now


@pytest.fixture(autouse=True)
def _pinned_secret(jwt_secret):
    return jwt_secret


class TestPasswordHashing:
    """Tests for bcrypt hashing."""

    def test_hash_is_not_plaintext(self):
        hashed = hash_password("secret1")
        assert hashed != "secret1"
        assert hashed.startswith("$2")

    def test_hash_is_salted(self):
        assert hash_password("secret1") != hash_password("secret1")

    def test_verify_accepts_correct_password(self):
        assert verify_password("secret1", hash_password("secret1")) is True

    def test_verify_rejects_wrong_password(self):
        assert verify_password("secret2", hash_password("secret1")) is False

    def test_long_password_round_trip(self):
        password = "p" * 80
        hashed = hash_password(password)

        assert verify_password(password, hashed) is True
        assert verify_password("p" * 79, hashed) is False

    def test_passwords_sharing_a_72_byte_prefix_differ(self):
        hashed = hash_password("a" * 72 + "one")

        assert verify_password("a" * 72 + "two", hashed) is False

    def test_multibyte_password_round_trip(self):
        password = "пароль" * 20
        assert verify_password(password, hash_password(password)) is True


class TestAccessTokens:
    """Tests for token issuance and verification."""

    def test_round_trip_returns_user_id(self):
        token = create_access_token(42, email="ada@example.com")
        assert user_id_from_token(token) == 42

    def test_claims(self):
        payload = decode_token(create_access_token(7, email="ada@example.com"))
        assert payload["sub"] == "7"
        assert payload["type"] == "access"
        assert payload["email"] == "ada@example.com"
        assert payload["aud"] == "diary-api"

    def test_lifetime_is_seven_days(self):
        payload = decode_token(create_access_token(1))
        assert payload["exp"] - payload["iat"] == int(ACCESS_TOKEN_LIFETIME.total_seconds())
        assert ACCESS_TOKEN_LIFETIME == timedelta(days=7)

    def test_expired_token_is_rejected(self):
        issued_long_ago = utc_now() - timedelta(days=8)
        with patch("diary.backend.core.security.utc_now", return_value=issued_long_ago):
            token = create_access_token(1)

        with pytest.raises(AuthenticationError):
            user_id_from_token(token)

    def test_token_signed_with_other_secret_is_rejected(self, jwt_secret):
        forged = jwt.encode(
            {"sub": "1", "type": "access", "aud": "diary-api"},
            "some-other-secret",
            algorithm="HS256",
        )
        with pytest.raises(AuthenticationError):
            user_id_from_token(forged)

    def test_wrong_audience_is_rejected(self, jwt_secret):
        token = jwt.encode(
            {"sub": "1", "type": "access", "aud": "another-api"},
            jwt_secret,
            algorithm="HS256",
        )
        with pytest.raises(AuthenticationError):
            user_id_from_token(token)

    def test_non_access_token_is_rejected(self, jwt_secret):
        token = jwt.encode(
            {"sub": "1", "type": "refresh", "aud": "diary-api"},
            jwt_secret,
            algorithm="HS256",
        )
        with pytest.raises(AuthenticationError):
            user_id_from_token(token)

    def test_non_integer_subject_is_rejected(self, jwt_secret):
        token = jwt.encode(
            {"sub": "not-a-number", "type": "access", "aud": "diary-api"},
            jwt_secret,
            algorithm="HS256",
        )
        with pytest.raises(AuthenticationError):
            user_id_from_token(token)

    def test_garbage_is_rejected(self):
        with pytest.raises(AuthenticationError):
            decode_token("not.a.jwt")

    def test_failures_share_one_message(self, jwt_secret):
        messages = set()
        for token in ["garbage", jwt.encode({"sub": "x", "type": "access", "aud": "diary-api"}, jwt_secret)]:
            with pytest.raises(AuthenticationError) as exc_info:
                user_id_from_token(token)
            messages.add(exc_info.value.message)
        assert messages == {"Authentication required"}


class TestParseBearerHeader:
    """Tests for Authorization header parsing."""

    def test_extracts_token(self):
        assert parse_bearer_header("Bearer abc.def.ghi") == "abc.def.ghi"

    @pytest.mark.parametrize(
        "header",
        [None, "", "abc.def.ghi", "Basic dXNlcjpwYXNz", "Bearer ", "Bearer    ", "bearer abc"],
    )
    def test_rejects_missing_or_malformed(self, header):
        with pytest.raises(AuthenticationError):
            parse_bearer_header(header)
