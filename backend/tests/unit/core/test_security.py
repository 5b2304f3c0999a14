"""
Unit Tests for Security Module
Tests for: password hashing, JWT tokens
"""
import pytest
from datetime import datetime, timedelta, timezone
from jose import jwt

from app.core.config import settings
from app.core.exceptions import InvalidTokenError
from app.core.security import (
    create_access_token,
    create_user_token,
    decode_token,
    get_password_hash,
    verify_password,
)
from app.models.user import User


class TestPasswordHashing:
    """Test password hashing functions"""

    def test_hash_password_returns_different_value(self):
        password = "testpassword123"
        hashed = get_password_hash(password)

        assert hashed != password
        assert hashed.startswith("$2")

    def test_hash_password_different_each_time(self):
        """Bcrypt generates different salts"""
        assert get_password_hash("same-password") != get_password_hash("same-password")

    def test_verify_password_correct(self):
        hashed = get_password_hash("testpassword123")
        assert verify_password("testpassword123", hashed) is True

    def test_verify_password_incorrect(self):
        hashed = get_password_hash("testpassword123")
        assert verify_password("wrongpassword", hashed) is False

    def test_verify_password_malformed_hash(self):
        assert verify_password("anything", "not-a-bcrypt-hash") is False

    def test_long_password_truncated_to_72_bytes(self):
        base = "a" * 72
        hashed = get_password_hash(base + "tail-one")
        assert verify_password(base + "tail-two", hashed) is True


class TestJWTTokens:
    """Test JWT token creation and decoding"""

    def test_access_token_round_trip(self):
        token = create_access_token({"sub": "user-1", "email": "a@example.com"})

        payload = decode_token(token)

        assert payload["sub"] == "user-1"
        assert payload["type"] == "access"
        assert "exp" in payload

    def test_user_token_carries_id_and_email(self):
        user = User(id="0b8f6a0e-4c1d-4f6a-9d8e-2f1a3b4c5d6e", email="asha@example.com")

        payload = decode_token(create_user_token(user))

        assert payload["sub"] == user.id
        assert payload["email"] == "asha@example.com"

    def test_expired_token_rejected(self):
        token = create_access_token({"sub": "user-1"}, expires_delta=timedelta(seconds=-1))

        with pytest.raises(InvalidTokenError):
            decode_token(token)

    def test_token_signed_with_other_key_rejected(self):
        token = jwt.encode(
            {"sub": "user-1", "exp": datetime.now(timezone.utc) + timedelta(minutes=5)},
            "some-other-key",
            algorithm=settings.JWT_ALGORITHM,
        )

        with pytest.raises(InvalidTokenError):
            decode_token(token)

    def test_garbage_token_rejected(self):
        with pytest.raises(InvalidTokenError) as exc_info:
            decode_token("not.a.token")

        assert exc_info.value.status_code == 401
