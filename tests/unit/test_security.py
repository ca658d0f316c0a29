"""
Unit tests for password hashing and JWT tokens
"""
from datetime import datetime, timedelta, timezone

import pytest
from jose import JWTError, jwt

from shoplabel.auth import JWTManager, hash_password, verify_password
from shoplabel.auth.password import PasswordManager
from shoplabel.utils.exceptions import ConfigurationError


class TestPasswordHashing:
    """Test password hashing functionality"""

    def test_hash_password(self):
        """Test password hashing"""
        password = "TestPassword123!"
        hashed = hash_password(password)

        assert hashed != password
        assert hashed.startswith("$2b$10$")  # bcrypt, cost 10

    def test_verify_password_correct(self):
        hashed = hash_password("TestPassword123!")

        assert verify_password("TestPassword123!", hashed) is True

    def test_verify_password_incorrect(self):
        hashed = hash_password("TestPassword123!")

        assert verify_password("WrongPassword!", hashed) is False

    def test_same_password_different_hashes(self):
        """Test that same password produces different hashes (salt)"""
        hash1 = hash_password("TestPassword123!")
        hash2 = hash_password("TestPassword123!")

        assert hash1 != hash2
        assert verify_password("TestPassword123!", hash1)
        assert verify_password("TestPassword123!", hash2)

    def test_verify_against_garbage_hash(self):
        assert verify_password("TestPassword123!", "not-a-bcrypt-hash") is False

    def test_empty_password_rejected(self):
        with pytest.raises(ValueError):
            PasswordManager().hash("")

    def test_long_password_truncated_to_72_bytes(self):
        password = "x" * 100
        hashed = hash_password(password)

        assert verify_password("x" * 72, hashed) is True


class TestJWTTokens:
    """Test JWT token creation and validation"""

    def test_token_round_trip(self):
        manager = JWTManager("secret")
        token = manager.create_access_token(7, "seller@example.com")

        payload = manager.verify_token(token)

        assert payload["id"] == 7
        assert payload["email"] == "seller@example.com"
        assert payload["type"] == "access"

    def test_token_expires_after_seven_days(self):
        manager = JWTManager("secret")
        issued = datetime.now(timezone.utc) - timedelta(days=7, seconds=1)
        token = manager.create_access_token(7, "seller@example.com", now=issued)

        with pytest.raises(JWTError):
            manager.verify_token(token)

    def test_token_valid_just_before_expiry(self):
        manager = JWTManager("secret")
        issued = datetime.now(timezone.utc) - timedelta(days=6, hours=23)
        token = manager.create_access_token(7, "seller@example.com", now=issued)

        assert manager.verify_token(token)["id"] == 7

    def test_token_signed_with_other_secret(self):
        token = JWTManager("other-secret").create_access_token(7, "seller@example.com")

        with pytest.raises(JWTError):
            JWTManager("secret").verify_token(token)

    def test_wrong_token_type(self):
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {"id": 7, "type": "refresh", "exp": now + timedelta(days=1)},
            "secret",
            algorithm="HS256",
        )

        with pytest.raises(JWTError):
            JWTManager("secret").verify_token(token)

    def test_malformed_token(self):
        with pytest.raises(JWTError):
            JWTManager("secret").verify_token("not.a.token")

    def test_empty_secret_rejected(self):
        with pytest.raises(ConfigurationError):
            JWTManager("")
