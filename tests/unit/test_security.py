"""Unit tests for security utilities (password hashing, JWT and invite tokens)."""

from datetime import timedelta
from uuid import uuid4

import pytest
from jose import JWTError

from budget_api.core.security import (
    create_access_token,
    create_refresh_token,
    decode_token,
    generate_invite_code,
    generate_invite_token,
    get_user_id_from_token,
    hash_password,
    verify_password,
)


class TestPasswordHashing:
    """Test password hashing functions."""

    def test_hash_password(self):
        """Test that password is hashed with Argon2."""
        password = "MySecurePassword123!"
        hashed = hash_password(password)

        assert hashed != password
        assert hashed.startswith("$argon2")

    def test_verify_password_correct(self):
        hashed = hash_password("MySecurePassword123!")

        assert verify_password("MySecurePassword123!", hashed) is True

    def test_verify_password_incorrect(self):
        hashed = hash_password("MySecurePassword123!")

        assert verify_password("WrongPassword456!", hashed) is False

    def test_hash_same_password_different_hashes(self):
        """Test that hashing same password twice produces different hashes (salt)."""
        password = "MySecurePassword123!"
        hash1 = hash_password(password)
        hash2 = hash_password(password)

        assert hash1 != hash2
        assert verify_password(password, hash1) is True
        assert verify_password(password, hash2) is True


class TestJWTTokens:
    """Test JWT token creation and validation."""

    def test_create_access_token(self):
        user_id = uuid4()
        payload = decode_token(create_access_token(user_id))

        assert payload["sub"] == str(user_id)
        assert payload["type"] == "access"
        assert "exp" in payload

    def test_remember_me_expiry_is_longer(self):
        """A 30 day access token expires after the default one."""
        user_id = uuid4()
        default = decode_token(create_access_token(user_id))
        long_lived = decode_token(create_access_token(user_id, timedelta(days=30)))

        assert long_lived["exp"] > default["exp"]

    def test_create_refresh_token(self):
        user_id = uuid4()
        payload = decode_token(create_refresh_token(user_id))

        assert payload["sub"] == str(user_id)
        assert payload["type"] == "refresh"

    def test_decode_invalid_token(self):
        with pytest.raises(JWTError):
            decode_token("invalid.token.string")

    def test_decode_tampered_token(self):
        token = create_access_token(uuid4())

        with pytest.raises(JWTError):
            decode_token(token[:-5] + "XXXXX")

    def test_get_user_id_from_token(self):
        user_id = uuid4()

        assert get_user_id_from_token(create_access_token(user_id)) == user_id

    def test_refresh_token_rejected_as_access_token(self):
        """Refresh tokens cannot be used where an access token is expected."""
        token = create_refresh_token(uuid4())

        with pytest.raises(JWTError):
            get_user_id_from_token(token)

    def test_refresh_token_accepted_with_expected_type(self):
        user_id = uuid4()
        token = create_refresh_token(user_id)

        assert get_user_id_from_token(token, expected_type="refresh") == user_id


class TestInviteTokens:
    def test_invite_token_is_64_hex_chars(self):
        token = generate_invite_token()

        assert len(token) == 64
        int(token, 16)

    def test_invite_tokens_are_unique(self):
        assert generate_invite_token() != generate_invite_token()

    def test_invite_code_is_short(self):
        code = generate_invite_code()

        assert len(code) == 16
        assert code != generate_invite_code()
