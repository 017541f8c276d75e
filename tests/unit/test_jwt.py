# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for JWT token utilities.

Tests the JWTManager class against identity-provider style tokens.
"""

import time
from uuid import uuid4

import pytest
from jose import jwt
from pydantic import SecretStr

from academy.core.config.settings import JWTSettings
from academy.domains.auth.jwt import (
    InvalidTokenError,
    JWTManager,
    TokenExpiredError,
    TokenPayload,
)


class TestJWTManager:
    """Tests for JWTManager class."""

    def test_create_and_decode_round_trip(self, jwt_manager: JWTManager) -> None:
        """Test that a minted token decodes to the same subject and email."""
        user_id = str(uuid4())

        token = jwt_manager.create_access_token(user_id=user_id, email="staff@academy.test")
        payload = jwt_manager.decode_token(token)

        assert isinstance(payload, TokenPayload)
        assert payload.sub == user_id
        assert payload.email == "staff@academy.test"
        assert payload.aud == "authenticated"
        assert payload.role == "authenticated"

    def test_decode_rejects_wrong_secret(self, jwt_manager: JWTManager) -> None:
        """Test that a token signed with another secret is invalid."""
        other = JWTManager(JWTSettings(secret_key=SecretStr("another-secret")))
        token = other.create_access_token(user_id=str(uuid4()))

        with pytest.raises(InvalidTokenError):
            jwt_manager.decode_token(token)

    def test_decode_rejects_wrong_audience(
        self,
        jwt_manager: JWTManager,
        jwt_settings: JWTSettings,
    ) -> None:
        """Test that the audience claim is enforced."""
        now = int(time.time())
        token = jwt.encode(
            {"sub": str(uuid4()), "aud": "anon", "exp": now + 60, "iat": now},
            jwt_settings.secret_key.get_secret_value(),
            algorithm="HS256",
        )

        with pytest.raises(InvalidTokenError):
            jwt_manager.decode_token(token)

    def test_decode_expired_token(
        self,
        jwt_manager: JWTManager,
        jwt_settings: JWTSettings,
    ) -> None:
        """Test that expired tokens raise TokenExpiredError."""
        now = int(time.time())
        token = jwt.encode(
            {"sub": str(uuid4()), "aud": "authenticated", "exp": now - 10, "iat": now - 100},
            jwt_settings.secret_key.get_secret_value(),
            algorithm="HS256",
        )

        with pytest.raises(TokenExpiredError):
            jwt_manager.decode_token(token)

    def test_decode_requires_subject(
        self,
        jwt_manager: JWTManager,
        jwt_settings: JWTSettings,
    ) -> None:
        """Test that a token without sub is rejected."""
        now = int(time.time())
        token = jwt.encode(
            {"aud": "authenticated", "exp": now + 60},
            jwt_settings.secret_key.get_secret_value(),
            algorithm="HS256",
        )

        with pytest.raises(InvalidTokenError):
            jwt_manager.decode_token(token)

    def test_decode_garbage(self, jwt_manager: JWTManager) -> None:
        """Test that a malformed token is invalid."""
        with pytest.raises(InvalidTokenError):
            jwt_manager.decode_token("not-a-jwt")
