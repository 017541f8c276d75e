# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""JWT access token handling using python-jose.

Access tokens are issued by the identity provider and signed with the
project's shared secret; this module verifies them locally. Token creation is
kept for service-to-service calls and tests.

Example:
    >>> from academy.core.config import get_settings
    >>> jwt_manager = JWTManager(get_settings().jwt)
    >>> token = jwt_manager.create_access_token(user_id="user-123", email="a@b.c")
    >>> claims = jwt_manager.decode_token(token)
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone

from jose import ExpiredSignatureError, jwt
from pydantic import BaseModel

from academy.core.config.settings import JWTSettings

logger = logging.getLogger(__name__)


class TokenPayload(BaseModel):
    """Claims this service relies on.

    Attributes:
        sub: Subject (identity provider user id).
        email: Account email, if present.
        role: Platform role claim (e.g. "authenticated"). Application roles
            are loaded from user_roles, not from the token.
        aud: Audience.
        exp: Expiration timestamp.
        iat: Issued at timestamp.
    """

    sub: str
    email: str | None = None
    role: str | None = None
    aud: str | None = None
    exp: int
    iat: int | None = None


class JWTError(Exception):
    """Base exception for JWT operations."""

    pass


class TokenExpiredError(JWTError):
    """Raised when a token has expired."""

    pass


class InvalidTokenError(JWTError):
    """Raised when a token is invalid."""

    pass


class JWTManager:
    """Access token creation and validation.

    Attributes:
        _settings: JWT configuration settings.
    """

    def __init__(self, settings: JWTSettings) -> None:
        self._settings = settings

    def create_access_token(self, user_id: str, email: str | None = None) -> str:
        """Create an access token in the identity provider's format.

        Args:
            user_id: User identifier.
            email: Account email.

        Returns:
            JWT access token string.
        """
        now = datetime.now(timezone.utc)
        exp = now + timedelta(minutes=self._settings.access_token_expire_minutes)

        payload = {
            "sub": str(user_id),
            "email": email,
            "role": "authenticated",
            "aud": self._settings.audience,
            "exp": int(exp.timestamp()),
            "iat": int(now.timestamp()),
            "session_id": secrets.token_urlsafe(16),
        }

        return jwt.encode(
            payload,
            self._settings.secret_key.get_secret_value(),
            algorithm=self._settings.algorithm,
        )

    def decode_token(self, token: str) -> TokenPayload:
        """Decode and validate an access token.

        Args:
            token: JWT token string.

        Returns:
            TokenPayload with decoded claims.

        Raises:
            TokenExpiredError: If the token has expired.
            InvalidTokenError: If the token is invalid.
        """
        try:
            payload = jwt.decode(
                token,
                self._settings.secret_key.get_secret_value(),
                algorithms=[self._settings.algorithm],
                audience=self._settings.audience,
            )
        except ExpiredSignatureError as e:
            raise TokenExpiredError("Token has expired") from e
        except Exception as e:
            logger.warning("Token decode failed: %s", str(e))
            raise InvalidTokenError(f"Invalid token: {str(e)}") from e

        if not payload.get("sub") or "exp" not in payload:
            raise InvalidTokenError("Invalid token: missing subject")

        return TokenPayload(
            sub=payload["sub"],
            email=payload.get("email"),
            role=payload.get("role"),
            aud=payload.get("aud") if isinstance(payload.get("aud"), str) else None,
            exp=payload["exp"],
            iat=payload.get("iat"),
        )
