# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""HTTP client for the identity provider's admin API.

User accounts are owned by the hosting platform's auth service, which
exposes a GoTrue-compatible admin REST API. Every call is authenticated with
the service-role key and attempted exactly once.

Example:
    client = IdentityProviderClient(settings.identity)
    user = await client.ensure_user("ada@example.com", "s3cret-pass", "Ada L")
    await client.close()
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional
from urllib.parse import quote

import httpx

from academy.core.config.settings import IdentityProviderSettings

logger = logging.getLogger(__name__)

_ALREADY_REGISTERED_MARKERS = ("already been registered", "already registered", "already exists")


class IdentityProviderError(Exception):
    """Raised when an identity provider call fails.

    Attributes:
        message: Human-readable error description (upstream message when safe).
        status_code: Upstream HTTP status, if a response was received.
        original_error: The underlying transport error.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.original_error = original_error

    def __str__(self) -> str:
        if self.original_error:
            return f"{self.message}: {self.original_error}"
        return self.message


class UserAlreadyExistsError(IdentityProviderError):
    """Raised when creating a user whose email is already registered."""

    pass


@dataclass
class IdentityUser:
    """Minimal view of an identity provider account."""

    id: str
    email: Optional[str] = None
    user_metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "IdentityUser":
        return cls(
            id=payload["id"],
            email=payload.get("email"),
            user_metadata=payload.get("user_metadata") or {},
        )


@dataclass
class EnsuredUser:
    """Result of ensure_user().

    Attributes:
        user: The created or reused account.
        created: False when an existing account was reused.
    """

    user: IdentityUser
    created: bool


class IdentityProviderClient:
    """Admin API client for creating, finding and updating user accounts.

    Attributes:
        settings: Identity provider settings.
    """

    def __init__(
        self,
        settings: IdentityProviderSettings,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """Initialize the client.

        Args:
            settings: Identity provider settings.
            http_client: Optional preconfigured client (tests inject a
                MockTransport-backed client here).
        """
        self.settings = settings
        self._client = http_client
        self._owns_client = http_client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.settings.timeout)
        return self._client

    def _headers(self) -> dict[str, str]:
        key = self.settings.service_role_key.get_secret_value()
        return {
            "apikey": key,
            "Authorization": f"Bearer {key}",
            "Content-Type": "application/json",
        }

    async def close(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            data = response.json()
        except ValueError:
            return response.text or f"HTTP {response.status_code}"
        if isinstance(data, dict):
            for key in ("msg", "message", "error_description", "error"):
                if data.get(key):
                    return str(data[key])
        return str(data)

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            return await self._get_client().request(method, url, headers=self._headers(), **kwargs)
        except httpx.HTTPError as e:
            logger.error("Identity provider request failed: %s %s: %s", method, url, e)
            raise IdentityProviderError("Identity provider unavailable", original_error=e) from e

    async def create_user(
        self,
        email: str,
        password: str,
        full_name: Optional[str] = None,
    ) -> IdentityUser:
        """Create a confirmed user account.

        Args:
            email: Account email.
            password: Initial password.
            full_name: Stored in user metadata.

        Returns:
            The created account.

        Raises:
            UserAlreadyExistsError: If the email is already registered.
            IdentityProviderError: On any other failure.
        """
        body: dict[str, Any] = {
            "email": email,
            "password": password,
            "email_confirm": True,
        }
        if full_name:
            body["user_metadata"] = {"full_name": full_name}

        response = await self._request("POST", self.settings.admin_url, json=body)
        if response.is_success:
            return IdentityUser.from_payload(response.json())

        message = self._error_message(response)
        if response.status_code in (400, 409, 422) and any(
            marker in message.lower() for marker in _ALREADY_REGISTERED_MARKERS
        ):
            raise UserAlreadyExistsError(message, status_code=response.status_code)
        raise IdentityProviderError(message, status_code=response.status_code)

    async def list_users(self, page: int = 1, per_page: Optional[int] = None) -> list[IdentityUser]:
        """List one page of accounts.

        Raises:
            IdentityProviderError: If the call fails.
        """
        params = {"page": page, "per_page": per_page or self.settings.admin_page_size}
        response = await self._request("GET", self.settings.admin_url, params=params)
        if not response.is_success:
            raise IdentityProviderError(
                self._error_message(response), status_code=response.status_code
            )
        data = response.json()
        users = data.get("users", []) if isinstance(data, dict) else data
        return [IdentityUser.from_payload(u) for u in users]

    async def find_user_by_email(self, email: str) -> Optional[IdentityUser]:
        """Find an account by email, paging through the user list.

        Matching is case-insensitive.

        Returns:
            The account, or None when no page contains it.
        """
        target = email.strip().lower()
        per_page = self.settings.admin_page_size
        page = 1
        while True:
            users = await self.list_users(page=page, per_page=per_page)
            for user in users:
                if user.email and user.email.lower() == target:
                    return user
            if len(users) < per_page:
                return None
            page += 1

    async def update_user(
        self,
        user_id: str,
        password: Optional[str] = None,
        email_confirm: Optional[bool] = None,
    ) -> IdentityUser:
        """Update credentials or confirmation state of an account.

        Raises:
            IdentityProviderError: If the call fails.
        """
        body: dict[str, Any] = {}
        if password is not None:
            body["password"] = password
        if email_confirm is not None:
            body["email_confirm"] = email_confirm

        response = await self._request(
            "PUT", f"{self.settings.admin_url}/{quote(user_id, safe='')}", json=body
        )
        if not response.is_success:
            raise IdentityProviderError(
                self._error_message(response), status_code=response.status_code
            )
        return IdentityUser.from_payload(response.json())

    async def ensure_user(
        self,
        email: str,
        password: str,
        full_name: Optional[str] = None,
        reset_password: bool = True,
    ) -> EnsuredUser:
        """Create an account, or reuse the existing one for this email.

        Args:
            email: Account email.
            password: Password for a new account.
            full_name: Stored in user metadata on creation.
            reset_password: Give a reused account ``password``. When False
                the existing credential is left untouched.

        Raises:
            IdentityProviderError: If creation fails for another reason or the
                existing account cannot be located.
        """
        try:
            user = await self.create_user(email, password, full_name)
            return EnsuredUser(user=user, created=True)
        except UserAlreadyExistsError:
            logger.info("Identity already registered, reusing: %s", email)

        existing = await self.find_user_by_email(email)
        if existing is None:
            raise IdentityProviderError("User exists but could not be found")

        if not reset_password:
            return EnsuredUser(user=existing, created=False)

        user = await self.update_user(existing.id, password=password, email_confirm=True)
        return EnsuredUser(user=user, created=False)
