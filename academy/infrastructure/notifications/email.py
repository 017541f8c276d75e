# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Transactional email delivery through the Resend HTTP API.

Each message is sent once; delivery failures are raised to the caller with
the provider's response attached.
"""

import logging
from typing import Any, Optional

import httpx

from academy.core.config.settings import EmailSettings

logger = logging.getLogger(__name__)


class EmailDeliveryError(Exception):
    """Raised when the email API rejects a message or cannot be reached.

    Attributes:
        message: Human-readable error description.
        details: Provider response body, if any.
        original_error: The underlying transport error.
    """

    def __init__(
        self,
        message: str,
        details: Any = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details
        self.original_error = original_error

    def __str__(self) -> str:
        if self.original_error:
            return f"{self.message}: {self.original_error}"
        return self.message


class EmailNotConfiguredError(EmailDeliveryError):
    """Raised when no email API key is configured."""

    def __init__(self) -> None:
        super().__init__("RESEND_API_KEY is not configured")


class EmailClient:
    """Async client for the Resend emails endpoint."""

    def __init__(
        self,
        settings: EmailSettings,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.settings = settings
        self._client = http_client
        self._owns_client = http_client is None

    def _api_key(self) -> str:
        if self.settings.api_key is None or not self.settings.api_key.get_secret_value():
            raise EmailNotConfiguredError()
        return self.settings.api_key.get_secret_value()

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.settings.timeout)
        return self._client

    async def close(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def send(self, to: str, subject: str, html: str) -> Optional[str]:
        """Send an HTML email.

        Args:
            to: Recipient address.
            subject: Subject line.
            html: HTML body.

        Returns:
            Provider message id.

        Raises:
            EmailNotConfiguredError: If no API key is configured.
            EmailDeliveryError: If the provider rejects the message.
        """
        api_key = self._api_key()
        try:
            response = await self._get_client().post(
                self.settings.api_url,
                headers={
                    "Authorization": f"Bearer {api_key}",
                    "Content-Type": "application/json",
                },
                json={
                    "from": self.settings.from_address,
                    "to": [to],
                    "subject": subject,
                    "html": html,
                },
            )
        except httpx.HTTPError as e:
            logger.error("Email API request failed: %s", e)
            raise EmailDeliveryError("Failed to send email", original_error=e) from e

        try:
            result = response.json()
        except ValueError:
            result = {"body": response.text}

        if not response.is_success:
            logger.error("Email API error: %s", result)
            raise EmailDeliveryError("Failed to send email", details=result)

        logger.info("Email sent to %s: %s", to, subject)
        return result.get("id") if isinstance(result, dict) else None
