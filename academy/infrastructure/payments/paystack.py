# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Paystack payment gateway client.

Wraps the two REST calls the enrollment flow needs (transaction initialize
and verify) and the HMAC-SHA512 check used to authenticate webhooks.
Amounts cross this boundary in minor units (kobo).

Example:
    client = PaystackClient(settings.paystack)
    tx = await client.initialize_transaction(
        email="ada@example.com",
        amount_minor=to_minor_units(Decimal("105000")),
        reference="ENR-...-1700000000000",
        callback_url="https://academy.example/complete-enrollment?registration_id=...",
        metadata={"registration_id": "..."},
    )
"""

import hashlib
import hmac
import logging
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional
from urllib.parse import quote

import httpx

from academy.core.config.settings import PaystackSettings

logger = logging.getLogger(__name__)

SUCCESS_STATUS = "success"


class PaystackError(Exception):
    """Raised when the gateway rejects a request or cannot be reached.

    Attributes:
        message: Gateway message, surfaced to callers verbatim.
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


class PaystackNotConfiguredError(PaystackError):
    """Raised when no gateway secret key is configured."""

    def __init__(self) -> None:
        super().__init__("Payment service not configured")


@dataclass
class InitializedTransaction:
    """Hosted-payment details returned by transaction initialize."""

    authorization_url: str
    access_code: str
    reference: str


@dataclass
class VerifiedTransaction:
    """Outcome of a transaction as reported by the gateway.

    Attributes:
        reference: Transaction reference.
        status: Gateway status string ("success", "failed", "abandoned", ...).
        amount_minor: Amount in minor units.
        currency: Currency code.
        paid_at: Gateway timestamp string, if paid.
        metadata: Metadata supplied at initialization.
        raw: The full ``data`` object.
    """

    reference: str
    status: str
    amount_minor: int
    currency: Optional[str] = None
    paid_at: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)
    raw: dict[str, Any] = field(default_factory=dict)

    @property
    def is_successful(self) -> bool:
        return self.status == SUCCESS_STATUS

    @property
    def amount(self) -> float:
        """Amount converted back to major units."""
        return self.amount_minor / 100

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> "VerifiedTransaction":
        metadata = data.get("metadata")
        return cls(
            reference=data.get("reference", ""),
            status=data.get("status", ""),
            amount_minor=int(data.get("amount") or 0),
            currency=data.get("currency"),
            paid_at=data.get("paid_at"),
            metadata=metadata if isinstance(metadata, dict) else {},
            raw=data,
        )


def to_minor_units(amount: Decimal) -> int:
    """Convert a major-unit amount to minor units (x100)."""
    return int((Decimal(amount) * 100).to_integral_value(rounding=ROUND_HALF_UP))


def compute_signature(secret: str, body: bytes) -> str:
    """Hex HMAC-SHA512 of a raw webhook body."""
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha512).hexdigest()


def verify_signature(secret: str, body: bytes, signature: Optional[str]) -> bool:
    """Check a webhook signature header in constant time.

    Args:
        secret: Gateway secret key.
        body: Raw request body, exactly as received.
        signature: Value of the signature header.

    Returns:
        True when the signature matches.
    """
    if not signature:
        return False
    expected = compute_signature(secret, body)
    return hmac.compare_digest(expected, signature.strip().lower())


class PaystackClient:
    """Async client for the gateway's transaction API."""

    def __init__(
        self,
        settings: PaystackSettings,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.settings = settings
        self._client = http_client
        self._owns_client = http_client is None

    @property
    def secret_key(self) -> str:
        """The configured secret key.

        Raises:
            PaystackNotConfiguredError: If the key is missing.
        """
        if not self.settings.is_configured:
            raise PaystackNotConfiguredError()
        return self.settings.secret_key.get_secret_value()

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.settings.timeout,
            )
        return self._client

    async def close(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def _call(self, method: str, path: str, fallback_message: str, **kwargs: Any) -> dict[str, Any]:
        headers = {
            "Authorization": f"Bearer {self.secret_key}",
            "Content-Type": "application/json",
        }
        url = f"{self.settings.base_url.rstrip('/')}{path}"
        try:
            response = await self._get_client().request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            logger.error("Gateway request failed: %s %s: %s", method, path, e)
            raise PaystackError(fallback_message, original_error=e) from e

        try:
            payload = response.json()
        except ValueError:
            payload = {}

        if not response.is_success or not payload.get("status"):
            logger.error("Gateway rejected %s %s: %s", method, path, payload)
            raise PaystackError(
                payload.get("message") or fallback_message,
                status_code=response.status_code,
            )
        return payload.get("data") or {}

    async def initialize_transaction(
        self,
        email: str,
        amount_minor: int,
        reference: str,
        callback_url: str,
        metadata: dict[str, Any],
    ) -> InitializedTransaction:
        """Open a transaction and obtain the hosted payment page.

        Raises:
            PaystackNotConfiguredError: If no secret key is configured.
            PaystackError: If the gateway rejects the request.
        """
        data = await self._call(
            "POST",
            "/transaction/initialize",
            "Failed to initialize payment",
            json={
                "email": email,
                "amount": amount_minor,
                "currency": self.settings.currency,
                "reference": reference,
                "callback_url": callback_url,
                "metadata": metadata,
            },
        )
        return InitializedTransaction(
            authorization_url=data.get("authorization_url", ""),
            access_code=data.get("access_code", ""),
            reference=data.get("reference", reference),
        )

    async def verify_transaction(self, reference: str) -> VerifiedTransaction:
        """Fetch the gateway's view of a transaction.

        Raises:
            PaystackNotConfiguredError: If no secret key is configured.
            PaystackError: If the gateway does not recognize the reference.
        """
        data = await self._call(
            "GET",
            f"/transaction/verify/{quote(reference, safe='')}",
            "Payment verification failed",
        )
        return VerifiedTransaction.from_payload(data)
