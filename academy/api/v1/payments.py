# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment payment endpoints.

This module provides:
- POST /initialize - Open a gateway transaction for a registration
- POST /verify - Verify a transaction after the browser redirect
- POST /webhook - Gateway push notification (raw signed body)

Example:
    POST /api/v1/payments/initialize
    Body:
        {"registration_id": "0b9c...", "callback_url": "https://academy.example/complete"}
"""

import logging

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status
from fastapi.responses import PlainTextResponse

from academy.api.dependencies import get_payment_service
from academy.api.errors import error_body
from academy.domains.payments import (
    InvalidWebhookPayloadError,
    InvalidWebhookSignatureError,
    MissingFieldError,
    PaymentAlreadyCompletedError,
    PaymentGatewayError,
    PaymentGatewayNotConfiguredError,
    PaymentRegistrationUnresolvedError,
    PaymentService,
    RegistrationNotFoundError,
    RegistrationUpdateError,
)
from academy.models.payments import (
    InitializePaymentRequest,
    InitializePaymentResponse,
    VerifyPaymentRequest,
    VerifyPaymentResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _request_origin(request: Request) -> str:
    """Origin of the calling page, falling back to the request's base URL."""
    return request.headers.get("origin") or str(request.base_url).rstrip("/")


@router.post(
    "/initialize",
    response_model=InitializePaymentResponse,
    summary="Initialize payment",
    responses={
        400: {"description": "Missing registration id, already paid or rejected by the gateway"},
        404: {"description": "Registration not found"},
        500: {"description": "Gateway not configured"},
    },
)
async def initialize_payment(
    body: InitializePaymentRequest,
    request: Request,
    service: PaymentService = Depends(get_payment_service),
) -> InitializePaymentResponse:
    """Open a gateway transaction for the full program fee."""
    try:
        return await service.initialize_payment(body, origin=_request_origin(request))
    except MissingFieldError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except RegistrationNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except PaymentAlreadyCompletedError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except PaymentGatewayNotConfiguredError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    except PaymentGatewayError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post(
    "/verify",
    response_model=VerifyPaymentResponse,
    summary="Verify payment",
    responses={
        400: {"description": "Missing reference or verification failed"},
        404: {"description": "Registration for the payment not found"},
        500: {"description": "Gateway not configured or registration update failed"},
    },
)
async def verify_payment(
    body: VerifyPaymentRequest,
    service: PaymentService = Depends(get_payment_service),
) -> VerifyPaymentResponse:
    """Verify a transaction and reconcile the registration's payment status."""
    try:
        return await service.verify_payment(body)
    except MissingFieldError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except PaymentGatewayNotConfiguredError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    except PaymentGatewayError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error_body(str(e), verified=False),
        )
    except PaymentRegistrationUnresolvedError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=error_body(str(e), verified=False),
        )
    except RegistrationUpdateError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=error_body(str(e), verified=True, payment_successful=True),
        )


@router.post(
    "/webhook",
    response_class=PlainTextResponse,
    summary="Gateway webhook",
    responses={
        401: {"description": "Invalid signature"},
        500: {"description": "Gateway not configured or registration update failed"},
    },
)
async def payment_webhook(
    request: Request,
    x_paystack_signature: str | None = Header(default=None),
    service: PaymentService = Depends(get_payment_service),
) -> PlainTextResponse:
    """Handle a signed gateway event.

    The raw body is read before any parsing so the signature covers exactly
    the bytes the gateway sent. Every verified event is acknowledged with
    "OK", including ones that cause no change.
    """
    body = await request.body()
    try:
        outcome = await service.handle_webhook(body, x_paystack_signature)
    except InvalidWebhookSignatureError as e:
        return PlainTextResponse(str(e), status_code=status.HTTP_401_UNAUTHORIZED)
    except PaymentGatewayNotConfiguredError as e:
        return PlainTextResponse(str(e), status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
    except InvalidWebhookPayloadError as e:
        return PlainTextResponse(str(e), status_code=status.HTTP_400_BAD_REQUEST)
    except RegistrationUpdateError:
        return PlainTextResponse(
            "Error updating registration",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    logger.debug("Webhook outcome: processed=%s, reason=%s", outcome.processed, outcome.reason)
    return PlainTextResponse("OK")
