# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Payment service for enrollment payments.

This module provides the PaymentService class for:
- Opening gateway transactions for a registration
- Verifying transactions when the browser returns from the gateway
- Processing signed gateway webhooks
- Reconciling a registration's payment status from its payment rows

Verification and webhooks can arrive in any order for the same reference.
Both settle the payment row, where only ``completed`` is final, and then call
reconcile_registration(), which recomputes the aggregate status from all
completed rows and never moves a paid registration backwards.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from academy.domains.payments.reconciliation import (
    determine_payment_status,
    next_registration_status,
)
from academy.infrastructure.database.models import EnrollmentPayment, Registration
from academy.infrastructure.payments import (
    InitializedTransaction,
    PaystackClient,
    PaystackError,
    PaystackNotConfiguredError,
    VerifiedTransaction,
    to_minor_units,
    verify_signature,
)
from academy.models.common import PaymentRecordStatus, PaymentStatus
from academy.models.payments import (
    InitializePaymentRequest,
    InitializePaymentResponse,
    VerifyPaymentRequest,
    VerifyPaymentResponse,
)
from academy.utils.datetime import epoch_millis, utc_now
from academy.utils.ids import is_uuid

logger = logging.getLogger(__name__)

SUCCESS_EVENT = "charge.success"
REFERENCE_PREFIX = "ENR"


class PaymentServiceError(Exception):
    """Base exception for payment service errors."""

    pass


class MissingFieldError(PaymentServiceError):
    """Raised when a required request field is absent."""

    pass


class RegistrationNotFoundError(PaymentServiceError):
    """Raised when the registration does not exist."""

    pass


class PaymentAlreadyCompletedError(PaymentServiceError):
    """Raised when initializing payment for a paid registration."""

    pass


class PaymentGatewayNotConfiguredError(PaymentServiceError):
    """Raised when the gateway secret key is missing."""

    pass


class PaymentGatewayError(PaymentServiceError):
    """Raised when the gateway rejects a request. Message is the gateway's."""

    pass


class PaymentRegistrationUnresolvedError(PaymentServiceError):
    """Raised when a verified transaction cannot be tied to a registration."""

    pass


class RegistrationUpdateError(PaymentServiceError):
    """Raised when the registration could not be updated after a payment."""

    pass


class InvalidWebhookSignatureError(PaymentServiceError):
    """Raised when a webhook signature does not match the body."""

    pass


class InvalidWebhookPayloadError(PaymentServiceError):
    """Raised when a correctly signed webhook body is not valid JSON."""

    pass


@dataclass
class ReconciliationResult:
    """Outcome of recomputing a registration's payment status.

    Attributes:
        registration_id: Registration reconciled.
        completed_total: Sum of completed payment amounts.
        total_fee: Program total.
        previous_status: Payment status before reconciliation.
        payment_status: Payment status after reconciliation.
        status: Review status after reconciliation.
        changed: Whether a row was written.
    """

    registration_id: str
    completed_total: Decimal
    total_fee: Decimal
    previous_status: str
    payment_status: str
    status: str
    changed: bool


@dataclass
class WebhookOutcome:
    """How a webhook was handled.

    Attributes:
        processed: Whether any state was changed.
        reason: Short description for logs.
        reconciliation: Reconciliation result when processed.
    """

    processed: bool
    reason: str
    reconciliation: ReconciliationResult | None = None


def build_reference(registration_id: str) -> str:
    """Gateway reference for a new attempt: ENR-{registration_id}-{epoch ms}."""
    millis = epoch_millis()
    return f"{REFERENCE_PREFIX}-{registration_id}-{millis}"


def default_callback_url(origin: str, registration_id: str) -> str:
    """Enrollment completion page the gateway returns to."""
    return f"{origin.rstrip('/')}/complete-enrollment?registration_id={registration_id}"


class PaymentService:
    """Service for enrollment payments.

    Attributes:
        db: Async database session.
        gateway: Payment gateway client.
    """

    def __init__(self, db: AsyncSession, gateway: PaystackClient) -> None:
        """Initialize payment service.

        Args:
            db: Async database session.
            gateway: Payment gateway client.
        """
        self.db = db
        self.gateway = gateway

    # ========== Initialize ==========

    async def initialize_payment(
        self,
        request: InitializePaymentRequest,
        origin: str,
    ) -> InitializePaymentResponse:
        """Open a gateway transaction for a registration.

        Args:
            request: Registration id and optional callback URL.
            origin: Frontend origin used for the default callback URL.

        Returns:
            Hosted payment page details.

        Raises:
            MissingFieldError: If registration_id is missing.
            RegistrationNotFoundError: If the registration or its program is missing.
            PaymentAlreadyCompletedError: If the registration is already paid.
            PaymentGatewayNotConfiguredError: If no gateway key is configured.
            PaymentGatewayError: If the gateway rejects the request.
        """
        registration_id = (request.registration_id or "").strip()
        if not registration_id:
            raise MissingFieldError("registration_id is required")

        logger.info("Initializing payment for registration: %s", registration_id)

        registration = await self._get_registration(registration_id)
        if registration is None or registration.program is None:
            raise RegistrationNotFoundError("Registration not found")

        if registration.payment_status == PaymentStatus.PAID.value:
            raise PaymentAlreadyCompletedError("Payment already completed")

        program = registration.program
        total_amount = program.total_fee
        amount_minor = to_minor_units(total_amount)

        logger.info(
            "Payment amount: %s %s (%d minor units)",
            total_amount,
            self.gateway.settings.currency,
            amount_minor,
        )

        student_name = registration.full_name
        metadata = {
            "registration_id": registration_id,
            "student_name": student_name,
            "program_name": program.name,
            "custom_fields": [
                {
                    "display_name": "Student Name",
                    "variable_name": "student_name",
                    "value": student_name,
                },
                {
                    "display_name": "Program",
                    "variable_name": "program",
                    "value": program.name,
                },
            ],
        }

        try:
            transaction = await self.gateway.initialize_transaction(
                email=registration.email,
                amount_minor=amount_minor,
                reference=build_reference(registration_id),
                callback_url=request.callback_url
                or default_callback_url(origin, registration_id),
                metadata=metadata,
            )
        except PaystackNotConfiguredError as e:
            logger.error("Payment gateway secret key not configured")
            raise PaymentGatewayNotConfiguredError(e.message) from e
        except PaystackError as e:
            raise PaymentGatewayError(e.message) from e

        logger.info("Gateway initialization successful, reference: %s", transaction.reference)

        await self._record_pending_payment(registration_id, total_amount, transaction)

        return InitializePaymentResponse(
            authorization_url=transaction.authorization_url,
            access_code=transaction.access_code,
            reference=transaction.reference,
        )

    async def _record_pending_payment(
        self,
        registration_id: str,
        amount: Decimal,
        transaction: InitializedTransaction,
    ) -> None:
        """Insert the pending payment row.

        A failure here is logged and swallowed: the customer can still pay
        and the row is recreated when the payment is verified.
        """
        payment = EnrollmentPayment(
            registration_id=registration_id,
            payment_reference=transaction.reference,
            payment_provider=self.gateway.settings.provider_name,
            amount=amount,
            currency=self.gateway.settings.currency,
            status=PaymentRecordStatus.PENDING.value,
            payment_metadata={
                "access_code": transaction.access_code,
                "authorization_url": transaction.authorization_url,
            },
        )
        try:
            self.db.add(payment)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                "Error storing payment record: reference=%s, error=%s",
                transaction.reference,
                e,
            )

    # ========== Verify (pull) ==========

    async def verify_payment(self, request: VerifyPaymentRequest) -> VerifyPaymentResponse:
        """Verify a transaction with the gateway and reconcile the registration.

        Args:
            request: Transaction reference.

        Returns:
            Verification outcome with the amount in major units.

        Raises:
            MissingFieldError: If reference is missing.
            PaymentGatewayNotConfiguredError: If no gateway key is configured.
            PaymentGatewayError: If the gateway does not confirm the reference.
            PaymentRegistrationUnresolvedError: If no registration owns the payment.
            RegistrationUpdateError: If the registration update fails.
        """
        reference = (request.reference or "").strip()
        if not reference:
            raise MissingFieldError("Payment reference is required")

        logger.info("Verifying payment reference: %s", reference)

        try:
            transaction = await self.gateway.verify_transaction(reference)
        except PaystackNotConfiguredError as e:
            logger.error("Payment gateway secret key not configured")
            raise PaymentGatewayNotConfiguredError(e.message) from e
        except PaystackError as e:
            raise PaymentGatewayError(e.message) from e

        registration_id = await self._resolve_registration_id(reference, transaction.metadata)
        if not registration_id:
            # Charged at the gateway but unattributable: needs manual review.
            logger.error(
                "Could not find registration_id for reference: %s (gateway status=%s)",
                reference,
                transaction.status,
            )
            raise PaymentRegistrationUnresolvedError("Registration not found for this payment")

        now = utc_now()
        await self._record_outcome(
            reference=reference,
            registration_id=registration_id,
            transaction=transaction,
            extra_metadata={
                "paystack_response": transaction.raw,
                "verified_at": now.isoformat(),
            },
        )

        payment_status: str | None = None
        if transaction.is_successful:
            logger.info("Payment successful, reconciling registration: %s", registration_id)
            try:
                result = await self.reconcile_registration(registration_id)
            except RegistrationNotFoundError as e:
                raise PaymentRegistrationUnresolvedError(
                    "Registration not found for this payment"
                ) from e
            payment_status = result.payment_status

        return VerifyPaymentResponse(
            verified=True,
            payment_successful=transaction.is_successful,
            registration_id=registration_id,
            amount=transaction.amount,
            currency=transaction.currency,
            paid_at=transaction.paid_at,
            payment_status=payment_status,
        )

    # ========== Webhook (push) ==========

    async def handle_webhook(self, body: bytes, signature: str | None) -> WebhookOutcome:
        """Process a gateway webhook.

        The signature is checked against the raw body before anything in it
        is trusted. Only successful charge events change state; everything
        else is acknowledged without writes.

        Args:
            body: Raw request body.
            signature: Signature header value.

        Returns:
            WebhookOutcome describing what was done.

        Raises:
            PaymentGatewayNotConfiguredError: If no gateway key is configured.
            InvalidWebhookSignatureError: If the signature does not match.
            InvalidWebhookPayloadError: If the body is not JSON.
            RegistrationUpdateError: If the registration update fails.
        """
        try:
            secret = self.gateway.secret_key
        except PaystackNotConfiguredError as e:
            logger.error("Payment gateway secret key not configured")
            raise PaymentGatewayNotConfiguredError("Configuration error") from e

        if not verify_signature(secret, body, signature):
            logger.error("Invalid webhook signature")
            raise InvalidWebhookSignatureError("Invalid signature")

        try:
            event = json.loads(body)
        except (ValueError, UnicodeDecodeError) as e:
            raise InvalidWebhookPayloadError("Invalid payload") from e

        event_type = event.get("event") if isinstance(event, dict) else None
        logger.info("Webhook event received: %s", event_type)

        if event_type != SUCCESS_EVENT:
            logger.info("Ignoring non-success event: %s", event_type)
            return WebhookOutcome(processed=False, reason=f"ignored event {event_type}")

        data = event.get("data") or {}
        transaction = VerifiedTransaction.from_payload(data)
        reference = transaction.reference
        if not reference:
            logger.error("Webhook charge without reference")
            return WebhookOutcome(processed=False, reason="missing reference")

        registration_id = await self._resolve_registration_id(reference, transaction.metadata)
        if not registration_id:
            logger.error("No registration for webhook payment: reference=%s", reference)
            return WebhookOutcome(processed=False, reason="registration unresolved")

        logger.info(
            "Processing successful payment: %s for registration: %s",
            reference,
            registration_id,
        )

        recorded = await self._record_outcome(
            reference=reference,
            registration_id=registration_id,
            transaction=transaction,
            extra_metadata={
                "paystack_webhook": data,
                "webhook_received_at": utc_now().isoformat(),
            },
        )

        try:
            result = await self.reconcile_registration(registration_id)
        except RegistrationNotFoundError:
            logger.error(
                "Webhook registration no longer exists: reference=%s, registration=%s",
                reference,
                registration_id,
            )
            return WebhookOutcome(processed=False, reason="registration missing")

        if not recorded and not result.changed:
            logger.info("Webhook for %s changed nothing", reference)
            return WebhookOutcome(processed=False, reason="already recorded", reconciliation=result)

        logger.info("Webhook processed successfully: %s", reference)
        return WebhookOutcome(processed=True, reason="reconciled", reconciliation=result)

    # ========== Reconciliation ==========

    async def reconcile_registration(self, registration_id: str) -> ReconciliationResult:
        """Recompute a registration's payment status from its completed payments.

        Sets ``paid`` when completed payments cover the program total and
        ``partial`` when they cover part of it. The review status becomes
        ``approved`` unless the student is already enrolled. A paid
        registration is never moved back, including under concurrent calls,
        because the update is conditional on the stored status.

        Args:
            registration_id: Registration to reconcile.

        Returns:
            ReconciliationResult.

        Raises:
            RegistrationNotFoundError: If the registration does not exist.
            RegistrationUpdateError: If the update fails.
        """
        registration = await self._get_registration(registration_id)
        if registration is None:
            raise RegistrationNotFoundError("Registration not found")

        completed_total = await self._sum_completed_payments(registration_id)
        total_fee = registration.program.total_fee if registration.program else Decimal(0)
        previous = registration.payment_status

        target_payment_status = determine_payment_status(completed_total, total_fee, previous)
        target_status = next_registration_status(registration.status)

        result = ReconciliationResult(
            registration_id=registration_id,
            completed_total=completed_total,
            total_fee=total_fee,
            previous_status=previous,
            payment_status=target_payment_status,
            status=registration.status,
            changed=False,
        )

        if completed_total <= 0:
            logger.warning("No completed payments for registration: %s", registration_id)
            return result

        if target_payment_status == previous and target_status == registration.status:
            return result

        stmt = update(Registration).where(Registration.id == registration_id)
        if target_payment_status != PaymentStatus.PAID.value:
            stmt = stmt.where(Registration.payment_status != PaymentStatus.PAID.value)
        stmt = stmt.values(payment_status=target_payment_status, status=target_status)

        try:
            outcome = await self.db.execute(stmt)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Error updating registration %s: %s", registration_id, e)
            raise RegistrationUpdateError(
                "Payment verified but failed to update registration"
            ) from e

        if not outcome.rowcount:
            # Lost a race with a writer that already marked it paid.
            logger.info("Registration %s already paid, not downgraded", registration_id)
            result.payment_status = PaymentStatus.PAID.value
            return result

        logger.info(
            "Reconciled registration %s: %s -> %s (completed=%s, total=%s)",
            registration_id,
            previous,
            target_payment_status,
            completed_total,
            total_fee,
        )
        result.status = target_status
        result.changed = True
        return result

    # ========== Private helpers ==========

    async def _record_outcome(
        self,
        reference: str,
        registration_id: str,
        transaction: VerifiedTransaction,
        extra_metadata: dict[str, Any],
    ) -> bool:
        """Move the payment row for a reference to its outcome status.

        A pending row takes either outcome. A failed row can still become
        completed when the gateway later reports the charge as successful;
        a completed row is never changed, so repeats are no-ops. When no row
        exists (the insert at initialization failed) one is created from the
        gateway's data. Failures are logged, not raised.

        Returns:
            True if a row was written.
        """
        if transaction.is_successful:
            target = PaymentRecordStatus.COMPLETED.value
            movable = (PaymentRecordStatus.PENDING.value, PaymentRecordStatus.FAILED.value)
        else:
            target = PaymentRecordStatus.FAILED.value
            movable = (PaymentRecordStatus.PENDING.value,)
        now = utc_now()

        try:
            payment = await self._get_payment_by_reference(reference)
            if payment is None:
                logger.warning(
                    "No payment row for reference %s, recording from gateway data",
                    reference,
                )
                self.db.add(
                    EnrollmentPayment(
                        registration_id=registration_id,
                        payment_reference=reference,
                        payment_provider=self.gateway.settings.provider_name,
                        amount=Decimal(transaction.amount_minor) / 100,
                        currency=transaction.currency or self.gateway.settings.currency,
                        status=target,
                        payment_metadata=extra_metadata,
                        completed_at=now if transaction.is_successful else None,
                    )
                )
            elif payment.status not in movable:
                logger.info(
                    "Payment %s already %s, leaving unchanged",
                    reference,
                    payment.status,
                )
                return False
            else:
                outcome = await self.db.execute(
                    update(EnrollmentPayment)
                    .where(
                        EnrollmentPayment.id == payment.id,
                        EnrollmentPayment.status.in_(movable),
                    )
                    .values(
                        status=target,
                        completed_at=now if transaction.is_successful else None,
                        payment_metadata={**(payment.payment_metadata or {}), **extra_metadata},
                    )
                )
                if not outcome.rowcount:
                    # Settled by a concurrent writer
                    await self.db.rollback()
                    return False
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Error updating payment record %s: %s", reference, e)
            return False
        return True

    async def _resolve_registration_id(self, reference: str, metadata: dict[str, Any]) -> str | None:
        """Registration owning a payment: gateway metadata first, then our row."""
        registration_id = metadata.get("registration_id") if metadata else None
        if registration_id:
            return str(registration_id)

        payment = await self._get_payment_by_reference(reference)
        return payment.registration_id if payment else None

    async def _get_registration(self, registration_id: str) -> Registration | None:
        """Get registration with its program loaded."""
        if not is_uuid(registration_id):
            return None
        result = await self.db.execute(
            select(Registration)
            .options(selectinload(Registration.program))
            .where(Registration.id == registration_id)
        )
        return result.scalar_one_or_none()

    async def _get_payment_by_reference(self, reference: str) -> EnrollmentPayment | None:
        """Get payment row by gateway reference."""
        result = await self.db.execute(
            select(EnrollmentPayment).where(EnrollmentPayment.payment_reference == reference)
        )
        return result.scalar_one_or_none()

    async def _sum_completed_payments(self, registration_id: str) -> Decimal:
        """Sum of completed payment amounts for a registration."""
        result = await self.db.execute(
            select(func.coalesce(func.sum(EnrollmentPayment.amount), 0)).where(
                EnrollmentPayment.registration_id == registration_id,
                EnrollmentPayment.status == PaymentRecordStatus.COMPLETED.value,
            )
        )
        return Decimal(result.scalar() or 0)
