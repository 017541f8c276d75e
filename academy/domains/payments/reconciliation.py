# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pure rules for deriving a registration's payment state.

The aggregate ``payment_status`` is recomputed from the completed payment
rows and the program total every time, so applying it twice gives the same
answer. ``paid`` is terminal: no recomputation moves a registration out of
it.
"""

from decimal import Decimal

from academy.models.common import PaymentStatus, RegistrationStatus


def determine_payment_status(
    completed_total: Decimal,
    total_fee: Decimal,
    current: str | None,
) -> str:
    """Payment status implied by the completed payments.

    Args:
        completed_total: Sum of completed payment amounts.
        total_fee: Program tuition plus registration fee.
        current: Stored payment status.

    Returns:
        ``paid`` when the total is covered, ``partial`` when something was
        paid, otherwise the current status unchanged.
    """
    if current == PaymentStatus.PAID.value:
        return PaymentStatus.PAID.value

    completed_total = Decimal(completed_total or 0)
    if completed_total <= 0:
        return current or PaymentStatus.PENDING.value

    if completed_total >= Decimal(total_fee or 0):
        return PaymentStatus.PAID.value
    return PaymentStatus.PARTIAL.value


def next_registration_status(current: str | None) -> str:
    """Review status after a successful payment.

    Enrolled students stay enrolled; everyone else becomes approved.
    """
    if current == RegistrationStatus.ENROLLED.value:
        return current
    return RegistrationStatus.APPROVED.value

