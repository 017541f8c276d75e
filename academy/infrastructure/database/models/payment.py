# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment payment model: one row per gateway transaction attempt."""

from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import ForeignKey, Numeric, String, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from academy.infrastructure.database.models.base import Base


class EnrollmentPayment(Base):
    """A single payment attempt against a registration.

    ``payment_reference`` is unique per attempt. Several rows may exist for
    one registration (retries and installments). ``status`` moves from
    ``pending`` to ``completed`` or ``failed`` once.
    """

    __tablename__ = "enrollment_payments"

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        primary_key=True,
        server_default=func.gen_random_uuid(),
    )
    registration_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("student_registrations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    payment_reference: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    payment_provider: Mapped[str] = mapped_column(String(50), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="NGN")
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    # Python attribute renamed: "metadata" is reserved on declarative classes
    payment_metadata: Mapped[dict[str, Any] | None] = mapped_column("metadata", nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(nullable=True)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)
