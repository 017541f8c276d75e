# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Training program model (read-only from this service)."""

from decimal import Decimal

from sqlalchemy import Numeric, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from academy.infrastructure.database.models.base import Base


class Program(Base):
    """A training program and its fees.

    Attributes:
        id: Program identifier.
        name: Display name.
        tuition_fee: Tuition in major currency units.
        registration_fee: Optional one-off registration fee.
    """

    __tablename__ = "programs"

    id: Mapped[str] = mapped_column(UUID(as_uuid=False), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    tuition_fee: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    registration_fee: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)

    @property
    def total_fee(self) -> Decimal:
        """Tuition plus registration fee (absent fee counts as zero)."""
        return Decimal(self.tuition_fee or 0) + Decimal(self.registration_fee or 0)
