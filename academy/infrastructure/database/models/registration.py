# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student registration model."""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, ForeignKey, String, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from academy.infrastructure.database.models.base import Base

if TYPE_CHECKING:
    from academy.infrastructure.database.models.program import Program


class Registration(Base):
    """A prospective or enrolled student's record.

    Anchor entity for payment and account provisioning state. Invariant:
    ``account_created`` is only set together with ``user_id``.
    """

    __tablename__ = "student_registrations"

    id: Mapped[str] = mapped_column(UUID(as_uuid=False), primary_key=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    program_id: Mapped[str | None] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("programs.id"),
        nullable=True,
    )
    payment_status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    payment_plan: Mapped[str | None] = mapped_column(String(20), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="submitted")
    account_created: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    user_id: Mapped[str | None] = mapped_column(UUID(as_uuid=False), nullable=True)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)

    program: Mapped["Program | None"] = relationship(lazy="raise")

    @property
    def full_name(self) -> str:
        """First and last name joined by a space."""
        return f"{self.first_name} {self.last_name}".strip()
