# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Registration service.

This module provides the RegistrationService class for:
- Public lookup of a registration on the enrollment completion page
- Accountant confirmation of offline payments
- Sweeping expired, unpaid and unlinked registrations
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from academy.infrastructure.database.models import CleanupLog, Registration, Setting
from academy.models.common import PaymentStatus
from academy.models.registrations import (
    MarkPaidResponse,
    PublicProgramInfo,
    PublicRegistration,
    PublicRegistrationRequest,
    PublicRegistrationResponse,
)
from academy.utils.datetime import days_ago
from academy.utils.ids import is_uuid

logger = logging.getLogger(__name__)

EXPIRY_SETTING_KEY = "registration_expiry_days"
DEFAULT_EXPIRY_DAYS = 7

_LEADING_INT = re.compile(r"^\s*(-?\d+)")


class RegistrationServiceError(Exception):
    """Base exception for registration service errors."""

    pass


class MissingRegistrationIdError(RegistrationServiceError):
    """Raised when no registration id was supplied."""

    pass


class InvalidRegistrationIdError(RegistrationServiceError):
    """Raised when the registration id is not a UUID."""

    pass


class RegistrationNotFoundError(RegistrationServiceError):
    """Raised when the registration does not exist."""

    pass


@dataclass
class CleanupResult:
    """Outcome of one expired-registration sweep.

    Attributes:
        records_deleted: Number of registrations removed.
        deadline_days: Expiry window used.
        cutoff: Registrations created before this were eligible.
        deleted_ids: Ids removed.
    """

    records_deleted: int
    deadline_days: int
    cutoff: datetime
    deleted_ids: list[str] = field(default_factory=list)


def parse_expiry_days(value: Any, default: int = DEFAULT_EXPIRY_DAYS) -> int:
    """Read the expiry window from a stored setting value.

    Numbers are used as-is and strings by their leading integer. Anything
    missing, unparseable or not positive falls back to ``default``.
    """
    if value is None or isinstance(value, bool):
        return default

    if isinstance(value, (int, float)):
        days = int(value)
    else:
        match = _LEADING_INT.match(str(value))
        if not match:
            return default
        days = int(match.group(1))

    return days if days > 0 else default


class RegistrationService:
    """Service for registration lookups and maintenance.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_public_registration(
        self,
        request: PublicRegistrationRequest,
    ) -> PublicRegistrationResponse:
        """Look up the fields the enrollment completion page needs.

        Raises:
            MissingRegistrationIdError: If no id was supplied.
            InvalidRegistrationIdError: If the id is not a UUID.
            RegistrationNotFoundError: If the registration does not exist.
        """
        registration_id = (request.registration_id or "").strip()
        if not registration_id:
            raise MissingRegistrationIdError("registration_id is required")

        if not is_uuid(registration_id):
            raise InvalidRegistrationIdError("Invalid registration_id format")

        result = await self.db.execute(
            select(Registration)
            .options(selectinload(Registration.program))
            .where(Registration.id == registration_id)
        )
        registration = result.scalar_one_or_none()
        if registration is None:
            raise RegistrationNotFoundError("Registration not found")

        program = registration.program
        return PublicRegistrationResponse(
            registration=PublicRegistration(
                id=registration.id,
                first_name=registration.first_name,
                last_name=registration.last_name,
                email=registration.email,
                program_id=registration.program_id,
                payment_status=registration.payment_status,
                account_created=bool(registration.account_created),
                programs=PublicProgramInfo(
                    name=program.name,
                    tuition_fee=float(program.tuition_fee or 0),
                    registration_fee=(
                        float(program.registration_fee)
                        if program.registration_fee is not None
                        else None
                    ),
                )
                if program
                else None,
            )
        )

    async def mark_paid(self, registration_id: str, actor_id: str) -> MarkPaidResponse:
        """Record an offline payment by marking the registration paid.

        Args:
            registration_id: Registration to update.
            actor_id: Staff member performing the change.

        Raises:
            RegistrationNotFoundError: If the registration does not exist.
        """
        if not is_uuid(registration_id):
            raise RegistrationNotFoundError("Registration not found")

        result = await self.db.execute(
            update(Registration)
            .where(Registration.id == registration_id)
            .values(payment_status=PaymentStatus.PAID.value)
        )
        if not result.rowcount:
            await self.db.rollback()
            raise RegistrationNotFoundError("Registration not found")

        await self.db.commit()

        logger.info("Registration marked paid: registration=%s, by=%s", registration_id, actor_id)
        return MarkPaidResponse(
            registration_id=registration_id,
            payment_status=PaymentStatus.PAID.value,
        )

    async def cleanup_expired_registrations(
        self,
        default_expiry_days: int = DEFAULT_EXPIRY_DAYS,
    ) -> CleanupResult:
        """Delete pending, unlinked registrations older than the expiry window.

        The delete is a single statement; the audit row is written in the
        same transaction, once per run, even when nothing was deleted.

        Args:
            default_expiry_days: Used when the setting is absent or invalid.

        Returns:
            CleanupResult with the deleted ids.
        """
        deadline_days = parse_expiry_days(
            await self._get_setting_value(EXPIRY_SETTING_KEY),
            default=default_expiry_days,
        )
        cutoff = days_ago(deadline_days)

        result = await self.db.execute(
            delete(Registration)
            .where(
                Registration.payment_status == PaymentStatus.PENDING.value,
                Registration.user_id.is_(None),
                Registration.created_at < cutoff,
            )
            .returning(Registration.id)
        )
        deleted_ids = [str(row_id) for row_id in result.scalars().all()]

        self.db.add(
            CleanupLog(
                records_deleted=len(deleted_ids),
                details={
                    "deadline_days": deadline_days,
                    "cutoff_date": cutoff.isoformat(),
                    "deleted_ids": deleted_ids,
                },
            )
        )
        await self.db.commit()

        logger.info(
            "Expired registration cleanup: deleted=%d, deadline_days=%d, cutoff=%s",
            len(deleted_ids),
            deadline_days,
            cutoff.isoformat(),
        )
        return CleanupResult(
            records_deleted=len(deleted_ids),
            deadline_days=deadline_days,
            cutoff=cutoff,
            deleted_ids=deleted_ids,
        )

    async def _get_setting_value(self, key: str) -> Any:
        """Get a raw setting value, or None."""
        result = await self.db.execute(select(Setting.value).where(Setting.key == key))
        return result.scalar_one_or_none()
