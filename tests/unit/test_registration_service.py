# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for RegistrationService."""

from datetime import timedelta
from decimal import Decimal
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.dialects import postgresql

from academy.domains.registrations.service import (
    InvalidRegistrationIdError,
    MissingRegistrationIdError,
    RegistrationNotFoundError,
    RegistrationService,
    parse_expiry_days,
)
from academy.infrastructure.database.models import CleanupLog, Program, Registration
from academy.models.registrations import PublicRegistrationRequest
from academy.utils.datetime import utc_now


@pytest.fixture
def mock_db() -> AsyncMock:
    """Create mock database session."""
    db = AsyncMock()
    db.add = MagicMock()
    return db


@pytest.fixture
def service(mock_db: AsyncMock) -> RegistrationService:
    return RegistrationService(mock_db)


def scalar_result(value: Any) -> MagicMock:
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    return result


class TestParseExpiryDays:
    """Tests for parse_expiry_days."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (14, 14),
            (3.9, 3),
            ("10", 10),
            ("5 days", 5),
            (None, 7),
            ("soon", 7),
            (0, 7),
            (-2, 7),
            ("-3", 7),
            (True, 7),
        ],
    )
    def test_values(self, value: Any, expected: int) -> None:
        assert parse_expiry_days(value) == expected

    def test_custom_default(self) -> None:
        assert parse_expiry_days(None, default=30) == 30


class TestPublicRegistration:
    """Tests for get_public_registration."""

    @pytest.mark.asyncio
    async def test_missing_id(self, service: RegistrationService) -> None:
        with pytest.raises(MissingRegistrationIdError):
            await service.get_public_registration(PublicRegistrationRequest(registration_id=" "))

    @pytest.mark.asyncio
    async def test_invalid_id(self, service: RegistrationService, mock_db: AsyncMock) -> None:
        with pytest.raises(InvalidRegistrationIdError):
            await service.get_public_registration(
                PublicRegistrationRequest(registration_id="not-a-uuid")
            )

        mock_db.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_not_found(
        self,
        service: RegistrationService,
        mock_db: AsyncMock,
        sample_registration_id: str,
    ) -> None:
        mock_db.execute.return_value = scalar_result(None)

        with pytest.raises(RegistrationNotFoundError):
            await service.get_public_registration(
                PublicRegistrationRequest(registration_id=sample_registration_id)
            )

    @pytest.mark.asyncio
    async def test_found(
        self,
        service: RegistrationService,
        mock_db: AsyncMock,
        sample_registration_id: str,
        sample_program_data: dict[str, Any],
    ) -> None:
        registration = Registration(
            id=sample_registration_id,
            first_name="Ada",
            last_name="Lovelace",
            email="ada@example.com",
            program_id=sample_program_data["id"],
            payment_status="pending",
            status="submitted",
            account_created=False,
        )
        registration.program = Program(
            id=sample_program_data["id"],
            name=sample_program_data["name"],
            tuition_fee=Decimal("100000"),
            registration_fee=None,
        )
        mock_db.execute.return_value = scalar_result(registration)

        response = await service.get_public_registration(
            PublicRegistrationRequest(registration_id=sample_registration_id)
        )

        public = response.registration
        assert public.id == sample_registration_id
        assert public.account_created is False
        assert public.programs is not None
        assert public.programs.name == "Software Engineering"
        assert public.programs.tuition_fee == 100000.0
        assert public.programs.registration_fee is None


class TestMarkPaid:
    """Tests for mark_paid."""

    @pytest.mark.asyncio
    async def test_marks_paid(
        self,
        service: RegistrationService,
        mock_db: AsyncMock,
        sample_registration_id: str,
    ) -> None:
        mock_db.execute.return_value = MagicMock(rowcount=1)

        response = await service.mark_paid(sample_registration_id, actor_id="acct-1")

        assert response.payment_status == "paid"
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unknown_registration(
        self,
        service: RegistrationService,
        mock_db: AsyncMock,
        sample_registration_id: str,
    ) -> None:
        mock_db.execute.return_value = MagicMock(rowcount=0)

        with pytest.raises(RegistrationNotFoundError):
            await service.mark_paid(sample_registration_id, actor_id="acct-1")

        mock_db.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_malformed_id(self, service: RegistrationService, mock_db: AsyncMock) -> None:
        with pytest.raises(RegistrationNotFoundError):
            await service.mark_paid("abc", actor_id="acct-1")

        mock_db.execute.assert_not_awaited()


class TestCleanupExpiredRegistrations:
    """Tests for cleanup_expired_registrations."""

    @pytest.mark.asyncio
    async def test_deletes_and_logs(self, service: RegistrationService, mock_db: AsyncMock) -> None:
        deleted = MagicMock()
        deleted.scalars.return_value.all.return_value = ["id-1", "id-2"]
        mock_db.execute.return_value = deleted

        with patch.object(service, "_get_setting_value", AsyncMock(return_value="3")):
            result = await service.cleanup_expired_registrations()

        assert result.records_deleted == 2
        assert result.deadline_days == 3
        assert result.deleted_ids == ["id-1", "id-2"]
        assert abs((utc_now() - timedelta(days=3)) - result.cutoff) < timedelta(minutes=1)

        log = mock_db.add.call_args.args[0]
        assert isinstance(log, CleanupLog)
        assert log.records_deleted == 2
        assert log.details["deadline_days"] == 3
        assert log.details["deleted_ids"] == ["id-1", "id-2"]
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_nothing_expired_still_logged(
        self,
        service: RegistrationService,
        mock_db: AsyncMock,
    ) -> None:
        deleted = MagicMock()
        deleted.scalars.return_value.all.return_value = []
        mock_db.execute.return_value = deleted

        with patch.object(service, "_get_setting_value", AsyncMock(return_value=None)):
            result = await service.cleanup_expired_registrations(default_expiry_days=10)

        assert result.records_deleted == 0
        assert result.deadline_days == 10
        mock_db.add.assert_called_once()

    @pytest.mark.asyncio
    async def test_deletes_only_stale_unlinked_pending(
        self,
        service: RegistrationService,
        mock_db: AsyncMock,
    ) -> None:
        deleted = MagicMock()
        deleted.scalars.return_value.all.return_value = []
        mock_db.execute.return_value = deleted

        with patch.object(service, "_get_setting_value", AsyncMock(return_value="7")):
            result = await service.cleanup_expired_registrations()

        statement = mock_db.execute.await_args.args[0]
        compiled = statement.compile(dialect=postgresql.dialect())
        sql = str(compiled)
        assert sql.startswith("DELETE FROM student_registrations")
        assert "student_registrations.payment_status = %(payment_status_1)s" in sql
        assert "student_registrations.user_id IS NULL" in sql
        assert "student_registrations.created_at < %(created_at_1)s" in sql
        assert "RETURNING student_registrations.id" in sql
        assert compiled.params["payment_status_1"] == "pending"
        assert compiled.params["created_at_1"] == result.cutoff
