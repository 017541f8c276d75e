# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the time and id helpers."""

from datetime import datetime, timedelta, timezone

import pytest

from academy.domains.payments.service import build_reference
from academy.utils.datetime import days_ago, epoch_millis, utc_now
from academy.utils.ids import is_uuid


class TestDatetime:
    """Tests for UTC helpers."""

    def test_utc_now_is_aware(self) -> None:
        assert utc_now().tzinfo is timezone.utc

    def test_days_ago_from_reference(self) -> None:
        reference = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)
        assert days_ago(7, reference) == datetime(2025, 3, 3, 12, 0, tzinfo=timezone.utc)

    def test_days_ago_naive_reference_treated_as_utc(self) -> None:
        result = days_ago(1, datetime(2025, 3, 10, 0, 0))
        assert result == datetime(2025, 3, 9, 0, 0, tzinfo=timezone.utc)

    def test_days_ago_other_zone_converted(self) -> None:
        lagos = timezone(timedelta(hours=1))
        result = days_ago(2, datetime(2025, 3, 10, 1, 0, tzinfo=lagos))
        assert result == datetime(2025, 3, 8, 0, 0, tzinfo=timezone.utc)

    def test_epoch_millis(self) -> None:
        moment = datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert epoch_millis(moment) == 1704067200000


class TestIsUuid:
    """Tests for is_uuid."""

    def test_canonical(self) -> None:
        assert is_uuid("6f1c2a9e-3b7d-4c1a-9e2f-1a2b3c4d5e6f")

    @pytest.mark.parametrize(
        "value",
        [
            None,
            "",
            "not-a-uuid",
            "6f1c2a9e3b7d4c1a9e2f1a2b3c4d5e6f",
            "6f1c2a9e-3b7d-4c1a-9e2f-1a2b3c4d5e6g",
            12345,
        ],
    )
    def test_rejected(self, value: object) -> None:
        assert is_uuid(value) is False


class TestBuildReference:
    """Tests for gateway reference format."""

    def test_format(self) -> None:
        reference = build_reference("reg-1")
        prefix, _, millis = reference.rpartition("-")
        assert prefix == "ENR-reg-1"
        assert millis.isdigit()
        assert abs(int(millis) - epoch_millis()) < 60_000
