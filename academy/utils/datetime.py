# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""UTC helpers.

Database columns are TIMESTAMPTZ; every datetime produced here is aware.
"""

from datetime import datetime, timedelta, timezone


def utc_now() -> datetime:
    """Current time in UTC."""
    return datetime.now(timezone.utc)


def days_ago(days: int, reference: datetime | None = None) -> datetime:
    """The instant ``days`` whole days before ``reference`` (default: now).

    A naive ``reference`` is taken to be UTC.
    """
    if reference is None:
        reference = utc_now()
    elif reference.tzinfo is None:
        reference = reference.replace(tzinfo=timezone.utc)
    return reference.astimezone(timezone.utc) - timedelta(days=days)


def epoch_millis(moment: datetime | None = None) -> int:
    """Milliseconds since the Unix epoch, as used in gateway references."""
    return int((moment or utc_now()).timestamp() * 1000)
