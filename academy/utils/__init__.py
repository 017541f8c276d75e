# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Cross-cutting helpers: logging setup, UTC time and id checks."""

from academy.utils.datetime import days_ago, epoch_millis, utc_now
from academy.utils.ids import is_uuid
from academy.utils.logging import bind_context, clear_context, setup_logging

__all__ = [
    # Logging
    "setup_logging",
    "bind_context",
    "clear_context",
    # Datetime
    "utc_now",
    "days_ago",
    "epoch_millis",
    # Ids
    "is_uuid",
]
