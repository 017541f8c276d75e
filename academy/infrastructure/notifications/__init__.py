# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Outbound notification delivery."""

from academy.infrastructure.notifications.email import (
    EmailClient,
    EmailDeliveryError,
    EmailNotConfiguredError,
)

__all__ = [
    "EmailClient",
    "EmailDeliveryError",
    "EmailNotConfiguredError",
]
