# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Notifications domain: scholarship decision emails."""

from academy.domains.notifications.service import (
    EmailServiceUnavailableError,
    MissingEmailFieldsError,
    NotificationService,
    NotificationServiceError,
)
from academy.domains.notifications.templates import (
    RenderedEmail,
    render_approved,
    render_rejected,
    render_scholarship_email,
)

__all__ = [
    "EmailServiceUnavailableError",
    "MissingEmailFieldsError",
    "NotificationService",
    "NotificationServiceError",
    "RenderedEmail",
    "render_approved",
    "render_rejected",
    "render_scholarship_email",
]
