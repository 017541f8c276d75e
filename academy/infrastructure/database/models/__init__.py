# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""ORM models mapped onto the platform's tables."""

from academy.infrastructure.database.models.base import Base
from academy.infrastructure.database.models.identity import Profile, UserRole
from academy.infrastructure.database.models.payment import EnrollmentPayment
from academy.infrastructure.database.models.program import Program
from academy.infrastructure.database.models.registration import Registration
from academy.infrastructure.database.models.setting import CleanupLog, Setting

__all__ = [
    "Base",
    "CleanupLog",
    "EnrollmentPayment",
    "Profile",
    "Program",
    "Registration",
    "Setting",
    "UserRole",
]
