# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Background job scheduling."""

from academy.infrastructure.background.scheduler import (
    JobScheduler,
    ScheduledTask,
    execute_registration_cleanup,
    get_scheduler,
    start_scheduler,
    stop_scheduler,
)

__all__ = [
    "JobScheduler",
    "ScheduledTask",
    "execute_registration_cleanup",
    "get_scheduler",
    "start_scheduler",
    "stop_scheduler",
]
