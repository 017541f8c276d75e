# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API v1 routes package.

Modules:
    auth: Current user and page access checks.
    payments: Payment initialize, verify and webhook.
    provisioning: Bootstrap admin, staff, student accounts and passwords.
    registrations: Public lookup, mark-paid and expired cleanup.
    settings: Academy settings read-through and writes.
    notifications: Scholarship decision emails.
"""

from fastapi import APIRouter

from academy.api.v1 import auth, notifications, payments, provisioning, registrations, settings

# Create the main v1 router
router = APIRouter(prefix="/api/v1")

# Include domain routers
router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
router.include_router(payments.router, prefix="/payments", tags=["Payments"])
router.include_router(provisioning.router, prefix="/provisioning", tags=["Provisioning"])
router.include_router(registrations.router, prefix="/registrations", tags=["Registrations"])
router.include_router(settings.router, prefix="/settings", tags=["Settings"])
router.include_router(notifications.router, prefix="/notifications", tags=["Notifications"])

__all__ = ["router"]
