# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain services layer for Academy Backend.

Domains:
    auth: Token verification, role hierarchy and page access rules.
    payments: Gateway initialization, verification, webhooks and reconciliation.
    provisioning: Privileged account creation and credential changes.
    registrations: Public lookup, accountant actions and expiry sweeps.
    settings: Key/value settings with a realtime-updated cache.
    notifications: Transactional emails.
"""
