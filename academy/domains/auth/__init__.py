# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication and authorization domain.

Exports:
    AppRole: Closed role enumeration.
    JWTManager: Access token verification.
    RoleService: Role lookup and assignment.
    check_page_access: Dashboard route guard.
"""

from academy.domains.auth.access import AccessDecision, check_page_access, dashboard_for
from academy.domains.auth.jwt import JWTManager
from academy.domains.auth.roles import (
    AppRole,
    can_assign_role,
    effective_roles,
    highest_role,
    satisfies,
)
from academy.domains.auth.service import RoleService

__all__ = [
    "AccessDecision",
    "AppRole",
    "JWTManager",
    "RoleService",
    "can_assign_role",
    "check_page_access",
    "dashboard_for",
    "effective_roles",
    "highest_role",
    "satisfies",
]
