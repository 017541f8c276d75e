# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Application roles and the role hierarchy.

Every authorization decision in the service goes through the pure functions
in this module. A user may hold several role rows; the single role that
represents the user is the highest by priority, and ``super_admin`` also
acts as ``admin`` and ``accountant``.

Example:
    >>> satisfies([AppRole.SUPER_ADMIN], {AppRole.ACCOUNTANT})
    True
    >>> highest_role(["student", "teacher"])
    <AppRole.TEACHER: 'teacher'>
"""

from enum import Enum
from typing import Iterable


class AppRole(str, Enum):
    """Closed set of roles a user can hold."""

    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    ACCOUNTANT = "accountant"
    TEACHER = "teacher"
    STUDENT = "student"


# Higher value wins when a user holds several roles.
ROLE_PRIORITY: dict[AppRole, int] = {
    AppRole.SUPER_ADMIN: 50,
    AppRole.ADMIN: 40,
    AppRole.ACCOUNTANT: 30,
    AppRole.TEACHER: 20,
    AppRole.STUDENT: 10,
}

_INHERITED: dict[AppRole, frozenset[AppRole]] = {
    AppRole.SUPER_ADMIN: frozenset({AppRole.SUPER_ADMIN, AppRole.ADMIN, AppRole.ACCOUNTANT}),
}

# Roles create-staff may assign.
STAFF_ROLES: frozenset[AppRole] = frozenset(
    {AppRole.SUPER_ADMIN, AppRole.ADMIN, AppRole.TEACHER, AppRole.ACCOUNTANT}
)

ADMIN_ROLES: frozenset[AppRole] = frozenset({AppRole.ADMIN})


def parse_role(value: "str | AppRole | None") -> AppRole | None:
    """Convert a stored role string into an AppRole.

    Unknown values and None map to None.
    """
    if value is None:
        return None
    if isinstance(value, AppRole):
        return value
    try:
        return AppRole(value.strip().lower())
    except ValueError:
        return None


def parse_roles(values: Iterable["str | AppRole | None"]) -> list[AppRole]:
    """Parse role strings, dropping unknown values and duplicates."""
    roles: list[AppRole] = []
    for value in values:
        role = parse_role(value)
        if role is not None and role not in roles:
            roles.append(role)
    return roles


def highest_role(roles: Iterable["str | AppRole | None"]) -> AppRole | None:
    """Pick the single representative role of a user."""
    parsed = parse_roles(roles)
    if not parsed:
        return None
    return max(parsed, key=lambda r: ROLE_PRIORITY[r])


def effective_roles(role: "str | AppRole | None") -> frozenset[AppRole]:
    """Roles a holder of ``role`` acts as.

    ``super_admin`` also acts as ``admin`` and ``accountant``; every other
    role only acts as itself.
    """
    parsed = parse_role(role)
    if parsed is None:
        return frozenset()
    return _INHERITED.get(parsed, frozenset({parsed}))


def effective_roles_for(roles: Iterable["str | AppRole | None"]) -> frozenset[AppRole]:
    """Union of effective roles across every role a user holds."""
    result: set[AppRole] = set()
    for role in roles:
        result |= effective_roles(role)
    return frozenset(result)


def satisfies(roles: Iterable["str | AppRole | None"], required: Iterable["str | AppRole"]) -> bool:
    """Check whether any held role satisfies any required role."""
    required_set = set(parse_roles(required))
    if not required_set:
        return True
    return bool(effective_roles_for(roles) & required_set)


def can_assign_role(caller_roles: Iterable["str | AppRole | None"], target: "str | AppRole") -> bool:
    """Check whether a caller may grant ``target`` to another user.

    Only a super_admin may grant super_admin. Other staff roles need a
    caller that acts as admin.
    """
    target_role = parse_role(target)
    if target_role is None or target_role not in STAFF_ROLES:
        return False

    held = list(caller_roles)
    if target_role == AppRole.SUPER_ADMIN:
        return AppRole.SUPER_ADMIN in parse_roles(held)
    return satisfies(held, ADMIN_ROLES)
