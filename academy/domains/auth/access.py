# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Page access rules for the dashboard areas.

Mirrors the browser's route guard so clients can ask the backend whether a
path is reachable and, if not, where to send the user.
"""

from dataclasses import dataclass

from academy.domains.auth.roles import AppRole, effective_roles

LOGIN_PATH = "/auth"
HOME_PATH = "/"

# Path prefix -> roles allowed to open it.
PAGE_RULES: tuple[tuple[str, frozenset[AppRole]], ...] = (
    ("/admin", frozenset({AppRole.ADMIN})),
    ("/accountant", frozenset({AppRole.ACCOUNTANT})),
    ("/teacher", frozenset({AppRole.TEACHER})),
    ("/student", frozenset({AppRole.STUDENT})),
)

DASHBOARD_PATHS: dict[AppRole, str] = {
    AppRole.SUPER_ADMIN: "/admin",
    AppRole.ADMIN: "/admin",
    AppRole.ACCOUNTANT: "/accountant",
    AppRole.TEACHER: "/teacher",
    AppRole.STUDENT: "/student",
}


@dataclass(frozen=True)
class AccessDecision:
    """Outcome of a page access check.

    Attributes:
        allowed: Whether the page may be shown.
        redirect_to: Where to send the user when not allowed.
    """

    allowed: bool
    redirect_to: str | None = None


def _matches(path: str, prefix: str) -> bool:
    return path == prefix or path.startswith(prefix + "/")


def required_roles(path: str) -> frozenset[AppRole] | None:
    """Roles a path requires, or None for public paths."""
    normalized = "/" + path.strip().lstrip("/") if path else HOME_PATH
    for prefix, roles in PAGE_RULES:
        if _matches(normalized, prefix):
            return roles
    return None


def dashboard_for(role: AppRole | None) -> str:
    """Home dashboard for a role."""
    if role is None:
        return HOME_PATH
    return DASHBOARD_PATHS.get(role, HOME_PATH)


def check_page_access(path: str, authenticated: bool, role: AppRole | None) -> AccessDecision:
    """Decide whether a user may open a page.

    Args:
        path: Requested path.
        authenticated: Whether a user is signed in.
        role: The user's highest role.

    Returns:
        AccessDecision with the redirect target when denied.
    """
    required = required_roles(path)
    if required is None:
        return AccessDecision(allowed=True)

    if not authenticated:
        return AccessDecision(allowed=False, redirect_to=LOGIN_PATH)

    if effective_roles(role) & required:
        return AccessDecision(allowed=True)

    return AccessDecision(allowed=False, redirect_to=dashboard_for(role))
