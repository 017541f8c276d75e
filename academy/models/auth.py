# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Identity and access API models."""

from pydantic import BaseModel


class MeResponse(BaseModel):
    """The caller's identity and resolved role."""

    user_id: str
    email: str | None = None
    role: str | None = None
    roles: list[str] = []
    effective_roles: list[str] = []
    dashboard: str


class AccessResponse(BaseModel):
    """Whether the caller may open a page."""

    path: str
    allowed: bool
    redirect_to: str | None = None
