# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Identity and page access endpoints.

The dashboard asks these endpoints which role the signed-in user has and
whether a page may be shown, instead of deciding from role strings itself.
"""

import logging

from fastapi import APIRouter, Depends, Query

from academy.api.dependencies import AuthenticatedUser, OptionalUser, get_role_service
from academy.domains.auth import RoleService, check_page_access, dashboard_for
from academy.domains.auth.roles import ROLE_PRIORITY
from academy.models.auth import AccessResponse, MeResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/me", response_model=MeResponse, summary="Current user")
async def get_me(caller: AuthenticatedUser) -> MeResponse:
    """The caller's roles and home dashboard."""
    role = caller.role
    effective = sorted(caller.effective_roles, key=ROLE_PRIORITY.__getitem__, reverse=True)
    return MeResponse(
        user_id=caller.id,
        email=caller.email,
        role=role.value if role else None,
        roles=[r.value for r in caller.roles],
        effective_roles=[r.value for r in effective],
        dashboard=dashboard_for(role),
    )


@router.get("/access", response_model=AccessResponse, summary="Check page access")
async def check_access(
    caller: OptionalUser,
    path: str = Query(..., description="Page path, e.g. /admin/payments"),
    roles: RoleService = Depends(get_role_service),
) -> AccessResponse:
    """Decide whether the caller may open a page, and where to go if not."""
    role = await roles.resolve_role(caller.id) if caller else None
    decision = check_page_access(path, authenticated=caller is not None, role=role)
    return AccessResponse(path=path, allowed=decision.allowed, redirect_to=decision.redirect_to)
