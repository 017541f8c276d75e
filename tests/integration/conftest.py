# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Fixtures for in-process API tests.

The application is built with create_app() but its lifespan is never
entered: the database, Redis and the scheduler stay uninitialized, and the
services each test needs are supplied through dependency_overrides.
"""

from collections.abc import Callable, Generator
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from academy.api import create_app
from academy.api.dependencies import get_app_settings, get_db, get_role_service
from academy.core.config.settings import Settings
from academy.domains.auth.jwt import JWTManager
from academy.domains.auth.roles import AppRole, highest_role


class FakeRoleService:
    """Role lookups served from an in-memory mapping."""

    def __init__(self, roles_by_user: dict[str, list[AppRole]]) -> None:
        self.roles_by_user = roles_by_user

    async def get_roles(self, user_id: str) -> list[AppRole]:
        return list(self.roles_by_user.get(user_id, []))

    async def resolve_role(self, user_id: str) -> AppRole | None:
        return highest_role(self.roles_by_user.get(user_id, []))


@pytest.fixture
def mock_db() -> AsyncMock:
    """Create mock database session."""
    db = AsyncMock()
    db.add = MagicMock()
    return db


@pytest.fixture
def user_roles() -> dict[str, list[AppRole]]:
    """Role rows by user id, filled in by auth_headers."""
    return {}


@pytest.fixture
def app(
    test_settings: Settings,
    mock_db: AsyncMock,
    user_roles: dict[str, list[AppRole]],
) -> Generator[FastAPI, None, None]:
    """Application wired to test settings, a mock session and fake roles."""
    role_service = FakeRoleService(user_roles)

    with patch(
        "academy.api.middleware.auth.get_settings", return_value=test_settings
    ), patch(
        "academy.api.dependencies.RoleService", return_value=role_service
    ):
        application = create_app()

        async def override_get_db():
            yield mock_db

        application.dependency_overrides[get_db] = override_get_db
        application.dependency_overrides[get_app_settings] = lambda: test_settings
        application.dependency_overrides[get_role_service] = lambda: role_service

        yield application

        application.dependency_overrides.clear()


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Test client (lifespan not started)."""
    return TestClient(app)


@pytest.fixture
def auth_headers(
    jwt_manager: JWTManager,
    user_roles: dict[str, list[AppRole]],
) -> Callable[..., dict[str, str]]:
    """Build a bearer header for a user holding the given roles."""

    def _headers(user_id: str, *roles: AppRole, email: str | None = None) -> dict[str, str]:
        user_roles[user_id] = list(roles)
        token = jwt_manager.create_access_token(user_id, email=email)
        return {"Authorization": f"Bearer {token}"}

    return _headers
