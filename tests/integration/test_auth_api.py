# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Integration tests for identity and page access endpoints."""

from collections.abc import Callable

import pytest
from fastapi.testclient import TestClient

from academy.domains.auth.roles import AppRole

USER_ID = "550e8400-e29b-41d4-a716-446655440501"


class TestMe:
    """Tests for GET /api/v1/auth/me."""

    def test_requires_token(self, client: TestClient) -> None:
        response = client.get("/api/v1/auth/me")

        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"

    def test_highest_role_wins(
        self,
        client: TestClient,
        auth_headers: Callable[..., dict[str, str]],
    ) -> None:
        response = client.get(
            "/api/v1/auth/me",
            headers=auth_headers(USER_ID, AppRole.STUDENT, AppRole.TEACHER, email="t@example.com"),
        )

        assert response.status_code == 200
        body = response.json()
        assert body["user_id"] == USER_ID
        assert body["email"] == "t@example.com"
        assert body["role"] == "teacher"
        assert body["dashboard"] == "/teacher"

    def test_super_admin_effective_roles(
        self,
        client: TestClient,
        auth_headers: Callable[..., dict[str, str]],
    ) -> None:
        response = client.get("/api/v1/auth/me", headers=auth_headers(USER_ID, AppRole.SUPER_ADMIN))

        body = response.json()
        assert body["effective_roles"] == ["super_admin", "admin", "accountant"]
        assert body["dashboard"] == "/admin"

    def test_no_roles(self, client: TestClient, auth_headers: Callable[..., dict[str, str]]) -> None:
        response = client.get("/api/v1/auth/me", headers=auth_headers(USER_ID))

        body = response.json()
        assert body["role"] is None
        assert body["dashboard"] == "/"


class TestAccess:
    """Tests for GET /api/v1/auth/access."""

    def test_public_page(self, client: TestClient) -> None:
        response = client.get("/api/v1/auth/access", params={"path": "/programs"})

        assert response.json() == {"path": "/programs", "allowed": True, "redirect_to": None}

    def test_anonymous_redirected_to_login(self, client: TestClient) -> None:
        response = client.get("/api/v1/auth/access", params={"path": "/admin/payments"})

        body = response.json()
        assert body["allowed"] is False
        assert body["redirect_to"] == "/auth"

    @pytest.mark.parametrize(
        ("role", "path", "allowed", "redirect_to"),
        [
            (AppRole.SUPER_ADMIN, "/accountant", True, None),
            (AppRole.ADMIN, "/accountant/payments", False, "/admin"),
            (AppRole.STUDENT, "/student", True, None),
            (AppRole.TEACHER, "/admin", False, "/teacher"),
        ],
    )
    def test_role_checks(
        self,
        client: TestClient,
        auth_headers: Callable[..., dict[str, str]],
        role: AppRole,
        path: str,
        allowed: bool,
        redirect_to: str | None,
    ) -> None:
        response = client.get(
            "/api/v1/auth/access",
            params={"path": path},
            headers=auth_headers(USER_ID, role),
        )

        body = response.json()
        assert body["allowed"] is allowed
        assert body["redirect_to"] == redirect_to

    def test_path_required(self, client: TestClient) -> None:
        response = client.get("/api/v1/auth/access")

        assert response.status_code == 400
