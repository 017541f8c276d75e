# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the identity provider admin client."""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from academy.core.config.settings import IdentityProviderSettings
from academy.domains.auth.roles import AppRole
from academy.domains.provisioning import ProvisioningService
from academy.infrastructure.identity import (
    IdentityProviderClient,
    IdentityProviderError,
    UserAlreadyExistsError,
)
from academy.models.provisioning import CreateStaffRequest

ADMIN_PATH = "/auth/v1/admin/users"


class FakeIdentityProvider:
    """In-memory stand-in for the admin users API."""

    def __init__(self, users: list[dict] | None = None) -> None:
        self.users = users or []
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if request.method == "POST" and path == ADMIN_PATH:
            body = json.loads(request.content)
            if any(u["email"].lower() == body["email"].lower() for u in self.users):
                return httpx.Response(
                    422,
                    json={"msg": "A user with this email address has already been registered"},
                )
            user = {
                "id": f"user-{len(self.users) + 1}",
                "email": body["email"],
                "user_metadata": body.get("user_metadata", {}),
            }
            self.users.append(user)
            return httpx.Response(200, json=user)

        if request.method == "GET" and path == ADMIN_PATH:
            page = int(request.url.params["page"])
            per_page = int(request.url.params["per_page"])
            chunk = self.users[(page - 1) * per_page: page * per_page]
            return httpx.Response(200, json={"users": chunk})

        if request.method == "PUT" and path.startswith(ADMIN_PATH + "/"):
            user_id = path.rsplit("/", 1)[-1]
            for user in self.users:
                if user["id"] == user_id:
                    return httpx.Response(200, json=user)
            return httpx.Response(404, json={"msg": "User not found"})

        return httpx.Response(405)


def _client(settings: IdentityProviderSettings, provider: FakeIdentityProvider) -> IdentityProviderClient:
    return IdentityProviderClient(
        settings,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(provider)),
    )


class TestCreateUser:
    """Tests for create_user."""

    @pytest.mark.asyncio
    async def test_create_confirmed_user(self, identity_settings: IdentityProviderSettings) -> None:
        provider = FakeIdentityProvider()
        client = _client(identity_settings, provider)

        user = await client.create_user("ada@example.com", "secret123", "Ada Lovelace")

        assert user.id == "user-1"
        body = json.loads(provider.requests[0].content)
        assert body["email_confirm"] is True
        assert body["user_metadata"] == {"full_name": "Ada Lovelace"}
        assert provider.requests[0].headers["apikey"] == "service-role-key"
        assert provider.requests[0].headers["Authorization"] == "Bearer service-role-key"

    @pytest.mark.asyncio
    async def test_already_registered(self, identity_settings: IdentityProviderSettings) -> None:
        provider = FakeIdentityProvider([{"id": "u1", "email": "ada@example.com"}])
        client = _client(identity_settings, provider)

        with pytest.raises(UserAlreadyExistsError):
            await client.create_user("ada@example.com", "secret123")

    @pytest.mark.asyncio
    async def test_other_error(self, identity_settings: IdentityProviderSettings) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(422, json={"msg": "Password should be at least 6 characters"})

        client = IdentityProviderClient(
            identity_settings,
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        )

        with pytest.raises(IdentityProviderError) as exc_info:
            await client.create_user("ada@example.com", "123")

        assert not isinstance(exc_info.value, UserAlreadyExistsError)
        assert exc_info.value.message == "Password should be at least 6 characters"
        assert exc_info.value.status_code == 422


class TestFindUserByEmail:
    """Tests for paginated lookup."""

    @pytest.mark.asyncio
    async def test_found_on_later_page(self, identity_settings: IdentityProviderSettings) -> None:
        provider = FakeIdentityProvider([
            {"id": "u1", "email": "one@example.com"},
            {"id": "u2", "email": "two@example.com"},
            {"id": "u3", "email": "Three@Example.com"},
        ])
        client = _client(identity_settings, provider)

        user = await client.find_user_by_email("three@example.com")

        assert user is not None
        assert user.id == "u3"
        assert len(provider.requests) == 2

    @pytest.mark.asyncio
    async def test_not_found_stops_after_short_page(
        self,
        identity_settings: IdentityProviderSettings,
    ) -> None:
        provider = FakeIdentityProvider([
            {"id": "u1", "email": "one@example.com"},
            {"id": "u2", "email": "two@example.com"},
        ])
        client = _client(identity_settings, provider)

        assert await client.find_user_by_email("missing@example.com") is None
        # Full page, then an empty page
        assert len(provider.requests) == 2


class TestEnsureUser:
    """Tests for create-or-reuse."""

    @pytest.mark.asyncio
    async def test_creates_new_user(self, identity_settings: IdentityProviderSettings) -> None:
        client = _client(identity_settings, FakeIdentityProvider())

        ensured = await client.ensure_user("new@example.com", "secret123", "New User")

        assert ensured.created is True
        assert ensured.user.email == "new@example.com"

    @pytest.mark.asyncio
    async def test_reuses_existing_and_sets_password(
        self,
        identity_settings: IdentityProviderSettings,
    ) -> None:
        provider = FakeIdentityProvider([{"id": "u9", "email": "old@example.com"}])
        client = _client(identity_settings, provider)

        ensured = await client.ensure_user("old@example.com", "newpass123")

        assert ensured.created is False
        assert ensured.user.id == "u9"
        update = provider.requests[-1]
        assert update.method == "PUT"
        assert update.url.path == f"{ADMIN_PATH}/u9"
        assert json.loads(update.content) == {"password": "newpass123", "email_confirm": True}

    @pytest.mark.asyncio
    async def test_reuses_existing_without_reset(
        self,
        identity_settings: IdentityProviderSettings,
    ) -> None:
        provider = FakeIdentityProvider([{"id": "u9", "email": "old@example.com"}])
        client = _client(identity_settings, provider)

        ensured = await client.ensure_user("old@example.com", "newpass123", reset_password=False)

        assert ensured.created is False
        assert ensured.user.id == "u9"
        assert [r.method for r in provider.requests] == ["POST", "GET"]

    @pytest.mark.asyncio
    async def test_exists_but_not_listed(self, identity_settings: IdentityProviderSettings) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "POST":
                return httpx.Response(422, json={"msg": "User already registered"})
            return httpx.Response(200, json={"users": []})

        client = IdentityProviderClient(
            identity_settings,
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        )

        with pytest.raises(IdentityProviderError, match="User exists but could not be found"):
            await client.ensure_user("ghost@example.com", "secret123")

    @pytest.mark.asyncio
    async def test_transport_failure(self, identity_settings: IdentityProviderSettings) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out")

        client = IdentityProviderClient(
            identity_settings,
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        )

        with pytest.raises(IdentityProviderError) as exc_info:
            await client.ensure_user("a@example.com", "secret123")

        assert exc_info.value.message == "Identity provider unavailable"


class TestUpdateUser:
    """Tests for update_user."""

    @pytest.mark.asyncio
    async def test_user_id_is_a_single_path_segment(
        self,
        identity_settings: IdentityProviderSettings,
    ) -> None:
        provider = FakeIdentityProvider()
        client = _client(identity_settings, provider)

        with pytest.raises(IdentityProviderError):
            await client.update_user("../u1", password="newpass")

        assert provider.requests[0].url.raw_path == f"{ADMIN_PATH}/..%2Fu1".encode()


class TestStaffOnExistingAccount:
    """Staff creation against an identity that already exists."""

    @pytest.mark.asyncio
    async def test_existing_credential_untouched(
        self,
        identity_settings: IdentityProviderSettings,
    ) -> None:
        provider = FakeIdentityProvider([{"id": "u7", "email": "owner@example.com"}])
        db = AsyncMock()
        db.add = MagicMock()
        service = ProvisioningService(db, _client(identity_settings, provider))
        service.roles = MagicMock()
        service.roles.assign_role = AsyncMock(return_value=True)

        with patch.object(service, "_upsert_profile", AsyncMock()):
            response = await service.create_staff(
                CreateStaffRequest(
                    email="owner@example.com",
                    password="admin-chosen",
                    full_name="Someone Else",
                    role="teacher",
                ),
                [AppRole.ADMIN],
            )

        assert response.user_id == "u7"
        assert "PUT" not in [r.method for r in provider.requests]
        service.roles.assign_role.assert_awaited_once_with("u7", AppRole.TEACHER)
