# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across all test types:
- Unit tests
- Integration tests
"""

from collections.abc import Generator
from typing import Any

import pytest
from pydantic import SecretStr

from academy.core.config.settings import (
    BootstrapSettings,
    EmailSettings,
    IdentityProviderSettings,
    JWTSettings,
    PaystackSettings,
    Settings,
)
from academy.domains.auth.jwt import JWTManager

TEST_JWT_SECRET = "test-secret-key-for-testing-only"
TEST_PAYSTACK_SECRET = "sk_test_0123456789abcdef"


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test (in-process app)"
    )


# =============================================================================
# Settings Fixtures
# =============================================================================


@pytest.fixture
def jwt_settings() -> JWTSettings:
    """JWT settings with a known secret."""
    return JWTSettings(secret_key=SecretStr(TEST_JWT_SECRET))


@pytest.fixture
def paystack_settings() -> PaystackSettings:
    """Gateway settings with a test secret key."""
    return PaystackSettings(
        secret_key=SecretStr(TEST_PAYSTACK_SECRET),
        base_url="https://api.paystack.test",
    )


@pytest.fixture
def identity_settings() -> IdentityProviderSettings:
    """Identity provider settings pointing at a fake host."""
    return IdentityProviderSettings(
        url="https://identity.test",
        service_role_key=SecretStr("service-role-key"),
        admin_page_size=2,
    )


@pytest.fixture
def email_settings() -> EmailSettings:
    """Email settings with an API key."""
    return EmailSettings(api_key=SecretStr("re_test_key"))


@pytest.fixture
def test_settings(
    jwt_settings: JWTSettings,
    paystack_settings: PaystackSettings,
    identity_settings: IdentityProviderSettings,
    email_settings: EmailSettings,
) -> Settings:
    """Full application settings for tests."""
    return Settings(
        environment="development",
        debug=True,
        jwt=jwt_settings,
        paystack=paystack_settings,
        identity=identity_settings,
        email=email_settings,
        bootstrap=BootstrapSettings(admin_secret=SecretStr("setup-secret")),
    )


@pytest.fixture
def jwt_manager(jwt_settings: JWTSettings) -> JWTManager:
    """JWT manager signing with the test secret."""
    return JWTManager(jwt_settings)


# =============================================================================
# Global State
# =============================================================================


@pytest.fixture(autouse=True)
def disable_rate_limits() -> Generator[None, None, None]:
    """Turn the slowapi limiter off so repeated calls are not throttled."""
    from academy.api.middleware.rate_limit import limiter

    limiter.enabled = False
    yield
    limiter.enabled = True


@pytest.fixture(autouse=True)
def fresh_settings_cache() -> Generator[None, None, None]:
    """Each test starts with an unseeded process settings cache."""
    from academy.domains.settings import reset_settings_cache

    reset_settings_cache()
    yield
    reset_settings_cache()


# =============================================================================
# Helper Fixtures
# =============================================================================


@pytest.fixture
def sample_registration_id() -> str:
    """Provide a sample registration ID for testing."""
    return "550e8400-e29b-41d4-a716-446655440001"


@pytest.fixture
def sample_user_id() -> str:
    """Provide a sample identity provider user ID for testing."""
    return "550e8400-e29b-41d4-a716-446655440099"


@pytest.fixture
def sample_program_data() -> dict[str, Any]:
    """Provide sample program fee data."""
    return {
        "id": "550e8400-e29b-41d4-a716-446655440010",
        "name": "Software Engineering",
        "tuition_fee": 100000,
        "registration_fee": 5000,
    }
