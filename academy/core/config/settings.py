# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Environment-driven configuration.

Each concern has its own BaseSettings class and env prefix (``DB_``,
``PAYSTACK_``, ``CLEANUP_`` ...). ``Settings`` nests them all and is read
once per process through get_settings().
"""

from functools import lru_cache
from typing import Literal, Self

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_DEFAULT_JWT_SECRET = "change-this-in-production"


class DatabaseSettings(BaseSettings):
    """Connection settings for the platform's Postgres database.

    The schema is owned by the hosting platform; this service only reads
    and writes rows through the service-role connection.

    Attributes:
        user: PostgreSQL username.
        password: PostgreSQL password.
        host: Database host address.
        port: Database port number.
        database: Database name.
        pool_size: Connection pool size.
        max_overflow: Maximum overflow connections.
    """

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        extra="ignore",
    )

    user: str = "postgres"
    password: SecretStr = SecretStr("postgres")
    host: str = "localhost"
    port: int = 5432
    database: str = "postgres"
    pool_size: int = 5
    max_overflow: int = 10

    @property
    def url(self) -> str:
        """Build the async database URL from components."""
        pwd = self.password.get_secret_value()
        return f"postgresql+asyncpg://{self.user}:{pwd}@{self.host}:{self.port}/{self.database}"


class IdentityProviderSettings(BaseSettings):
    """Identity provider (auth admin API) configuration.

    Attributes:
        url: Base URL of the hosting platform.
        service_role_key: Privileged key used for admin user operations.
        anon_key: Public key sent alongside user requests.
        timeout: Request timeout in seconds.
        admin_page_size: Page size when listing users.
    """

    model_config = SettingsConfigDict(
        env_prefix="IDENTITY_",
        extra="ignore",
    )

    url: str = "http://localhost:54321"
    service_role_key: SecretStr = SecretStr("")
    anon_key: SecretStr = SecretStr("")
    timeout: float = 15.0
    admin_page_size: int = 200

    @property
    def admin_url(self) -> str:
        """Build the admin users endpoint URL."""
        return f"{self.url.rstrip('/')}/auth/v1/admin/users"


class JWTSettings(BaseSettings):
    """JWT verification configuration.

    Access tokens are issued by the identity provider and signed with the
    project's shared JWT secret.

    Attributes:
        secret_key: Shared secret used to verify tokens.
        algorithm: JWT signing algorithm.
        audience: Expected audience claim.
        access_token_expire_minutes: Lifetime of locally minted tokens.
    """

    model_config = SettingsConfigDict(
        env_prefix="JWT_",
        extra="ignore",
    )

    secret_key: SecretStr = SecretStr(_DEFAULT_JWT_SECRET)
    algorithm: str = "HS256"
    audience: str = "authenticated"
    access_token_expire_minutes: int = Field(
        default=60,
        validation_alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )


class PaystackSettings(BaseSettings):
    """Payment gateway configuration.

    Attributes:
        secret_key: Gateway secret key. Also the webhook HMAC key.
        base_url: Gateway REST API base URL.
        currency: Currency code sent on initialization.
        timeout: Request timeout in seconds.
        provider_name: Value stored in enrollment_payments.payment_provider.
    """

    model_config = SettingsConfigDict(
        env_prefix="PAYSTACK_",
        extra="ignore",
    )

    secret_key: SecretStr | None = None
    base_url: str = "https://api.paystack.co"
    currency: str = "NGN"
    timeout: float = 30.0
    provider_name: str = "paystack"

    @property
    def is_configured(self) -> bool:
        """Check whether a secret key is present."""
        return bool(self.secret_key and self.secret_key.get_secret_value())


class BootstrapSettings(BaseSettings):
    """First-run bootstrap configuration.

    Attributes:
        admin_secret: Shared secret required to bootstrap the first super admin.
    """

    model_config = SettingsConfigDict(
        env_prefix="BOOTSTRAP_",
        extra="ignore",
    )

    admin_secret: SecretStr | None = None


class EmailSettings(BaseSettings):
    """Transactional email (Resend API) configuration.

    Attributes:
        api_key: Resend API key.
        api_url: Resend emails endpoint.
        from_address: Sender header.
        academy_name: Name used in email signatures.
        timeout: Request timeout in seconds.
    """

    model_config = SettingsConfigDict(
        env_prefix="EMAIL_",
        extra="ignore",
    )

    api_key: SecretStr | None = None
    api_url: str = "https://api.resend.com/emails"
    from_address: str = "TechPhase Academy <onboarding@resend.dev>"
    academy_name: str = "TechPhase Academy"
    timeout: float = 15.0


class RedisSettings(BaseSettings):
    """Redis configuration for settings change fan-out.

    Attributes:
        host: Redis server host.
        port: Redis server port.
        password: Redis password.
        database: Redis database number.
        max_connections: Maximum connection pool size.
        settings_channel: Pub/sub channel carrying settings changes.
    """

    model_config = SettingsConfigDict(
        env_prefix="REDIS_",
        extra="ignore",
    )

    host: str = "localhost"
    port: int = 6379
    password: SecretStr | None = None
    database: int = 0
    max_connections: int = 20
    settings_channel: str = "settings-realtime"

    @property
    def url(self) -> str:
        """Build the Redis connection URL."""
        if self.password and self.password.get_secret_value():
            pwd = self.password.get_secret_value()
            return f"redis://:{pwd}@{self.host}:{self.port}/{self.database}"
        return f"redis://{self.host}:{self.port}/{self.database}"


class CleanupSettings(BaseSettings):
    """Expired registration sweep configuration.

    Attributes:
        enabled: Whether the in-process scheduler runs the sweep.
        default_expiry_days: Used when the registration_expiry_days setting is absent.
        cron: Cron expression for the sweep.
    """

    model_config = SettingsConfigDict(
        env_prefix="CLEANUP_",
        extra="ignore",
    )

    enabled: bool = True
    default_expiry_days: int = 7
    cron: str = "15 2 * * *"


class RateLimitSettings(BaseSettings):
    """Rate limiting configuration.

    Attributes:
        requests_per_minute: Default limit per client.
        provisioning_limit: Limit applied to unauthenticated provisioning endpoints.
        storage_uri: slowapi storage backend (memory:// or a redis:// URL).
    """

    model_config = SettingsConfigDict(
        env_prefix="RATE_LIMIT_",
        extra="ignore",
    )

    requests_per_minute: int = 60
    provisioning_limit: str = "10/minute"
    storage_uri: str = "memory://"


class CORSSettings(BaseSettings):
    """CORS configuration for API.

    Attributes:
        origins: Comma-separated list of allowed origins.
        allow_credentials: Whether to allow credentials.
        allow_methods: Allowed HTTP methods.
        allow_headers: Allowed HTTP headers.
    """

    model_config = SettingsConfigDict(
        env_prefix="CORS_",
        extra="ignore",
    )

    origins: str = "*"
    allow_credentials: bool = False
    allow_methods: list[str] = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
    allow_headers: list[str] = [
        "authorization",
        "x-client-info",
        "apikey",
        "content-type",
    ]

    @property
    def origins_list(self) -> list[str]:
        """Parse origins string into a list."""
        return [origin.strip() for origin in self.origins.split(",") if origin.strip()]


class APISettings(BaseSettings):
    """API server configuration.

    Attributes:
        host: Host to bind to.
        port: Port to listen on.
        workers: Number of worker processes.
        public_url: Frontend origin used to build payment callback URLs.
    """

    model_config = SettingsConfigDict(
        env_prefix="API_",
        extra="ignore",
    )

    host: str = "0.0.0.0"
    port: int = 8000
    workers: int = 1
    public_url: str = "http://localhost:5173"


class Settings(BaseSettings):
    """All configuration, one nested model per concern.

    Attributes:
        environment: Current environment (development, staging, production).
        debug: Enable debug mode.
        log_level: Logging level.
        database: Database settings.
        identity: Identity provider settings.
        jwt: JWT verification settings.
        paystack: Payment gateway settings.
        bootstrap: First-run bootstrap settings.
        email: Transactional email settings.
        redis: Redis settings.
        cleanup: Registration sweep settings.
        rate_limit: Rate limiting settings.
        cors: CORS settings.
        api: API server settings.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # Environment
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "DEBUG"

    # Nested groups, each read with its own env prefix
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    identity: IdentityProviderSettings = Field(default_factory=IdentityProviderSettings)
    jwt: JWTSettings = Field(default_factory=JWTSettings)
    paystack: PaystackSettings = Field(default_factory=PaystackSettings)
    bootstrap: BootstrapSettings = Field(default_factory=BootstrapSettings)
    email: EmailSettings = Field(default_factory=EmailSettings)
    redis: RedisSettings = Field(default_factory=RedisSettings)
    cleanup: CleanupSettings = Field(default_factory=CleanupSettings)
    rate_limit: RateLimitSettings = Field(default_factory=RateLimitSettings)
    cors: CORSSettings = Field(default_factory=CORSSettings)
    api: APISettings = Field(default_factory=APISettings)

    @model_validator(mode="after")
    def reject_insecure_production_defaults(self) -> Self:
        """Refuse to run production with the placeholder JWT secret.

        Raises:
            ValueError: If JWT_SECRET_KEY was left at its default.
        """
        if self.is_production and self.jwt.secret_key.get_secret_value() == _DEFAULT_JWT_SECRET:
            raise ValueError("JWT secret key must be set (JWT_SECRET_KEY) in production")
        return self

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Settings for this process, read from the environment on first call."""
    return Settings()


def clear_settings_cache() -> None:
    """Forget the cached Settings so the next get_settings() rereads the environment."""
    get_settings.cache_clear()
