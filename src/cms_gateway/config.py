"""Gateway settings.

Every field maps to an upper-case environment variable of the same name
(`CMS_API_URL`, `CACHE_ENABLED`, ...) and may also come from a `.env` file.
"""

from enum import Enum
from functools import lru_cache

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class LogLevel(str, Enum):
    """Log level options."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log format options."""

    JSON = "json"
    CONSOLE = "console"


class Settings(BaseSettings):
    """Runtime configuration for the gateway.

    The CMS token and the cache secret are `SecretStr` and never appear in
    `repr()` or logs.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Application
    # ========================================
    app_env: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )
    app_name: str = Field(
        default="CMS Gateway",
        description="Application name",
    )
    app_version: str = Field(
        default="0.1.0",
        description="Application version",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Logging level",
    )
    log_format: LogFormat = Field(
        default=LogFormat.CONSOLE,
        description="Log output format (json for production, console for dev)",
    )

    # ========================================
    # Server
    # ========================================
    host: str = Field(
        default="0.0.0.0",
        description="Server host",
    )
    port: int = Field(
        default=3001,
        ge=1,
        le=65535,
        description="Server port",
    )

    # ========================================
    # Redis / Cache
    # ========================================
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL",
    )
    redis_password: SecretStr | None = Field(
        default=None,
        description="Redis password (overrides any password in the URL)",
    )
    redis_socket_timeout: float = Field(
        default=5.0,
        gt=0,
        description="Redis socket and connect timeout in seconds",
    )
    cache_enabled: bool = Field(
        default=True,
        description="Use Redis for CMS caching (falls back to no-op when false)",
    )
    cache_prefix: str = Field(
        default="cms:",
        description="Key namespace isolating this gateway's cache entries",
    )
    cache_ttl_jitter: float = Field(
        default=0.1,
        ge=0,
        lt=1,
        description="Random TTL jitter ratio applied on cache writes",
    )
    cache_secret_key: SecretStr = Field(
        default=SecretStr(""),
        description="Secret required by the cache invalidation endpoint (empty disables it)",
    )

    # ========================================
    # CMS
    # ========================================
    cms_api_url: str = Field(
        default="http://localhost:1337/api",
        description="Base URL of the CMS REST API",
    )
    cms_graphql_url: str = Field(
        default="http://localhost:1337/graphql",
        description="URL of the CMS GraphQL endpoint",
    )
    cms_media_base_url: str = Field(
        default="http://localhost:1337",
        description="Base address prepended to relative media URLs",
    )
    cms_service_token: SecretStr = Field(
        default=SecretStr(""),
        description="Bearer token for the CMS API",
    )
    cms_request_timeout: float = Field(
        default=10.0,
        gt=0,
        description="CMS request timeout in seconds",
    )
    cms_default_cache_ttl: int = Field(
        default=86400,
        ge=1,
        description="Default TTL in seconds for cached CMS responses",
    )
    cms_max_connections: int = Field(
        default=100,
        ge=1,
        description="Maximum pooled connections to the CMS",
    )
    cms_max_keepalive_connections: int = Field(
        default=10,
        ge=0,
        description="Maximum idle keep-alive connections to the CMS",
    )
    cms_keepalive_expiry: float = Field(
        default=90.0,
        ge=0,
        description="Idle connection expiry in seconds",
    )
    cms_coalesce_requests: bool = Field(
        default=True,
        description="Share one upstream call between concurrent misses for the same key",
    )

    # ========================================
    # Derived Properties
    # ========================================
    @property
    def is_development(self) -> bool:
        return self.app_env == Environment.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        return self.app_env == Environment.PRODUCTION

    @property
    def use_json_logs(self) -> bool:
        """JSON logs are forced in production regardless of `log_format`."""
        return self.log_format == LogFormat.JSON or self.is_production

    @field_validator("cms_api_url", "cms_graphql_url", "cms_media_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URLs so paths can be joined with a single slash."""
        return v.rstrip("/")


@lru_cache
def get_settings() -> Settings:
    """Settings loaded once per process."""
    return Settings()
