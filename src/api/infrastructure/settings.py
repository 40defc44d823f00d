"""Application settings using pydantic-settings.

Settings are loaded from environment variables with sensible defaults
for development. Production deployments should set all values explicitly.
"""

from functools import lru_cache
from urllib.parse import quote

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

TENANT_ID_PLACEHOLDER = "{tenant_id}"


class TenancySettings(BaseSettings):
    """Tenant routing and per-tenant database settings.

    Environment variables:
        TENANCY_TENANT_IDENTIFIER: Header/field carrying the tenant id (default: X-TENANT-ID)
        TENANCY_IS_TENANT_FROM_SUBDOMAIN: Read the tenant from the host subdomain (default: false)
        TENANCY_DATABASE_URI_TEMPLATE: Tenant database URL, must contain {tenant_id}
        TENANCY_FORCE_CREATE_COLLECTIONS: Create collections eagerly (default: false)
        TENANCY_CONNECT_TIMEOUT_SECONDS: Time budget for opening a tenant connection (default: 10)
        TENANCY_ECHO_SQL: Log every SQL statement (default: false)
        TENANCY_POOL_RECYCLE_SECONDS: Recycle pooled DBAPI connections after N seconds (default: 3600)
    """

    model_config = SettingsConfigDict(
        env_prefix="TENANCY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    tenant_identifier: str | None = Field(
        default="X-TENANT-ID",
        description="Header or payload field carrying the tenant id",
    )
    is_tenant_from_subdomain: bool = Field(
        default=False,
        description="Extract the tenant id from the request host subdomain",
    )
    database_uri_template: str = Field(
        default="postgresql+asyncpg://tenancy@localhost:5432/tenant_{tenant_id}",
        description="Database URL template for a tenant",
    )
    force_create_collections: bool = Field(
        default=False,
        description="Create every registered collection when a tenant is resolved",
    )
    connect_timeout_seconds: float = Field(
        default=10.0,
        description="Time budget for opening a tenant connection",
        gt=0,
        le=300,
    )
    echo_sql: bool = Field(default=False, description="Echo SQL statements")
    pool_recycle_seconds: int = Field(
        default=3600,
        description="Recycle pooled DBAPI connections after this many seconds",
        ge=-1,
    )

    @field_validator("tenant_identifier")
    @classmethod
    def blank_identifier_is_unset(cls, value: str | None) -> str | None:
        """Treat an empty identifier as not configured."""
        if value is not None and not value.strip():
            return None
        return value

    @model_validator(mode="after")
    def validate_uri_template(self) -> "TenancySettings":
        """Validate the URI template is tenant specific."""
        if TENANT_ID_PLACEHOLDER not in self.database_uri_template:
            raise ValueError(
                f"database_uri_template must contain {TENANT_ID_PLACEHOLDER}, "
                f"got: '{self.database_uri_template}'"
            )
        return self

    def build_uri(self, tenant_id: str) -> str:
        """Render the database URL for a tenant.

        The tenant id is percent-encoded so it stays inside the URL component
        the placeholder occupies.
        """
        return self.database_uri_template.replace(
            TENANT_ID_PLACEHOLDER, quote(tenant_id, safe="")
        )


class Settings(BaseSettings):
    """Main application settings aggregating all configuration sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application metadata
    app_name: str = Field(default="Tenancy API", description="Application name")
    debug: bool = Field(default=False, description="Debug mode")

    @property
    def tenancy(self) -> TenancySettings:
        """Get tenancy settings."""
        return get_tenancy_settings()


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


@lru_cache
def get_tenancy_settings() -> TenancySettings:
    """Get cached tenancy settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return TenancySettings()
