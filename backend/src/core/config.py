"""Application configuration using pydantic-settings."""
from functools import lru_cache
from urllib.parse import urlparse

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Database
    database_url: str
    db_pool_size: int = Field(default=10, validation_alias="DB_POOL_SIZE")
    db_max_overflow: int = Field(default=10, validation_alias="DB_MAX_OVERFLOW")

    # Keycloak realm issuing the access tokens
    keycloak_url: str = Field(default="http://localhost:8180", validation_alias="KEYCLOAK_URL")
    keycloak_realm: str = Field(default="bookmarks", validation_alias="KEYCLOAK_REALM")
    keycloak_audience: str = Field(default="bookmarks-api", validation_alias="KEYCLOAK_AUDIENCE")
    admin_role: str = Field(default="ROLE_ADMIN", validation_alias="ADMIN_ROLE")

    # Development mode - bypasses token verification for local development
    dev_mode: bool = Field(default=False, validation_alias="DEV_MODE")
    dev_subject_id: str = Field(
        default="dev|local-development-user", validation_alias="DEV_SUBJECT_ID",
    )
    dev_roles_str: str = Field(default="", validation_alias="DEV_ROLES")

    # Base URL used to build Location headers for created bookmarks
    api_url: str = Field(default="http://localhost:8000", validation_alias="API_URL")

    # CORS - comma-separated list of allowed origins (stored as string, parsed via property)
    cors_origins_str: str = Field(
        default="http://localhost:4200",
        validation_alias="CORS_ORIGINS",
    )

    @model_validator(mode="after")
    def validate_dev_mode_security(self) -> "Settings":
        """
        Prevent DEV_MODE from being enabled with a production database.

        DEV_MODE skips token verification, so it must only be used with local
        development databases.
        """
        if not self.dev_mode:
            return self

        try:
            parsed = urlparse(self.database_url)
            hostname = parsed.hostname or ""
        except ValueError:
            hostname = ""

        local_hosts = {"localhost", "127.0.0.1", "0.0.0.0", "::1"}
        if hostname.lower() not in local_hosts:
            raise ValueError(
                f"DEV_MODE cannot be enabled with a non-local database. "
                f"Database host '{hostname}' appears to be a production database. "
                f"DEV_MODE bypasses all authentication and must only be used locally.",
            )

        return self

    @property
    def cors_origins(self) -> list[str]:
        """Parse comma-separated CORS origins string into a list."""
        return _split_csv(self.cors_origins_str)

    @property
    def dev_roles(self) -> frozenset[str]:
        """Roles granted to the development principal."""
        return frozenset(_split_csv(self.dev_roles_str))

    @property
    def keycloak_issuer(self) -> str:
        """Get the realm issuer URL."""
        return f"{self.keycloak_url.rstrip('/')}/realms/{self.keycloak_realm}"

    @property
    def keycloak_jwks_url(self) -> str:
        """Get the realm JWKS URL for fetching public keys."""
        return f"{self.keycloak_issuer}/protocol/openid-connect/certs"


def _split_csv(value: str) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
