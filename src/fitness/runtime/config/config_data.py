"""Pydantic models for parsing the config.yaml configuration file.

This module contains Pydantic models that correspond to the structure of config.yaml.
These models handle validation and type conversion of the YAML configuration data.
"""

from __future__ import annotations

import os
from typing import Literal

from loguru import logger
from pydantic import BaseModel, Field, computed_field


class CORSConfig(BaseModel):
    """CORS configuration for the application."""

    origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"]
    )
    allow_credentials: bool = True
    allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "DELETE", "OPTIONS"]
    )
    allow_headers: list[str] = Field(default=["*"])


class OIDCProviderConfig(BaseModel):
    """OIDC provider configuration model.

    Only the pieces needed to verify tokens issued by the provider are kept;
    the services never drive an interactive login themselves.
    """

    issuer: str = Field(description="OIDC issuer URL")
    jwks_uri: str = Field(description="JWKS endpoint for JWT validation")
    client_id: str | None = Field(
        default=None, description="Client ID expected as audience when no audiences are configured"
    )
    enabled: bool = Field(default=True, description="Accept tokens from this provider")


class OIDCConfig(BaseModel):
    """OIDC configuration model."""

    providers: dict[str, OIDCProviderConfig] = Field(
        default_factory=dict, description="OIDC provider configurations"
    )


class JWTConfig(BaseModel):
    """JWT validation configuration."""

    allowed_algorithms: list[str] = Field(
        default_factory=lambda: ["RS256", "RS512", "ES256", "ES384"],
        description="JWT algorithms allowed for token validation",
    )
    audiences: list[str] = Field(
        default_factory=list,
        description="JWT audiences that this platform accepts (empty = provider client_id)",
    )
    clock_skew: int = Field(default=60, description="Clock skew tolerance in seconds")
    shared_secret: str | None = Field(
        default=None,
        description="Shared secret for HS-signed tokens from an unlisted issuer (development only)",
    )
    dev_issuer: str = Field(
        default="fitness-dev", description="Issuer used when minting development tokens"
    )


class LoggingConfig(BaseModel):
    """Logging configuration model."""

    level: str = Field(default="INFO", description="Logging level")
    format: Literal["json", "plain"] = Field(default="json", description="Log format")
    file: str | None = Field(default=None, description="Log file path")
    max_size_mb: int = Field(default=10, description="Maximum log file size in MB")
    backup_count: int = Field(
        default=5, description="Number of backup log files to keep"
    )


class DatabaseConfig(BaseModel):
    """Database configuration model."""

    url: str = Field(
        default="sqlite:///./fitness.db",
        description="Database connection URL",
    )
    pool_size: int = Field(default=20, description="Connection pool size")
    max_overflow: int = Field(default=10, description="Maximum pool overflow")
    pool_timeout: int = Field(default=30, description="Pool timeout in seconds")
    pool_recycle: int = Field(default=1800, description="Pool recycle time in seconds")
    password_env_var: str | None = Field(
        default=None,
        description="Environment variable name containing database password",
    )
    password_file: str | None = Field(
        default=None,
        description="Path to file containing database password",
    )

    @computed_field
    @property
    def password(self) -> str | None:
        """Resolve the database password from the secrets file, then the environment."""
        if self.password_file:
            try:
                with open(self.password_file) as f:
                    return f.read().strip()
            except OSError as e:
                raise ValueError("Failed to read database password from file.") from e
        if self.password_env_var:
            password = os.getenv(self.password_env_var)
            if not password:
                raise ValueError(f"Environment variable {self.password_env_var} not set")
            return password
        return None

    @computed_field
    @property
    def connection_string(self) -> str:
        """Construct the database connection string with password if provided."""
        from sqlalchemy.engine import make_url

        base_url = make_url(self.url)
        resolved_password = self.password
        if resolved_password is None:
            return self.url

        if base_url.password and base_url.password != resolved_password:
            logger.warning(
                "Database URL contains a password that differs from the configured secret. Using the secret."
            )
        return base_url.set(password=resolved_password).render_as_string(
            hide_password=False
        )

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")


class IdentityConfig(BaseModel):
    """Identity propagation and provisioning settings."""

    trusted_header: str = Field(
        default="X-User-ID",
        description="Header carrying the asserted external id to downstream services",
    )
    placeholder_email_domain: str = Field(
        default="users.placeholder.invalid",
        description="Domain for synthesized emails of records provisioned from an external id only",
    )


class UserServiceConfig(BaseModel):
    """Where the user-record service lives, as seen by its network clients."""

    base_url: str = Field(
        default="http://localhost:8081", description="Base URL of the user-record service"
    )
    timeout_seconds: float = Field(
        default=3.0, description="Timeout for every call to the user-record service"
    )


class GatewayConfig(BaseModel):
    """Gateway routing and identity sync settings."""

    provisioning_timeout_seconds: float = Field(
        default=2.0,
        description="Upper bound on the best-effort provisioning call made per request",
    )
    forward_timeout_seconds: float = Field(
        default=30.0, description="Timeout for forwarded upstream requests"
    )
    routes: dict[str, str] = Field(
        default_factory=lambda: {
            "/api/users": "http://localhost:8081",
            "/api/activities": "http://localhost:8082",
        },
        description="Path prefix to upstream base URL",
    )


class AppConfig(BaseModel):
    """Application configuration model."""

    environment: Literal["development", "production", "test"] = Field(
        default="development", description="Application environment"
    )
    host: str = Field(default="localhost", description="Application host")
    port: int = Field(default=8080, description="Application port")
    cors: CORSConfig = Field(
        default_factory=CORSConfig, description="CORS configuration"
    )


class ConfigData(BaseModel):
    """Root configuration model that matches the config.yaml structure."""

    app: AppConfig = Field(
        default_factory=AppConfig, description="Application configuration"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
    database: DatabaseConfig = Field(
        default_factory=DatabaseConfig, description="Database configuration"
    )
    jwt: JWTConfig = Field(
        default_factory=JWTConfig, description="JWT validation configuration"
    )
    oidc: OIDCConfig = Field(
        default_factory=OIDCConfig, description="OIDC configuration"
    )
    identity: IdentityConfig = Field(
        default_factory=IdentityConfig, description="Identity propagation configuration"
    )
    user_service: UserServiceConfig = Field(
        default_factory=UserServiceConfig, description="User-record service client configuration"
    )
    gateway: GatewayConfig = Field(
        default_factory=GatewayConfig, description="Gateway configuration"
    )
