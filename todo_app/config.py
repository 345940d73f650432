"""
Centralized configuration management using pydantic-settings.
This module provides a single source of truth for all application configuration.
"""


import os

from dotenv import load_dotenv
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from todo_app.utils.logger import setup_logger

load_dotenv(override=True)


logger = setup_logger("core_config")

DEFAULT_JWT_SECRET = "change-this-secret-key-in-production-it-must-be-long-enough"


class Settings(BaseSettings):
    """
    Application settings managed by pydantic-settings.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
        # Allow override from environment variables
        env_prefix="",
    )

    # ===== Database Configuration =====
    todo_app_schema: str = Field(
        default="todo_app",
        alias="TODO_APP_SCHEMA",
        description="Database schema name",
    )

    app_database_url: str | None = Field(
        default=None,
        alias="TODO_APP_DATABASE_URL",
        description="Application database URL",
    )

    # ===== JWT Configuration =====
    jwt_secret_key: str = Field(
        default=DEFAULT_JWT_SECRET,
        alias="JWT_SECRET_KEY",
        description="Symmetric secret used to sign access tokens (HS512)",
    )

    jwt_issuer: str = Field(
        default="TodoListApp",
        alias="JWT_ISSUER",
        description="Issuer claim written to and expected on access tokens",
    )

    jwt_audience: str = Field(
        default="TodoListAppClients",
        alias="JWT_AUDIENCE",
        description="Audience claim written to and expected on access tokens",
    )

    access_token_expire_minutes: int = Field(
        default=60 * 24,
        alias="ACCESS_TOKEN_EXPIRE_MINUTES",
        description="Access token lifetime in minutes (24 hours default)",
    )

    refresh_token_expire_days: int = Field(
        default=30,
        alias="REFRESH_TOKEN_EXPIRE_DAYS",
        description="Refresh token lifetime in days",
    )

    token_clock_skew_seconds: int = Field(
        default=300,
        alias="TOKEN_CLOCK_SKEW_SECONDS",
        description="Clock skew tolerated when validating token lifetime",
    )

    token_refresh_threshold_seconds: int = Field(
        default=60,
        alias="TOKEN_REFRESH_THRESHOLD_SECONDS",
        description="How long past expiry a stored access token may be before the web client refreshes it",
    )

    # ===== Web Front End API Client =====
    api_base_url: str = Field(
        default="http://localhost:8080",
        alias="API_BASE_URL",
        description="Base URL the web front end uses to reach the REST API",
    )

    api_timeout_seconds: float = Field(
        default=30.0,
        alias="API_TIMEOUT_SECONDS",
        description="Timeout for outgoing API calls made by the web front end",
    )

    # ===== Server Configuration =====
    server_host: str = Field(
        default="0.0.0.0", alias="SERVER_HOST", description="Server host address"
    )

    server_port: int = Field(
        default=8080, alias="SERVER_PORT", description="Server port number"
    )

    server_workers: int = Field(
        default=1, alias="SERVER_WORKERS", description="Number of uvicorn workers"
    )

    init_db_on_startup: bool = Field(
        default=True,
        alias="INIT_DB_ON_STARTUP",
        description="Create tables and seed fixed rows when the API starts",
    )

    # ===== CORS Configuration =====
    cors_allow_origins: list[str] = Field(
        default_factory=lambda: [
            "http://localhost:5173",
            "http://localhost:3000",
            "http://127.0.0.1:5173",
        ],
        alias="CORS_ALLOW_ORIGINS",
        description="CORS allowed origins",
    )

    cors_allow_credentials: bool = Field(
        default=True,
        alias="CORS_ALLOW_CREDENTIALS",
        description="Whether to allow credentials in CORS requests",
    )

    cors_allow_methods: list[str] = Field(
        default_factory=lambda: ["*"],
        alias="CORS_ALLOW_METHODS",
        description="CORS allowed methods",
    )

    cors_allow_headers: list[str] = Field(
        default_factory=lambda: ["*"],
        alias="CORS_ALLOW_HEADERS",
        description="CORS allowed headers",
    )

    # User-facing hint for database connection errors
    db_unavailable_hint: str = os.getenv(
        "DB_UNAVAILABLE_HINT",
        "Database connection failed. The server may be offline or network connectivity is down.",
    )

    @model_validator(mode="after")
    def validate_settings(self) -> "Settings":
        """Validate settings and log warnings for missing critical configurations."""

        if not self.app_database_url:
            logger.warning("TODO_APP_DATABASE_URL environment variable not set.")

        if self.jwt_secret_key == DEFAULT_JWT_SECRET:
            logger.warning(
                "JWT_SECRET_KEY is not set, using the built-in development secret."
            )

        logger.debug(f"Using database schema: {self.todo_app_schema}")
        logger.debug(
            f"JWT issuer: {self.jwt_issuer}, audience: {self.jwt_audience}, "
            f"access lifetime: {self.access_token_expire_minutes}min"
        )

        return self

    @property
    def schema_name(self) -> str:
        return self.todo_app_schema


# Global settings instance
settings = Settings()

SCHEMA_NAME = settings.schema_name
