"""
Koalab Backend: Application Configuration
==========================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads environment variables (or a .env file),
       validates types and ranges, and yields a frozen `Settings` object.
Who:   Passed to create_app(); everything else reads it from the
       application context.
When:  Built once at startup. Settings are immutable afterwards.
"""

from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Every field has a development default. Production deployments override
    PUBLIC_URL (the Persona audience) and the database credentials.
    """

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="127.0.0.1")
    backend_port: int = Field(default=8080, ge=1, le=65535)

    # What: Canonical public origin of the service
    # Used as the `audience` sent to the identity verifier; must match the
    # origin the browser requested the assertion for.
    public_url: str = Field(default="http://koalab.lo")

    # ── Database ──────────────────────────────────────────────────────────
    db_driver: str = Field(default="postgresql+asyncpg")
    db_host: str = Field(default="localhost")
    db_port: int = Field(default=5432, ge=1, le=65535)
    db_name: str = Field(default="koalab")
    db_user: str = Field(default="koalab")
    db_password: str = Field(default="koalab")

    # Full SQLAlchemy URL; overrides the db_* fields when set (tests use
    # sqlite+aiosqlite here)
    database_url: str = Field(default="")

    db_pool_size: int = Field(default=10, ge=1, le=100)
    db_max_overflow: int = Field(default=5, ge=0, le=50)
    db_pool_pre_ping: bool = Field(default=True)

    @property
    def sqlalchemy_url(self) -> str:
        """Connection URL handed to create_async_engine()."""
        if self.database_url:
            return self.database_url
        return (
            f"{self.db_driver}://{self.db_user}:{self.db_password}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )

    # ── Sessions ──────────────────────────────────────────────────────────
    # What: File holding the raw signing secret (generated on first start)
    secret_file: str = Field(default=".secret")

    session_cookie_name: str = Field(default="email")

    # What: Maximum token age in seconds accepted by the session codec
    # Default: 30 days
    session_max_age: int = Field(default=2_592_000, ge=60)

    # ── Identity Verifier ─────────────────────────────────────────────────
    verifier_url: str = Field(default="https://verifier.login.persona.org/verify")

    # What: Total timeout (seconds) for one verification round-trip
    verifier_timeout: float = Field(default=10.0, gt=0, le=120)

    # ── CORS ──────────────────────────────────────────────────────────────
    # Format: Comma-separated origins
    cors_origins: str = Field(default="http://koalab.lo")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ── Logging ───────────────────────────────────────────────────────────
    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    @field_validator("public_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """The verifier compares audiences as origins; drop a trailing slash."""
        return v.rstrip("/")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "frozen": True,
    }


# Default instance built from the environment; create_app() falls back to it
settings = Settings()
