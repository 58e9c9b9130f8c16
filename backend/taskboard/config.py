"""
Taskboard Backend — Application Configuration
===============================================

What:  Centralized configuration management using Pydantic Settings.
How:   Reads environment variables (or a .env file), validates types/ranges,
       and exposes a singleton `settings` object.
Who:   Consumed by the app factory, which hands the relevant pieces to the
       database layer and the health/version routes as constructor arguments.

Database connectivity is described the way operators already know it: a host,
port, credentials, database name and SSL mode, plus the pool tuning triple
(max open, max idle, max connection lifetime). `database_dsn` assembles these
into the SQLAlchemy URL; `DATABASE_URL` overrides it outright.
"""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings
from sqlalchemy.engine import URL


class BuildInfo(BaseModel):
    """Build and deployment identity served by the /version endpoint."""

    app_name: str
    version: str
    environment: str
    build_time: str = "unknown"
    git_commit: str = "unknown"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have development defaults. Production deployments MUST
    override the credentials (DB_USER, DB_PASSWORD) and CORS_ORIGINS.
    """

    # ── Database ──────────────────────────────────────────────────────────
    db_host: str = Field(default="localhost")
    db_port: int = Field(default=5432, ge=1, le=65535)
    db_user: str = Field(default="taskboard")
    db_password: str = Field(default="taskboard_secret")
    db_name: str = Field(default="taskboard")

    # What: asyncpg SSL mode (disable, prefer, require, verify-ca, verify-full)
    db_ssl_mode: str = Field(default="disable")

    # What: Full SQLAlchemy URL; when set, the DB_* parts above are ignored
    # Used by tests (sqlite+aiosqlite) and by platforms that inject one URL
    database_url: Optional[str] = Field(default=None)

    # ── Connection Pool ───────────────────────────────────────────────────
    # max_idle becomes the persistent pool size; the difference up to
    # max_open is allowed as overflow. Lifetime is in seconds.
    db_max_open_conns: int = Field(default=25, ge=1, le=200)
    db_max_idle_conns: int = Field(default=25, ge=1, le=200)
    db_conn_max_lifetime: int = Field(default=300, ge=10, le=86400)
    db_pool_pre_ping: bool = Field(default=True)

    # What: Per-statement deadline in seconds; None disables it
    db_statement_timeout: Optional[float] = Field(default=None, gt=0)

    # ── Application ───────────────────────────────────────────────────────
    app_name: str = Field(default="Taskboard Backend")
    app_env: str = Field(default="development")
    app_version: str = Field(default="1.0.0")
    build_time: str = Field(default="unknown")
    git_commit: str = Field(default="unknown")

    log_level: str = Field(default="INFO")

    # What: Owner assigned to new projects when no actor header is present
    default_owner_id: int = Field(default=1, ge=1)

    # What: Upper bound for one bulk task import request; may only lower the 1000 cap
    bulk_import_max_tasks: int = Field(default=1000, ge=1, le=1000)

    # ── CORS ──────────────────────────────────────────────────────────────
    cors_origins: str = Field(default="http://localhost:3000")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    @field_validator("db_ssl_mode")
    @classmethod
    def validate_ssl_mode(cls, v: str) -> str:
        valid_modes = {"disable", "allow", "prefer", "require", "verify-ca", "verify-full"}
        if v not in valid_modes:
            raise ValueError(f"Invalid db_ssl_mode '{v}'. Must be one of: {valid_modes}")
        return v

    @property
    def database_dsn(self) -> str:
        """
        What:  The SQLAlchemy URL the engine connects with.
        How:   `DATABASE_URL` wins; otherwise the DB_* parts are assembled into
               a postgresql+asyncpg URL. URL.create quotes the credentials.
        """
        if self.database_url:
            return self.database_url
        return URL.create(
            "postgresql+asyncpg",
            username=self.db_user,
            password=self.db_password,
            host=self.db_host,
            port=self.db_port,
            database=self.db_name,
            query={"ssl": self.db_ssl_mode},
        ).render_as_string(hide_password=False)

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def build_info(self) -> BuildInfo:
        return BuildInfo(
            app_name=self.app_name,
            version=self.app_version,
            environment=self.app_env,
            build_time=self.build_time,
            git_commit=self.git_commit,
        )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }


# Singleton instance, imported by the app factory and Alembic
settings = Settings()
