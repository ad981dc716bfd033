"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Required fields (e.g. DATABASE_URL for postgres,
SECRET_KEY) are validated at load time.
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment and .env.

    All settings are optional with defaults except those validated in
    validate_required (database_url for postgres, secret_key).
    """

    # App
    app_name: str = "taskflow"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    # Database: "postgres" (SQLAlchemy + Alembic) or "memory" (process-local store)
    database_backend: str = "postgres"
    database_url: str = ""
    database_echo: bool = False
    # Optional pool/driver overrides (None = use defaults in database.py)
    db_pool_size: int | None = None
    db_max_overflow: int | None = None
    db_command_timeout: int | None = None
    db_disable_jit: bool = True

    # Security (tokens are minted by the identity provider; we only verify)
    secret_key: SecretStr = SecretStr("")
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 480  # 8 hours

    # CORS
    allowed_origins: str = "http://localhost:3000,http://localhost:8080"

    # Request
    request_id_header: str = "X-Request-ID"

    # Workflow engine
    # Seconds a status change waits for the per-task lock before giving up
    # with CONCURRENT_MODIFICATION.
    transition_lock_timeout_seconds: float = 5.0
    # Widest [start, end] range the schedule endpoints will project.
    max_projection_days: int = 366 * 5
    # Comma-separated roles allowed to create, replace and delete workflows.
    workflow_admin_roles: str = "admin"

    # Rate limiting (slowapi)
    rate_limit_enabled: bool = True
    rate_limit_writes: str = "60/minute"

    # Redis pub/sub for status_changed fan-out
    redis_enabled: bool = True
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: SecretStr | None = None
    redis_max_connections: int = 10

    # OpenTelemetry
    telemetry_enabled: bool = False
    telemetry_exporter: str = "console"
    telemetry_otlp_endpoint: str | None = None
    telemetry_sample_rate: float = 1.0

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_required(self) -> "Settings":
        """Validate required env for the selected backend.

        - Postgres: DATABASE_URL required.
        - Memory: nothing extra; data lives for the process lifetime.
        """
        if self.database_backend == "postgres":
            if not self.database_url:
                raise ValueError(
                    "DATABASE_URL is required when database_backend is 'postgres'. "
                    "Set in environment or .env file."
                )
        elif self.database_backend != "memory":
            raise ValueError(
                f"database_backend must be 'postgres' or 'memory', got: {self.database_backend!r}"
            )
        if not self.secret_key.get_secret_value():
            raise ValueError(
                "SECRET_KEY is required. Generate with: openssl rand -hex 32."
            )
        if self.transition_lock_timeout_seconds <= 0:
            raise ValueError("TRANSITION_LOCK_TIMEOUT_SECONDS must be positive")
        if self.max_projection_days < 1:
            raise ValueError("MAX_PROJECTION_DAYS must be at least 1")
        return self

    @property
    def admin_roles(self) -> frozenset[str]:
        """Parsed workflow_admin_roles."""
        return frozenset(
            role.strip() for role in self.workflow_admin_roles.split(",") if role.strip()
        )

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()
