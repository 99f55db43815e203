"""
Name: Application Configuration (Settings)

Responsibilities:
  - Centralized, typed configuration using pydantic-settings
  - Validate environment variables at startup
  - Provide defaults for offer validation and audit resilience

Collaborators:
  - api/main.py: reads settings for CORS, pool and startup validation
  - container.py: reads settings for repository selection and audit backlog
  - application/usecases/offers: reads offer limits (seats, advance time)

Constraints:
  - Lives in API/infrastructure layer, NOT in domain
  - No business logic — pure configuration

Notes:
  - Uses pydantic-settings for env parsing and validation
  - Singleton via lru_cache for performance
"""

from functools import lru_cache

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        database_url: PostgreSQL connection string
        app_env: Application environment (development/test/production)
        log_level: Root log level (default: INFO)
        log_json: Emit JSON logs (default: True)
        allowed_origins: Comma-separated CORS origins
        cors_allow_credentials: Allow cookies cross-origin (default: False)
        api_keys_config: JSON with API keys, scopes and actor ids
        metrics_require_auth: Require auth for /metrics (default: False)
        max_body_bytes: Max request body size (default: 1MB)
        db_pool_min_size / db_pool_max_size: Connection pool bounds
        db_statement_timeout_ms: Per-statement timeout (0 disables)
        db_slow_query_seconds: Threshold for slow query warnings
        db_healthcheck_on_acquire: SELECT 1 when a connection is checked out
        retry_max_attempts: Attempts for audit writes (default: 3)
        retry_base_delay_seconds / retry_max_delay_seconds: Backoff bounds
        offer_max_seats: Upper bound for seats_total (default: 8)
        offer_min_advance_minutes: Minimum start_at lead time (default: 0)
        offer_default_currency: Currency when omitted (default: UZS)
        max_reason_chars: Max rejection reason length (default: 1000)
        audit_pending_max: Max audit events kept for later retry (default: 1000)
    """

    # Required (no defaults)
    database_url: str

    # Environment
    app_env: str = "development"

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    # CORS configuration
    allowed_origins: str = "http://localhost:3000"
    cors_allow_credentials: bool = False

    # Security - API Keys
    # JSON: {"key": ["scope1"]} o {"key": {"actor_id": "...", "scopes": [...]}}
    api_keys_config: str = ""
    metrics_require_auth: bool = False

    # Security - Hardening
    max_body_bytes: int = 1024 * 1024  # 1MB

    # Database - Connection Pool
    db_pool_min_size: int = 2
    db_pool_max_size: int = 10
    db_statement_timeout_ms: int = 30000  # 30 seconds
    db_slow_query_seconds: float = 0.25
    db_healthcheck_on_acquire: bool = True

    # Retry/Resilience (audit writes)
    retry_max_attempts: int = 3
    retry_base_delay_seconds: float = 0.2
    retry_max_delay_seconds: float = 5.0

    # Offer rules
    offer_max_seats: int = 8
    offer_min_advance_minutes: int = 0
    offer_default_currency: str = "UZS"
    max_reason_chars: int = 1000

    # Audit backlog
    audit_pending_max: int = 1000

    @field_validator("offer_max_seats")
    @classmethod
    def offer_max_seats_must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("offer_max_seats must be greater than 0")
        return v

    @field_validator("offer_min_advance_minutes", "audit_pending_max")
    @classmethod
    def must_be_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("value must be >= 0")
        return v

    @field_validator("offer_default_currency")
    @classmethod
    def currency_must_be_iso_like(cls, v: str) -> str:
        code = (v or "").strip().upper()
        if len(code) != 3 or not code.isalpha():
            raise ValueError("offer_default_currency must be a 3-letter code")
        return code

    @field_validator("retry_max_attempts")
    @classmethod
    def retry_attempts_must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("retry_max_attempts must be greater than 0")
        return v

    def validate_pool_params(self) -> None:
        """
        Cross-field validation: min pool size cannot exceed max.
        Called explicitly after instantiation.
        """
        if self.db_pool_min_size > self.db_pool_max_size:
            raise ValueError(
                f"db_pool_min_size ({self.db_pool_min_size}) must be <= "
                f"db_pool_max_size ({self.db_pool_max_size})"
            )

    def get_allowed_origins_list(self) -> list[str]:
        """Parse comma-separated origins into a list."""
        return [
            origin.strip()
            for origin in self.allowed_origins.split(",")
            if origin.strip()
        ]

    @model_validator(mode="after")
    def validate_security_requirements(self):
        if not self.is_production():
            return self

        if not self.api_keys_config.strip():
            raise ValueError(
                "API_KEYS_CONFIG is required in production (moderators must be identified)"
            )
        if not self.metrics_require_auth:
            raise ValueError("METRICS_REQUIRE_AUTH must be true in production")

        return self

    def is_production(self) -> bool:
        return self.app_env.strip().lower() == "production"

    def is_test(self) -> bool:
        return self.app_env.strip().lower() in {"test", "testing", "ci"}

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore unknown env vars
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get singleton Settings instance.

    Raises:
        ValidationError: If required env vars are missing or invalid
    """
    settings = Settings()
    settings.validate_pool_params()
    return settings
