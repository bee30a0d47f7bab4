"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Cross-field rules are validated at load time.
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment and .env.

    Everything has a default so the app boots without Firestore in local
    development; set REQUIRE_FIRESTORE=true to make missing credentials fatal.
    """

    # App
    app_name: str = "workflow-orchestrator"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    # Firebase / Firestore: use key (env) or path (file).
    firebase_service_account_key: SecretStr | None = None
    firebase_service_account_path: str | None = None
    require_firestore: bool = False

    # Template sets: slug of the organization that owns system-wide sets
    system_organization_slug: str = "system"

    # Behavior actions: each executable behavior type is POSTed to
    # {behavior_actions_base_url}/{behavior_type}
    behavior_actions_base_url: str = "http://localhost:8081/actions"
    behavior_actions_timeout_seconds: float = 30.0

    # CORS
    allowed_origins: str = "http://localhost:3000,http://localhost:8080"

    # Request
    session_header_name: str = "X-Session-ID"
    request_id_header: str = "X-Request-ID"
    rate_limit_writes: str = "120/minute"

    # Redis Cache
    redis_enabled: bool = True
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: SecretStr | None = None
    cache_ttl_permissions: int = 300

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]

    @model_validator(mode="after")
    def validate_firestore_and_actions(self) -> "Settings":
        """Validate cross-field settings.

        - REQUIRE_FIRESTORE: FIREBASE_SERVICE_ACCOUNT_KEY or FIREBASE_SERVICE_ACCOUNT_PATH required.
        - BEHAVIOR_ACTIONS_BASE_URL must be an http(s) URL.
        """
        if self.require_firestore:
            has_key = (
                self.firebase_service_account_key
                and self.firebase_service_account_key.get_secret_value()
            )
            if not has_key and not self.firebase_service_account_path:
                raise ValueError(
                    "REQUIRE_FIRESTORE is set: provide FIREBASE_SERVICE_ACCOUNT_KEY (full JSON string) "
                    "or FIREBASE_SERVICE_ACCOUNT_PATH (path to JSON file)."
                )
        if not self.behavior_actions_base_url.startswith(("http://", "https://")):
            raise ValueError(
                f"BEHAVIOR_ACTIONS_BASE_URL must be an http(s) URL, got: {self.behavior_actions_base_url!r}"
            )
        if self.behavior_actions_timeout_seconds <= 0:
            raise ValueError("BEHAVIOR_ACTIONS_TIMEOUT_SECONDS must be positive")
        if not self.system_organization_slug.strip():
            raise ValueError("SYSTEM_ORGANIZATION_SLUG must not be empty")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.
    """
    return Settings()
