"""
Application configuration and settings.
Centralized configuration management using Pydantic Settings.
"""
import json
from functools import lru_cache
from typing import Annotated, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

# Default ceilings when RATE_LIMIT_MAX_REQUESTS is unset. Optional-auth
# deployments get the higher ceiling.
DEFAULT_RATE_LIMIT_MANDATORY_AUTH = 30
DEFAULT_RATE_LIMIT_OPTIONAL_AUTH = 120
DEFAULT_RATE_LIMIT_WINDOW_SECONDS = 60.0

DEFAULT_MAX_BODY_BYTES = 15 * 1024 * 1024


class ConfigurationError(RuntimeError):
    """Raised at startup when the environment cannot run the gateway."""

    def __init__(self, problems: List[str]):
        self.problems = problems
        super().__init__("; ".join(problems))


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        extra="ignore",
        case_sensitive=False,
        env_file=[".env", ".env.local"],  # .env.local overrides .env
    )

    # Application settings
    app_name: str = "Dream Gateway"
    host: str = "0.0.0.0"
    port: int = 3000
    enable_docs: bool = False
    cors_origins: Annotated[List[str], NoDecode] = Field(default_factory=list)

    # Logging settings
    log_level: str = "INFO"

    # Upstream providers
    openai_api_key: str = ""
    gemini_api_key: str = ""
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_image_model: str = "gemini-2.5-flash-image"
    upstream_timeout_seconds: Optional[float] = None
    upstream_max_retries: Optional[int] = None

    # Authentication settings
    auth_required: bool = True
    backend_auth_token: str = ""
    dev_auth_token: str = "dev-local-token"
    auth_fallback_header: str = "X-Auth-Token"

    # Rate limiting
    rate_limit_window_seconds: Optional[float] = None
    rate_limit_max_requests: Optional[int] = None
    image_rate_limit_window_seconds: Optional[float] = None
    image_rate_limit_max_requests: Optional[int] = None
    rate_limit_max_keys: int = 10_000
    trust_proxy_headers: bool = False

    # Request guards
    max_body_bytes: int = DEFAULT_MAX_BODY_BYTES

    @field_validator(
        "openai_api_key", "gemini_api_key", "backend_auth_token", "dev_auth_token"
    )
    @classmethod
    def strip_secret(cls, v: str) -> str:
        return (v or "").strip()

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        """Accept a comma-separated string as well as a JSON list."""
        if isinstance(v, str):
            if v.strip().startswith("["):
                return json.loads(v)
            return [s.strip() for s in v.split(",") if s.strip()]
        return v

    @property
    def general_rate_window(self) -> float:
        return self.rate_limit_window_seconds or DEFAULT_RATE_LIMIT_WINDOW_SECONDS

    @property
    def general_rate_max(self) -> int:
        if self.rate_limit_max_requests is not None:
            return self.rate_limit_max_requests
        if self.auth_required:
            return DEFAULT_RATE_LIMIT_MANDATORY_AUTH
        return DEFAULT_RATE_LIMIT_OPTIONAL_AUTH

    @property
    def image_rate_window(self) -> float:
        return self.image_rate_limit_window_seconds or self.general_rate_window

    @property
    def image_rate_max(self) -> int:
        if self.image_rate_limit_max_requests is not None:
            return self.image_rate_limit_max_requests
        return self.general_rate_max

    @property
    def image_generation_enabled(self) -> bool:
        return bool(self.gemini_api_key)

    def startup_problems(self) -> List[str]:
        """List fatal misconfigurations; empty when the gateway can start."""
        problems = []
        if not self.openai_api_key:
            problems.append("Missing OPENAI_API_KEY. Set it in server environment.")
        if self.auth_required and not self.backend_auth_token:
            problems.append("Missing BACKEND_AUTH_TOKEN while AUTH_REQUIRED is enabled.")
        return problems

    def validate_startup(self) -> None:
        problems = self.startup_problems()
        if problems:
            raise ConfigurationError(problems)


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
