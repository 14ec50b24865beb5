"""Environment settings for DocReel.

Only process-level settings live here: where the backend API is, how to
authenticate, how long each backend call may take and where exports go.
Component behaviour (eligibility, caption defaults, debounce, export
naming) is configured in ``config/defaults.yaml``; see config_loader.
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Config(BaseSettings):
    """DocReel environment settings (environment variables or ``.env``).

    Example:
        >>> config = Config(api_base_url="https://api.example.com")
        >>> config.api_base_url
        'https://api.example.com/api/v1'
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ============================================
    # Application Settings
    # ============================================
    app_name: str = Field(default="DocReel", description="Application name")
    app_env: Literal["development", "staging", "production"] = Field(
        default="development", description="Application environment"
    )
    debug: bool = Field(default=False, description="Debug mode")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )

    # ============================================
    # Backend Services
    # ============================================
    api_base_url: str = Field(
        default="http://localhost:3001",
        description="Backend API base URL (renderer, storage, distribution)",
        validate_default=True,
    )
    api_access_token: str = Field(default="", description="Bearer token for backend API")
    render_timeout_seconds: float = Field(
        default=600.0, description="Timeout for render calls", ge=10.0, le=3600.0
    )
    storage_timeout_seconds: float = Field(
        default=60.0, description="Timeout for script storage calls", ge=1.0, le=600.0
    )
    distribution_timeout_seconds: float = Field(
        default=60.0, description="Timeout for distribution calls", ge=1.0, le=600.0
    )

    # ============================================
    # File Storage
    # ============================================
    export_dir: str = Field(default="./outputs", description="Local export directory")
    defaults_path: str | None = Field(
        default=None, description="Path to YAML defaults (default: bundled config/defaults.yaml)"
    )

    @field_validator("api_base_url", mode="before")
    @classmethod
    def normalize_api_base_url(cls, v: str) -> str:
        """Normalize the API base URL to end with /api/v1.

        Args:
            v: Base URL string

        Returns:
            URL ending with /api/v1 and no trailing slash

        Raises:
            ValueError: If URL is not http(s)
        """
        if not isinstance(v, str) or not v.startswith(("http://", "https://")):
            raise ValueError("api_base_url must be an http(s) URL")
        v = v.rstrip("/")
        if not v.endswith("/api/v1"):
            v = f"{v}/api/v1"
        return v

    @property
    def is_development(self) -> bool:
        """Development mode: console logs with call sites."""
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        """Production mode: JSON logs."""
        return self.app_env == "production"


# =============================================================================
# Singleton accessor
# =============================================================================

_config: Config | None = None


def get_config() -> Config:
    """Get the global Config singleton.

    Returns:
        The global Config instance
    """
    global _config
    if _config is None:
        _config = Config()
    return _config
