"""Application settings and configuration."""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "mubx-waitlist"
    env: Literal["development", "production"] = "development"
    allowed_origins: str = "http://localhost:3000"

    # Submission store (ProForms)
    proforms_api_key: str = Field(
        default="",
        description="API key for the hosted form service",
    )
    proforms_access_token: str = Field(
        default="",
        description="Access token for reading form submissions",
    )
    submissions_url: str = Field(
        default="https://API.proforms.top/v1/access_form.php",
        description="Endpoint returning every submission of the waitlist form",
    )
    form_action_url: str = Field(
        default="https://app.proforms.top/f/{api_key}",
        description="Hosted form endpoint; {api_key} is filled from proforms_api_key",
    )

    # Public site
    site_url: str = Field(
        default="http://localhost:3000",
        description="Origin used to build shareable referral links",
    )

    # HTTP Client
    request_timeout_seconds: float = 30.0

    # Rate Limiting
    signup_rate_limit: str = Field(
        default="10/minute",
        description="Join attempts allowed per client address",
    )
    rate_limit_storage_uri: str = "memory://"

    # Client state (CLI)
    state_dir: Path = Field(
        default=Path("./.waitlist"),
        description="Directory holding the CLI's client state file",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["console", "json"] = "console"


# Global settings instance
settings = Settings()
