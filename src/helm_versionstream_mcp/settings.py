"""Application settings using pydantic-settings."""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="HELM_VS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    workspace_dir: Path = Field(
        default=Path.home() / ".helm-versionstream-mcp" / "workspace",
        description="Directory for version stream checkouts",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level",
    )

    # Version stream used when no jx-requirements.yml names one
    version_stream_url: str = Field(
        default="https://github.com/jenkins-x/jenkins-x-versions.git",
        description="Git URL (or local directory) of the version stream",
    )

    version_stream_ref: str = Field(
        default="master",
        description="Git ref of the version stream to check out",
    )

    providers_values_dir: Path = Field(
        default=Path("kubeProviders"),
        description="Directory holding {provider}/values.tmpl.yaml overrides",
    )

    # Server
    transport: Literal["stdio", "http"] = Field(
        default="stdio",
        description="MCP transport",
    )

    host: str = Field(default="127.0.0.1", description="HTTP bind host")

    port: int = Field(default=8000, description="HTTP bind port")

    auth_token: str | None = Field(
        default=None,
        description="Shared bearer token required for MCP HTTP requests",
    )


# Global settings instance - lazy loaded
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
