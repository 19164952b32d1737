"""Application configuration."""
from __future__ import annotations

from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings loaded from .env and STEPVIZ_* environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", env_prefix="STEPVIZ_", extra="ignore")

    renderer: Literal["fake", "docker", "http"] = "fake"
    mermaid_renderer_image: str = "minlag/mermaid-cli:latest"
    mermaid_server_url: str = Field(
        default="https://kroki.io/mermaid/svg",
        validation_alias=AliasChoices("STEPVIZ_MERMAID_SERVER_URL", "KROKI_URL"),
    )
    render_timeout: float = 30.0
    cache_max_entries: int = 20
    cache_fingerprint: Literal["weak", "content"] = "weak"  # weak matches the historical cache key
    autoplay_interval_ms: int = 2000
    default_target: str = "diagram-container"
    output_dir: str = "outputs"
    log_level: str = "INFO"


settings = Settings()
