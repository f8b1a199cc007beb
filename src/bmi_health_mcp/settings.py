"""Server settings.

All settings can be configured via environment variables with the prefix
BMI_HEALTH_ (e.g. BMI_HEALTH_TOOL_TIMEOUT_SECONDS=5) or a `.env` file. A few
hosting conventions are honoured as well: PORT, ASSETS_ROOT and
RENDER_GIT_COMMIT.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from bmi_health_mcp.transport_security import TransportSecuritySettings


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="BMI_HEALTH_",
        env_file=".env",
        env_nested_delimiter="__",
        populate_by_name=True,
        extra="ignore",
    )

    # Server settings
    debug: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    # HTTP settings
    host: str = "0.0.0.0"
    port: int = Field(default=8000, validation_alias=AliasChoices("BMI_HEALTH_PORT", "PORT", "port"))
    sse_path: str = "/mcp"
    message_path: str = "/mcp/messages"
    health_path: str = "/health"
    cors_allow_origins: list[str] = Field(default_factory=lambda: ["*"])

    # Widget settings
    assets_dir: Path = Field(
        default=Path("assets"),
        validation_alias=AliasChoices("BMI_HEALTH_ASSETS_DIR", "ASSETS_ROOT", "assets_dir"),
    )
    """Directory holding the built widget HTML. ASSETS_ROOT may point at its parent."""

    widget_version: str | None = Field(
        default=None,
        validation_alias=AliasChoices("BMI_HEALTH_WIDGET_VERSION", "RENDER_GIT_COMMIT", "widget_version"),
    )
    """Cache-busting suffix for the widget template URI, cut to seven characters.

    Defaults to the process start time.
    """

    public_base_url: str = "http://localhost:8000"
    widget_connect_domains: list[str] = Field(default_factory=list)

    # Session settings
    tool_timeout_seconds: float | None = 10.0
    """Upper bound on one computation; None waits forever."""

    max_body_bytes: int = 1_000_000
    channel_buffer_size: int = 16
    sse_ping_interval: int = 15

    transport_security: TransportSecuritySettings | None = None

    @field_validator("assets_dir")
    @classmethod
    def _resolve_assets_dir(cls, value: Path) -> Path:
        # ASSETS_ROOT names the project root; accept it when it holds assets/
        nested = value / "assets"
        if nested.is_dir():
            return nested
        return value

    @field_validator("widget_version")
    @classmethod
    def _short_commit(cls, value: str | None) -> str | None:
        return value[:7] if value else value
