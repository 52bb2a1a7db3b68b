"""Application settings for the desktop core."""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings read from ``CLAUDE_DESKTOP_*`` variables or a local ``.env``."""

    model_config = SettingsConfigDict(
        env_prefix="CLAUDE_DESKTOP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Layout under the platform config directory
    app_namespace: str = "Claude"
    mcp_config_file: str = "claude_desktop_config.json"
    voice_dir_name: str = "voice"
    conversations_file: str = "conversations.json"
    voice_settings_file: str = "voice_settings.json"

    # External CLI login
    session_dir_name: str = ".claude"
    login_command: str = "claude"
    login_args: list[str] = ["auth", "login"]

    # Desktop helpers
    open_command: str = "xdg-open"

    # Logs
    log_level: str = "INFO"
    log_dir: str | None = None
    log_rotate_mb: int = 5
    log_backups: int = 7
    perf_threshold_ms: int = 100


@lru_cache()
def get_settings() -> Settings:
    """Return the cached settings instance."""
    return Settings()
