from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ScaffolderSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Logging
    debug: bool = Field(default=False, alias="DEBUG")
    log_dir: str = Field(default="logs", alias="SCAFFOLDER_LOG_DIR")
    log_to_file: bool = Field(default=True, alias="SCAFFOLDER_LOG_TO_FILE")

    # import source for RetryOptions / WrapRequestOptions in generated helpers
    types_module: str = Field(default="typescript-scaffolder", alias="SCAFFOLDER_TYPES_MODULE")

    # Watch mode
    watch_debounce_ms: int = Field(default=300, alias="SCAFFOLDER_WATCH_DEBOUNCE_MS")


def load_settings() -> ScaffolderSettings:
    """Read settings from the environment (and .env when present)."""
    return ScaffolderSettings()
