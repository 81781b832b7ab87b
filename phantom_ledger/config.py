"""
Configuration management using Pydantic Settings.
All parameters are loaded from environment variables with sensible defaults.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


APP_BASE_PATH = Path(os.environ.get("PHANTOM_LEDGER_BASE_PATH", Path.cwd()))
ENV_FILE_PATH = APP_BASE_PATH / ".env"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE_PATH),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Application
    app_env: str = Field(default="development")
    app_debug: bool = Field(default=False)
    app_log_level: str = Field(default="INFO")

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8787)

    # Upload limits (enforced at the HTTP boundary)
    max_files: int = Field(default=60)
    max_file_mb: int = Field(default=25)

    # Text layer
    min_text_chars: int = Field(default=40)

    # Layout reconstruction (PDF units)
    line_tolerance: float = Field(default=2.4)
    space_gap_threshold: float = Field(default=2.5)

    # Column matching (PDF units)
    debit_credit_column_threshold: float = Field(default=64.0)
    amount_column_threshold: float = Field(default=90.0)
    description_column_margin: float = Field(default=15.0)

    # AI-assisted description cleaning (Groq, OpenAI-compatible)
    groq_api_key: Optional[str] = Field(default=None)
    groq_api_url: str = Field(
        default="https://api.groq.com/openai/v1/chat/completions"
    )
    groq_model: str = Field(default="llama-3.3-70b-versatile")
    ai_clean_batch_size: int = Field(default=40)
    ai_clean_timeout_seconds: float = Field(default=15.0)
    ai_clean_max_attempts: int = Field(default=2)

    # Output
    preview_rows: int = Field(default=30)
    export_file_name: str = Field(default="PhantomLedgerExport.xlsx")

    @property
    def max_file_bytes(self) -> int:
        return self.max_file_mb * 1024 * 1024

    @property
    def ai_cleaning_enabled(self) -> bool:
        """AI cleaning is only available when a key is configured."""
        return bool(self.groq_api_key and self.groq_api_key.strip())

    @property
    def is_production(self) -> bool:
        return self.app_env.lower() == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
