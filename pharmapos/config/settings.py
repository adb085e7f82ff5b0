"""
PharmaPOS settings.

Every section reads its own environment prefix (STORAGE_, PRICING_, API_);
top-level fields and a local .env file are read by Settings itself.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """SQLite database location and pool."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    data_dir: Path = Path("data")
    db_name: str = "pharmapos.db"

    pool_size: int = Field(default=5, ge=1)
    busy_timeout: int = 30000  # ms

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_name


class PricingSettings(BaseSettings):
    """VAT, price floor and document numbering."""

    model_config = SettingsConfigDict(env_prefix="PRICING_")

    default_vat_rate: float = Field(default=16.0, ge=0, le=100)
    # Floor for operator price overrides, as a margin over actual cost
    minimum_margin_percent: float = Field(default=33.0, ge=0)

    receipt_prefix: str = "WSB"
    credit_note_prefix: str = "CN"

    default_expiry_days: int = Field(default=365, ge=1)
    default_min_stock_level: int = Field(default=10, ge=0)

    @field_validator("receipt_prefix", "credit_note_prefix")
    @classmethod
    def normalize_prefix(cls, v: str) -> str:
        v = v.strip().upper()
        if not v:
            raise ValueError("document number prefix cannot be empty")
        return v


class APISettings(BaseSettings):
    """HTTP server and upload limits."""

    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    cors_origins: list[str] = ["*"]
    # Requests slower than this are logged as warnings
    slow_request_ms: int = 1000

    max_upload_size: int = 5 * 1024 * 1024  # 5 MB
    allowed_extensions: list[str] = [".csv"]

    @field_validator("allowed_extensions")
    @classmethod
    def normalize_extensions(cls, v: list[str]) -> list[str]:
        return [ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in v]


class Settings(BaseSettings):
    """Top-level PharmaPOS settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "PharmaPOS"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    # None renders JSON everywhere except development
    log_json: bool | None = None

    storage: StorageSettings = Field(default_factory=StorageSettings)
    pricing: PricingSettings = Field(default_factory=PricingSettings)
    api: APISettings = Field(default_factory=APISettings)


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings (for testing)."""
    global _settings
    _settings = None
