"""
Configuration Management for PeerPay

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Ledger defaults (starting balance, receipt range) and the storage location
are validated once at startup instead of being scattered as literals.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Local key-value storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="PEERPAY_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    data_dir: Path = Field(
        default=Path.home() / ".peerpay",
        description="Directory holding one file per persisted key"
    )

    @field_validator('data_dir')
    @classmethod
    def expand_data_dir(cls, v: Path) -> Path:
        return v.expanduser()


class LedgerSettings(BaseSettings):
    """Ledger defaults."""

    model_config = SettingsConfigDict(
        env_prefix="PEERPAY_LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    default_balance: float = Field(
        default=100.0,
        description="Balance used when nothing has been persisted yet"
    )
    receipt_min: float = Field(
        default=5.0,
        ge=0.0,
        description="Smallest amount a simulated receipt scan can deduct"
    )
    receipt_max: float = Field(
        default=100.0,
        ge=0.0,
        description="Largest amount a simulated receipt scan can deduct"
    )

    @model_validator(mode='after')
    def validate_receipt_range(self) -> 'LedgerSettings':
        if self.receipt_max < self.receipt_min:
            raise ValueError("receipt_max cannot be below receipt_min")
        return self


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="PEERPAY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    log_level: str = Field(
        default="INFO",
        description="Standard library logging level name"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def ledger(self) -> LedgerSettings:
        return LedgerSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus a
    "<name>_error" entry for every section that failed.
    """
    results = {}
    settings = get_settings()

    for name in ("storage", "ledger", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except ValueError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
