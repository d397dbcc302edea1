"""
Configuration Management for the Wallet Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The snapshot format (separators), the dump directory and the I/O
retry policy are the only knobs; the ledger rules themselves are fixed.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LedgerSettings(BaseSettings):
    """
    Ledger and snapshot configuration.

    Loads configuration from WALLET_* environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="WALLET_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    dump_directory: Path = Field(
        default=Path("data"),
        description="Directory holding accounts.dump, payments.dump and favorites.dump"
    )

    # Snapshot format
    field_separator: str = Field(
        default=";",
        description="Separator between fields of one record"
    )
    row_separator: str = Field(
        default="\n",
        description="Separator between records"
    )

    # File I/O
    read_chunk_size: int = Field(
        default=4096,
        ge=1,
        le=1024 * 1024,
        description="Number of characters read per call when loading a dump file"
    )
    io_retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts for a dump file read/write before giving up"
    )

    log_level: str = Field(
        default="INFO",
        description="Log level for the structlog/stdlib logger"
    )

    @field_validator('field_separator', 'row_separator')
    @classmethod
    def validate_separator(cls, v: str) -> str:
        """Separators must be non-empty."""
        if not v:
            raise ValueError("Separator cannot be empty")
        return v

    @field_validator('log_level')
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @model_validator(mode='after')
    def validate_distinct_separators(self) -> 'LedgerSettings':
        """Field and row separators must not overlap, or rows cannot be split back."""
        if (
            self.field_separator in self.row_separator
            or self.row_separator in self.field_separator
        ):
            raise ValueError("Field and row separators must be distinct")
        return self


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
    def ledger(self) -> LedgerSettings:
        return LedgerSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.ledger
        results["ledger"] = True
    except Exception as e:
        results["ledger"] = False
        results["ledger_error"] = str(e)

    return results
