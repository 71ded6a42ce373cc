"""
Configuration Management for the Wallet Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Defaults are chosen so the ledger works with no environment at all;
the environment only tunes aggregation and where snapshots land on disk.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LedgerSettings(BaseSettings):
    """Ledger service behaviour."""

    model_config = SettingsConfigDict(
        env_prefix="WALLET_LEDGER_",
        extra="ignore"
    )

    default_workers: int = Field(
        default=1,
        ge=0,
        le=64,
        description="Worker count used by sum_payments when none is given"
    )
    guard_reject: bool = Field(
        default=False,
        description="Refuse to reject a payment that is no longer in progress"
    )


class StorageSettings(BaseSettings):
    """Flat-file snapshot locations."""

    model_config = SettingsConfigDict(
        env_prefix="WALLET_STORAGE_",
        extra="ignore"
    )

    export_file: str = Field(
        default="data/export.txt",
        description="Target of the single-file account export"
    )
    dump_dir: str = Field(
        default="data",
        description="Directory holding the per-entity .dump files"
    )
    encoding: str = Field(
        default="utf-8",
        description="Text encoding of every snapshot file"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="WALLET_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    audit_history_size: int = Field(
        default=1000,
        ge=1,
        description="How many audit events are kept in memory"
    )


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

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

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

    Returns a dict of {setting_name: is_valid}, with an extra
    "<name>_error" entry for every section that failed to load.
    """
    results = {}

    settings = get_settings()

    for name in ("ledger", "storage", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
