"""Configuration system using pydantic-settings with environment variable loading."""

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class StoreSettings(BaseSettings):
    """Wallet store (SQLite) settings."""

    model_config = SettingsConfigDict(env_prefix="STORE_")

    db_path: str = "data/ledger.db"


class BatchSettings(BaseSettings):
    """Transaction batch ingest and export locations.

    The export workbook lives at a fixed path and is overwritten by
    every batch run.
    """

    model_config = SettingsConfigDict(env_prefix="BATCH_")

    input_path: str = "transactions.xlsx"
    export_path: str = "wallets_staking_rewards.xlsx"
    export_sheet_name: str = "Wallet Staking & Rewards"


class ApiSettings(BaseSettings):
    """HTTP API server configuration."""

    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = "0.0.0.0"
    port: int = 3000
    cors_origins: list[str] = ["*"]


class AppSettings(BaseSettings):
    """Root application settings, composing all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    log_level: str = "INFO"
    log_format: Literal["console", "json"] = "console"
    store: StoreSettings = StoreSettings()
    batch: BatchSettings = BatchSettings()
    api: ApiSettings = ApiSettings()
