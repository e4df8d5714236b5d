"""Shared test fixtures for the staking ledger."""

import pytest

from stakeledger.config import ApiSettings, AppSettings, BatchSettings, StoreSettings


@pytest.fixture
def app_settings(tmp_path) -> AppSettings:
    """Return AppSettings pointing every file at a per-test temp directory."""
    return AppSettings(
        log_level="DEBUG",
        store=StoreSettings(db_path=str(tmp_path / "ledger.db")),
        batch=BatchSettings(
            input_path=str(tmp_path / "transactions.xlsx"),
            export_path=str(tmp_path / "wallets_staking_rewards.xlsx"),
        ),
        api=ApiSettings(),
    )
