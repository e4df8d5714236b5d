"""Tests for the SQLite wallet store.

Uses a real aiosqlite database in a per-test temp directory.
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from stakeledger.data.database import LedgerDatabase
from stakeledger.data.store import WalletStore, decode_staking_entry, encode_staking_entry
from stakeledger.exceptions import StoreError
from stakeledger.models import (
    Category,
    DerivedStakingEntry,
    ManualStakingEntry,
    PersistedWallet,
    StakingRecord,
    TransactionRecord,
)


def _derived(amount: str) -> DerivedStakingEntry:
    value = Decimal(amount)
    return DerivedStakingEntry(
        transaction=TransactionRecord(
            instant=datetime(2024, 7, 1, 10, tzinfo=timezone.utc),
            amount=value,
            staking_amount=value / 4,
            reward_amount=value,
            rule_applied=Category.PURCHASED_BEFORE_AUGUST_1_AND_SOLD_AFTER_JUNE_17,
        )
    )


class TestStakingEntryEncoding:
    def test_derived_entry_shape(self) -> None:
        data = encode_staking_entry(_derived("100"))
        assert data == {
            "kind": "derived",
            "dateTime": "2024-07-01T10:00:00+00:00",
            "amount": "100",
            "stakingAmount": "25",
            "rewardAmount": "100",
            "ruleApplied": "Rule 2: purchasedBeforeAugust1AndSoldAfterJune17",
            "category": "purchasedBeforeAugust1AndSoldAfterJune17",
        }

    def test_manual_entry_shape(self) -> None:
        entry = ManualStakingEntry(staked_amount="500", apr="0.2", lock_date="2024-09-01")
        data = encode_staking_entry(entry)
        assert data["kind"] == "manual"
        assert data["stakedAmount"] == "500"
        assert data["APR"] == "0.2"
        assert data["LockDate"] == "2024-09-01"
        assert data["RewardsMUD"] is None

    def test_decode_restores_decimals(self) -> None:
        entry = _derived("12.34")
        decoded = decode_staking_entry(encode_staking_entry(entry))
        assert decoded == entry
        assert isinstance(decoded.transaction.amount, Decimal)

    def test_decode_unknown_kind(self) -> None:
        with pytest.raises(ValueError, match="Unknown staking entry kind"):
            decode_staking_entry({"stakedAmount": "1"})


class TestWalletStore:
    @pytest.mark.asyncio
    async def test_find_one_missing(self, tmp_path) -> None:
        async with LedgerDatabase(str(tmp_path / "ledger.db")) as database:
            store = WalletStore(database)
            assert await store.find_one("0xnope") is None

    @pytest.mark.asyncio
    async def test_save_and_find(self, tmp_path) -> None:
        wallet = PersistedWallet(
            wallet_address="0xabc",
            category=Category.SOLD_BEFORE_JUNE_17,
            staking=[_derived("100"), ManualStakingEntry(staked_amount="7")],
            reward_amount=Decimal("300.10"),
            staking_amount=Decimal("150.05"),
        )
        async with LedgerDatabase(str(tmp_path / "ledger.db")) as database:
            store = WalletStore(database)
            await store.save(wallet)
            loaded = await store.find_one("0xabc")

        assert loaded == wallet

    @pytest.mark.asyncio
    async def test_save_upserts_by_address(self, tmp_path) -> None:
        async with LedgerDatabase(str(tmp_path / "ledger.db")) as database:
            store = WalletStore(database)
            await store.save(PersistedWallet(wallet_address="0xabc", reward_amount=Decimal("1")))
            await store.save(PersistedWallet(
                wallet_address="0xabc",
                category=Category.PURCHASED_AFTER_JULY_22,
                reward_amount=Decimal("2"),
            ))

            wallets = await store.find_all()

        assert len(wallets) == 1
        assert wallets[0].reward_amount == Decimal("2")
        assert wallets[0].category == Category.PURCHASED_AFTER_JULY_22

    @pytest.mark.asyncio
    async def test_address_lookup_is_case_sensitive(self, tmp_path) -> None:
        async with LedgerDatabase(str(tmp_path / "ledger.db")) as database:
            store = WalletStore(database)
            await store.save(PersistedWallet(wallet_address="0xABC"))
            assert await store.find_one("0xabc") is None
            assert await store.find_one("0xABC") is not None

    @pytest.mark.asyncio
    async def test_null_amounts_round_trip_as_none(self, tmp_path) -> None:
        async with LedgerDatabase(str(tmp_path / "ledger.db")) as database:
            store = WalletStore(database)
            await store.save(PersistedWallet(wallet_address="0xabc"))
            loaded = await store.find_one("0xabc")

        assert loaded is not None
        assert loaded.reward_amount is None
        assert loaded.staking_amount is None
        assert loaded.category is None
        assert loaded.staking == []

    @pytest.mark.asyncio
    async def test_persists_across_connections(self, tmp_path) -> None:
        db_path = str(tmp_path / "ledger.db")
        async with LedgerDatabase(db_path) as database:
            await WalletStore(database).save(
                PersistedWallet(wallet_address="0xabc", reward_amount=Decimal("5"))
            )
        async with LedgerDatabase(db_path) as database:
            loaded = await WalletStore(database).find_one("0xabc")

        assert loaded is not None
        assert loaded.reward_amount == Decimal("5")

    @pytest.mark.asyncio
    async def test_corrupt_staking_list_raises_store_error(self, tmp_path) -> None:
        async with LedgerDatabase(str(tmp_path / "ledger.db")) as database:
            await database.db.execute(
                "INSERT INTO wallets (wallet_address, staking) VALUES (?, ?)",
                ("0xabc", "not json"),
            )
            await database.db.commit()
            store = WalletStore(database)

            with pytest.raises(StoreError, match="Corrupt staking list"):
                await store.find_one("0xabc")

    @pytest.mark.asyncio
    async def test_not_connected_raises_store_error(self, tmp_path) -> None:
        store = WalletStore(LedgerDatabase(str(tmp_path / "ledger.db")))
        with pytest.raises(StoreError, match="not connected"):
            await store.find_one("0xabc")
        with pytest.raises(StoreError):
            await store.save(PersistedWallet(wallet_address="0xabc"))


class TestStakingEntries:
    @pytest.mark.asyncio
    async def test_insert_assigns_id_and_timestamp(self, tmp_path) -> None:
        async with LedgerDatabase(str(tmp_path / "ledger.db")) as database:
            store = WalletStore(database)
            record = await store.insert_staking_entry(
                StakingRecord(wallet_address="0xabc", staked_amount="100", apr_daily="0.05")
            )

        assert record.id is not None
        assert record.created_at is not None

    @pytest.mark.asyncio
    async def test_find_all_and_by_wallet(self, tmp_path) -> None:
        async with LedgerDatabase(str(tmp_path / "ledger.db")) as database:
            store = WalletStore(database)
            await store.insert_staking_entry(StakingRecord(wallet_address="0xaaa", staked_amount="1"))
            await store.insert_staking_entry(StakingRecord(wallet_address="0xbbb", staked_amount="2"))
            await store.insert_staking_entry(StakingRecord(wallet_address="0xaaa", staked_amount="3"))

            everything = await store.find_staking_entries()
            only_a = await store.find_staking_entries("0xaaa")

        assert [r.staked_amount for r in everything] == ["1", "2", "3"]
        assert [r.staked_amount for r in only_a] == ["1", "3"]
        assert all(r.wallet_address == "0xaaa" for r in only_a)

    @pytest.mark.asyncio
    async def test_entries_do_not_touch_wallets(self, tmp_path) -> None:
        async with LedgerDatabase(str(tmp_path / "ledger.db")) as database:
            store = WalletStore(database)
            await store.insert_staking_entry(StakingRecord(wallet_address="0xaaa"))
            assert await store.find_all() == []
