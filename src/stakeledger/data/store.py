"""Typed SQLite read/write abstraction for wallets and manual staking entries.

Provides WalletStore with find/save methods keyed by wallet address and
the separate manual staking collection. All SQL is isolated behind this
interface.

CRITICAL: Money values are stored as TEXT in SQLite and restored as
Decimal on read. A wallet's staking list is stored as a JSON array of
tagged entries ("kind": "derived" | "manual").
"""

import json
import time
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

import aiosqlite

from stakeledger.data.database import LedgerDatabase
from stakeledger.engine.rules import rule_for_category
from stakeledger.exceptions import StoreError
from stakeledger.logging import get_logger
from stakeledger.models import (
    Category,
    DerivedStakingEntry,
    ManualStakingEntry,
    PersistedWallet,
    StakingEntry,
    StakingRecord,
    TransactionRecord,
)

logger = get_logger(__name__)


# ──────────────────────────────────────────────
# Staking entry encoding
# ──────────────────────────────────────────────


def encode_staking_entry(entry: StakingEntry) -> dict[str, Any]:
    """Convert a staking entry to its JSON-ready dict form."""
    if isinstance(entry, DerivedStakingEntry):
        record = entry.transaction
        return {
            "kind": entry.kind,
            "dateTime": record.instant.isoformat(),
            "amount": str(record.amount),
            "stakingAmount": str(record.staking_amount),
            "rewardAmount": str(record.reward_amount),
            "ruleApplied": rule_for_category(record.rule_applied).label,
            "category": record.rule_applied.value,
        }
    return {
        "kind": entry.kind,
        "stakedAmount": entry.staked_amount,
        "APR": entry.apr,
        "LockDate": entry.lock_date,
        "MaxUnlockDate": entry.max_unlock_date,
        "RewardsNow": entry.rewards_now,
        "RewardsMUD": entry.rewards_mud,
    }


def decode_staking_entry(data: dict[str, Any]) -> StakingEntry:
    """Rebuild a staking entry from its dict form.

    Raises:
        ValueError: If the entry kind is unknown or a field is malformed.
    """
    kind = data.get("kind")
    if kind == "derived":
        return DerivedStakingEntry(
            transaction=TransactionRecord(
                instant=datetime.fromisoformat(data["dateTime"]),
                amount=Decimal(data["amount"]),
                staking_amount=Decimal(data["stakingAmount"]),
                reward_amount=Decimal(data["rewardAmount"]),
                rule_applied=Category(data["category"]),
            )
        )
    if kind == "manual":
        return ManualStakingEntry(
            staked_amount=data.get("stakedAmount"),
            apr=data.get("APR"),
            lock_date=data.get("LockDate"),
            max_unlock_date=data.get("MaxUnlockDate"),
            rewards_now=data.get("RewardsNow"),
            rewards_mud=data.get("RewardsMUD"),
        )
    raise ValueError(f"Unknown staking entry kind: {kind!r}")


def _decimal_or_none(value: str | None) -> Decimal | None:
    return Decimal(value) if value is not None else None


def _text_or_none(value: Decimal | None) -> str | None:
    return str(value) if value is not None else None


class WalletStore:
    """Async SQLite store for persisted wallets and manual staking entries.

    Wraps LedgerDatabase with typed read/write methods. Every aiosqlite
    failure surfaces as StoreError; nothing is retried.

    Usage:
        async with LedgerDatabase("data/ledger.db") as database:
            store = WalletStore(database)
            wallet = await store.find_one("0xabc")
    """

    def __init__(self, database: LedgerDatabase) -> None:
        self._database = database

    # ──────────────────────────────────────────────
    # Wallets
    # ──────────────────────────────────────────────

    async def find_one(self, wallet_address: str) -> PersistedWallet | None:
        """Look up a wallet by its exact address."""
        try:
            cursor = await self._database.db.execute(
                "SELECT wallet_address, category, staking, reward_amount, staking_amount "
                "FROM wallets WHERE wallet_address = ?",
                (wallet_address,),
            )
            row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise StoreError(f"Failed to read wallet {wallet_address}: {e}") from e

        if row is None:
            return None
        return self._row_to_wallet(row)

    async def find_all(self) -> list[PersistedWallet]:
        """Return every persisted wallet (no particular order)."""
        try:
            cursor = await self._database.db.execute(
                "SELECT wallet_address, category, staking, reward_amount, staking_amount "
                "FROM wallets"
            )
            rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            raise StoreError(f"Failed to list wallets: {e}") from e
        return [self._row_to_wallet(row) for row in rows]

    async def save(self, wallet: PersistedWallet) -> None:
        """Insert or replace a wallet record, keyed by wallet address."""
        staking_json = json.dumps([encode_staking_entry(e) for e in wallet.staking])
        try:
            await self._database.db.execute(
                "INSERT INTO wallets "
                "(wallet_address, category, staking, reward_amount, staking_amount) "
                "VALUES (?, ?, ?, ?, ?) "
                "ON CONFLICT(wallet_address) DO UPDATE SET "
                "category = excluded.category, "
                "staking = excluded.staking, "
                "reward_amount = excluded.reward_amount, "
                "staking_amount = excluded.staking_amount",
                (
                    wallet.wallet_address,
                    wallet.category.value if wallet.category is not None else None,
                    staking_json,
                    _text_or_none(wallet.reward_amount),
                    _text_or_none(wallet.staking_amount),
                ),
            )
            await self._database.db.commit()
        except aiosqlite.Error as e:
            raise StoreError(f"Failed to save wallet {wallet.wallet_address}: {e}") from e

        logger.debug(
            "wallet_saved",
            wallet_address=wallet.wallet_address,
            staking_entries=len(wallet.staking),
        )

    # ──────────────────────────────────────────────
    # Manual staking collection
    # ──────────────────────────────────────────────

    async def insert_staking_entry(self, record: StakingRecord) -> StakingRecord:
        """Insert a manual staking record and return it with id and created_at set."""
        created_at = int(time.time() * 1000)
        try:
            cursor = await self._database.db.execute(
                "INSERT INTO staking_entries "
                "(wallet_address, staked_amount, apr_daily, lock_date, "
                "max_unlock_date, rewards_now, rewards_mud, created_at) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    record.wallet_address,
                    record.staked_amount,
                    record.apr_daily,
                    record.lock_date,
                    record.max_unlock_date,
                    record.rewards_now,
                    record.rewards_mud,
                    created_at,
                ),
            )
            await self._database.db.commit()
        except aiosqlite.Error as e:
            raise StoreError(
                f"Failed to save staking entry for {record.wallet_address}: {e}"
            ) from e

        record.id = cursor.lastrowid
        record.created_at = created_at
        return record

    async def find_staking_entries(
        self, wallet_address: str | None = None
    ) -> list[StakingRecord]:
        """Return manual staking records, optionally for a single wallet.

        Ordered by insertion (id ASC).
        """
        query = (
            "SELECT id, wallet_address, staked_amount, apr_daily, lock_date, "
            "max_unlock_date, rewards_now, rewards_mud, created_at FROM staking_entries"
        )
        params: list = []
        if wallet_address is not None:
            query += " WHERE wallet_address = ?"
            params.append(wallet_address)
        query += " ORDER BY id ASC"

        try:
            cursor = await self._database.db.execute(query, params)
            rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            raise StoreError(f"Failed to list staking entries: {e}") from e

        return [
            StakingRecord(
                id=row[0],
                wallet_address=row[1],
                staked_amount=row[2],
                apr_daily=row[3],
                lock_date=row[4],
                max_unlock_date=row[5],
                rewards_now=row[6],
                rewards_mud=row[7],
                created_at=row[8],
            )
            for row in rows
        ]

    # ──────────────────────────────────────────────
    # Helpers
    # ──────────────────────────────────────────────

    @staticmethod
    def _row_to_wallet(row: Any) -> PersistedWallet:
        try:
            staking = [decode_staking_entry(item) for item in json.loads(row[2])]
        except (ValueError, KeyError, TypeError, InvalidOperation) as e:
            raise StoreError(f"Corrupt staking list for wallet {row[0]}: {e}") from e

        return PersistedWallet(
            wallet_address=row[0],
            category=Category(row[1]) if row[1] is not None else None,
            staking=staking,
            reward_amount=_decimal_or_none(row[3]),
            staking_amount=_decimal_or_none(row[4]),
        )
