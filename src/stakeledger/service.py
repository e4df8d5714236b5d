"""Ledger service: batch runs and manual staking submissions.

Glues the stateless engine to the wallet store. Every read-modify-write
on a wallet runs under that wallet address's asyncio.Lock, shared by
batch merges and manual submissions, so two operations on the same
wallet never interleave inside one process.

Batch flow:
1. Read the transaction workbook (optional, run_batch only)
2. Aggregate rows into per-wallet totals
3. For each wallet in first-seen order: find_one, merge, save
4. Build the export table and write the summary workbook

A failure part-way through leaves already-merged wallets persisted.
"""

import asyncio
import weakref
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any
from uuid import uuid4

import structlog

from stakeledger.config import BatchSettings
from stakeledger.data.spreadsheet import read_sheet_rows, write_sheet_rows
from stakeledger.data.store import WalletStore
from stakeledger.engine.aggregator import aggregate_transactions
from stakeledger.engine.export import format_export_table
from stakeledger.engine.merger import merge_wallet
from stakeledger.exceptions import WalletNotFoundError
from stakeledger.logging import get_logger
from stakeledger.models import (
    ManualStakingEntry,
    PersistedWallet,
    StakingRecord,
    WalletAggregate,
)

logger = get_logger(__name__)


@dataclass
class BatchResult:
    """Outcome of one batch run."""

    batch_id: str
    aggregates: dict[str, WalletAggregate]
    export_table: list[list[str]] = field(default_factory=list)
    created: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)
    export_path: str | None = None


class LedgerService:
    """Runs transaction batches and manual staking updates against a store.

    Args:
        store: Wallet store handle. The service holds no other state
            besides the per-wallet locks.
        batch_settings: Default workbook locations for run_batch.
    """

    def __init__(
        self,
        store: WalletStore,
        batch_settings: BatchSettings | None = None,
    ) -> None:
        self._store = store
        self._batch_settings = batch_settings or BatchSettings()
        # An entry lives only while a holder or waiter references its lock
        self._wallet_locks: weakref.WeakValueDictionary[str, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    def _lock_for(self, wallet_address: str) -> asyncio.Lock:
        lock = self._wallet_locks.get(wallet_address)
        if lock is None:
            lock = asyncio.Lock()
            self._wallet_locks[wallet_address] = lock
        return lock

    # ──────────────────────────────────────────────
    # Batches
    # ──────────────────────────────────────────────

    async def process_rows(self, rows: Iterable[Sequence[Any]]) -> BatchResult:
        """Aggregate a row table and merge every wallet into the store.

        Raises:
            StoreError: If a store read or write fails. Wallets merged
                before the failure remain persisted.
        """
        batch_id = uuid4().hex[:8]
        with structlog.contextvars.bound_contextvars(batch_id=batch_id):
            aggregates = aggregate_transactions(rows)
            result = BatchResult(batch_id=batch_id, aggregates=aggregates)

            for wallet_address, aggregate in aggregates.items():
                async with self._lock_for(wallet_address):
                    existing = await self._store.find_one(wallet_address)
                    merged = merge_wallet(aggregate, existing)
                    await self._store.save(merged.wallet)

                if merged.created:
                    result.created.append(wallet_address)
                else:
                    result.updated.append(wallet_address)

                logger.debug(
                    "wallet_merged",
                    wallet_address=wallet_address,
                    created=merged.created,
                    reward_amount=merged.wallet.reward_amount,
                    transactions=len(aggregate.transactions),
                    summary=merged.summary,
                )

            result.export_table = format_export_table(aggregates)

            logger.info(
                "batch_processed",
                wallets=len(aggregates),
                created=len(result.created),
                updated=len(result.updated),
            )
        return result

    async def run_batch(
        self,
        input_path: str | None = None,
        export_path: str | None = None,
    ) -> BatchResult:
        """Run a full batch from workbook to workbook.

        Defaults to the configured input and export paths. The export
        workbook is overwritten.

        Raises:
            IngestError: If the input workbook cannot be read (nothing is
                merged in that case).
            StoreError: If the store fails during merging.
            ExportError: If the summary workbook cannot be written.
        """
        input_path = input_path or self._batch_settings.input_path
        export_path = export_path or self._batch_settings.export_path

        rows = await asyncio.to_thread(read_sheet_rows, input_path)
        result = await self.process_rows(rows)
        result.export_path = await asyncio.to_thread(
            write_sheet_rows,
            export_path,
            result.export_table,
            self._batch_settings.export_sheet_name,
        )
        return result

    # ──────────────────────────────────────────────
    # Wallet queries
    # ──────────────────────────────────────────────

    async def list_wallets(self) -> list[PersistedWallet]:
        return await self._store.find_all()

    async def get_wallet(self, wallet_address: str) -> PersistedWallet:
        """Return a persisted wallet.

        Raises:
            WalletNotFoundError: If the address has no record.
        """
        wallet = await self._store.find_one(wallet_address)
        if wallet is None:
            raise WalletNotFoundError(wallet_address)
        return wallet

    # ──────────────────────────────────────────────
    # Manual staking
    # ──────────────────────────────────────────────

    async def add_manual_staking(
        self,
        wallet_address: str,
        entry: ManualStakingEntry,
    ) -> PersistedWallet:
        """Record a manual staking submission for an existing wallet.

        Saves a StakingRecord in the separate staking collection and
        appends the entry to the wallet's staking list. The two are not
        reconciled with batch-derived entries.

        Raises:
            WalletNotFoundError: If the wallet does not exist.
        """
        async with self._lock_for(wallet_address):
            wallet = await self.get_wallet(wallet_address)

            await self._store.insert_staking_entry(
                StakingRecord(
                    wallet_address=wallet_address,
                    staked_amount=entry.staked_amount,
                    apr_daily=entry.apr,
                    lock_date=entry.lock_date,
                    max_unlock_date=entry.max_unlock_date,
                    rewards_now=entry.rewards_now,
                    rewards_mud=entry.rewards_mud,
                )
            )

            wallet.staking.append(entry)
            await self._store.save(wallet)

        logger.info(
            "manual_staking_added",
            wallet_address=wallet_address,
            staked_amount=entry.staked_amount,
        )
        return wallet

    async def list_staking_entries(self) -> list[StakingRecord]:
        return await self._store.find_staking_entries()
