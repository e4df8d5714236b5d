"""Shared data models for the staking ledger.

CRITICAL: All monetary values use Decimal. Never use float for amounts,
staking allocations, or rewards. Rounding happens only when a value is
formatted for export or snapshotted into a new wallet record.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Literal


class Category(str, Enum):
    """Rule tag assigned to a transaction, and last-write-wins to its wallet."""

    SOLD_BEFORE_JUNE_17 = "soldBeforeJune17"
    PURCHASED_BEFORE_AUGUST_1_AND_SOLD_AFTER_JUNE_17 = (
        "purchasedBeforeAugust1AndSoldAfterJune17"
    )
    PURCHASED_AFTER_JULY_22 = "purchasedAfterJuly22"


@dataclass(frozen=True)
class TransactionRecord:
    """One valid transaction row after date normalization and classification."""

    instant: datetime  # always UTC-aware
    amount: Decimal
    staking_amount: Decimal
    reward_amount: Decimal
    rule_applied: Category


@dataclass
class WalletAggregate:
    """Per-wallet totals for a single batch run.

    Totals are exact sums of the records in ``transactions``; ``category``
    is the rule tag of the last record folded in, by row order.
    """

    wallet_address: str
    total_staking_amount: Decimal = Decimal("0")
    total_reward_amount: Decimal = Decimal("0")
    category: Category | None = None
    transactions: list[TransactionRecord] = field(default_factory=list)


@dataclass(frozen=True)
class DerivedStakingEntry:
    """Staking entry appended to a wallet by a batch merge."""

    transaction: TransactionRecord
    kind: Literal["derived"] = "derived"


@dataclass(frozen=True)
class ManualStakingEntry:
    """Staking entry submitted by hand for a wallet.

    Fields are kept as the submitted text; they are never reconciled with
    batch-derived entries.
    """

    staked_amount: str | None = None
    apr: str | None = None
    lock_date: str | None = None
    max_unlock_date: str | None = None
    rewards_now: str | None = None
    rewards_mud: str | None = None
    kind: Literal["manual"] = "manual"


StakingEntry = DerivedStakingEntry | ManualStakingEntry


@dataclass
class PersistedWallet:
    """Cumulative per-wallet state kept in the wallet store.

    ``staking`` is append-only across batches. ``staking_amount`` is a
    snapshot taken when the wallet is first created and is not refreshed
    by later merges.
    """

    wallet_address: str
    category: Category | None = None
    staking: list[StakingEntry] = field(default_factory=list)
    reward_amount: Decimal | None = None
    staking_amount: Decimal | None = None


@dataclass
class StakingRecord:
    """Row of the separate manual staking collection.

    Created alongside the ManualStakingEntry appended to the wallet.
    ``id`` and ``created_at`` are assigned by the store on insert.
    """

    wallet_address: str
    staked_amount: str | None = None
    apr_daily: str | None = None
    lock_date: str | None = None
    max_unlock_date: str | None = None
    rewards_now: str | None = None
    rewards_mud: str | None = None
    id: int | None = None
    created_at: int | None = None  # Unix milliseconds
