"""Flat summary table for a single batch run."""

from collections.abc import Mapping
from decimal import Decimal

from stakeledger.engine.money import round_amount
from stakeledger.models import WalletAggregate

EXPORT_HEADER = [
    "Wallet Address",
    "Total Staking Amount",
    "Total Reward Amount",
    "Category",
]


def format_amount(value: Decimal) -> str:
    """Format a money value as text with exactly two decimals."""
    # quantized to cents, so str() never switches to exponent notation
    return str(round_amount(value))


def summary_row(aggregate: WalletAggregate) -> list[str]:
    """Export row for one wallet aggregate."""
    return [
        aggregate.wallet_address,
        format_amount(aggregate.total_staking_amount),
        format_amount(aggregate.total_reward_amount),
        aggregate.category.value if aggregate.category is not None else "",
    ]


def format_export_table(aggregates: Mapping[str, WalletAggregate]) -> list[list[str]]:
    """Build the export table: header row, then one row per wallet.

    Wallets appear in mapping order, i.e. first-seen order in the batch.
    """
    table = [list(EXPORT_HEADER)]
    table.extend(summary_row(aggregate) for aggregate in aggregates.values())
    return table
