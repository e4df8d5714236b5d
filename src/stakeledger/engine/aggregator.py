"""Transaction aggregation: raw row table to per-wallet batch totals.

Row layout (0-based cell indices):
  2 = wallet address
  5 = transaction date (text timestamp or spreadsheet serial)
  6 = transaction amount

The first row is a header and is always skipped. Rows whose date or
amount cannot be parsed, or whose amount is not positive, are dropped
silently; that is data-quality filtering, not an error.

CRITICAL: All amounts are Decimal. Float cells are converted through
their shortest repr so 0.1 stays Decimal("0.1").
"""

from collections.abc import Iterable, Sequence
from decimal import Decimal, InvalidOperation
from typing import Any

from stakeledger.engine.dates import normalize_instant
from stakeledger.engine.money import add
from stakeledger.engine.rules import classify_instant
from stakeledger.logging import get_logger
from stakeledger.models import TransactionRecord, WalletAggregate

logger = get_logger(__name__)

WALLET_COLUMN = 2
DATE_COLUMN = 5
AMOUNT_COLUMN = 6


def parse_amount(value: Any) -> Decimal | None:
    """Parse a transaction amount cell as a finite Decimal.

    Returns None for missing, boolean, non-numeric ("N/A"), NaN or
    infinite values. Sign is not checked here.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float)):
        amount = Decimal(str(value))
    elif isinstance(value, str):
        try:
            amount = Decimal(value.strip())
        except InvalidOperation:
            return None
    else:
        return None

    if not amount.is_finite():
        return None
    return amount


def _wallet_address(value: Any) -> str | None:
    if value is None:
        return None
    address = value if isinstance(value, str) else str(value)
    return address or None


def parse_row(row: Sequence[Any]) -> tuple[str, TransactionRecord] | None:
    """Turn a single raw row into (wallet_address, TransactionRecord).

    Returns None when the row must be dropped.
    """
    if len(row) <= AMOUNT_COLUMN:
        return None

    wallet_address = _wallet_address(row[WALLET_COLUMN])
    if wallet_address is None:
        return None

    instant = normalize_instant(row[DATE_COLUMN])
    amount = parse_amount(row[AMOUNT_COLUMN])
    if instant is None or amount is None or amount <= 0:
        return None

    rule = classify_instant(instant)
    if rule is None:
        return None

    staking_amount, reward_amount = rule.split(amount)
    return wallet_address, TransactionRecord(
        instant=instant,
        amount=amount,
        staking_amount=staking_amount,
        reward_amount=reward_amount,
        rule_applied=rule.category,
    )


def fold_transaction(aggregate: WalletAggregate, record: TransactionRecord) -> None:
    """Add one transaction to a wallet aggregate in place.

    The aggregate's category is overwritten with the record's rule tag.

    Raises:
        AmountPrecisionError: If a total cannot be held exactly.
    """
    aggregate.total_staking_amount = add(aggregate.total_staking_amount, record.staking_amount)
    aggregate.total_reward_amount = add(aggregate.total_reward_amount, record.reward_amount)
    aggregate.category = record.rule_applied
    aggregate.transactions.append(record)


def aggregate_transactions(
    rows: Iterable[Sequence[Any]],
) -> dict[str, WalletAggregate]:
    """Aggregate a raw transaction table into per-wallet batch totals.

    Args:
        rows: Row table including its header row. Rows are processed in
            order, which decides each wallet's last-write-wins category.

    Returns:
        Mapping of wallet address (exact, case-sensitive) to its
        WalletAggregate, in first-seen order.
    """
    aggregates: dict[str, WalletAggregate] = {}
    accepted = 0
    dropped = 0

    for index, row in enumerate(rows):
        if index == 0:
            continue

        parsed = parse_row(row)
        if parsed is None:
            dropped += 1
            continue

        wallet_address, record = parsed
        aggregate = aggregates.get(wallet_address)
        if aggregate is None:
            aggregate = WalletAggregate(wallet_address=wallet_address)
            aggregates[wallet_address] = aggregate
        fold_transaction(aggregate, record)
        accepted += 1

    logger.debug(
        "transactions_aggregated",
        wallets=len(aggregates),
        accepted=accepted,
        dropped=dropped,
    )
    return aggregates
