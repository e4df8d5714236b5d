"""Reconcile a batch aggregate against a wallet's persisted state.

Create: a wallet seen for the first time starts with an empty staking
list, the batch reward total, the batch category, and a two-decimal
snapshot of the batch staking total.

Merge: an existing wallet gets the batch transactions appended to its
staking list, the batch reward total added to its reward amount, and its
category overwritten. The staking amount snapshot is left as it was.

Replaying a batch is not idempotent: the same transactions are appended
again and the reward is added again.
"""

from dataclasses import dataclass, replace
from decimal import Decimal

from stakeledger.engine.export import summary_row
from stakeledger.engine.money import add, round_amount
from stakeledger.models import DerivedStakingEntry, PersistedWallet, WalletAggregate


@dataclass
class MergeResult:
    """Outcome of merging one wallet aggregate."""

    wallet: PersistedWallet
    created: bool
    summary: list[str]


def merge_wallet(
    aggregate: WalletAggregate,
    existing: PersistedWallet | None,
) -> MergeResult:
    """Compute a wallet's next persisted state from a batch aggregate.

    Pure: ``existing`` is not mutated; the caller saves ``result.wallet``.

    Args:
        aggregate: Batch totals for the wallet.
        existing: The wallet's current persisted record, or None.

    Returns:
        MergeResult with the next wallet state, whether it was newly
        created, and the wallet's export summary row.
    """
    summary = summary_row(aggregate)

    if existing is None:
        wallet = PersistedWallet(
            wallet_address=aggregate.wallet_address,
            category=aggregate.category,
            staking=[],
            reward_amount=aggregate.total_reward_amount,
            staking_amount=round_amount(aggregate.total_staking_amount),
        )
        return MergeResult(wallet=wallet, created=True, summary=summary)

    staking = list(existing.staking)
    staking.extend(DerivedStakingEntry(transaction=t) for t in aggregate.transactions)

    prior_reward = existing.reward_amount if existing.reward_amount is not None else Decimal("0")
    wallet = replace(
        existing,
        category=aggregate.category,
        staking=staking,
        reward_amount=add(prior_reward, aggregate.total_reward_amount),
    )
    return MergeResult(wallet=wallet, created=False, summary=summary)
