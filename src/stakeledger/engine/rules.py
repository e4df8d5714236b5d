"""Date-window staking rules.

Three fixed UTC boundaries split time into half-open windows. Each window
maps a transaction amount to a staking allocation and a reward; the reward
is always the full amount.

| Rule | Window                        | Staking | Reward |
|------|-------------------------------|---------|--------|
| 1    | before 2024-06-17             | 50%     | 100%   |
| 2    | 2024-06-17 up to 2024-08-01   | 25%     | 100%   |
| 3    | from 2024-08-01               | 50%     | 100%   |

Lower bounds are inclusive, upper bounds exclusive: an instant exactly on
a boundary belongs to the later rule.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal

from stakeledger.engine.money import multiply
from stakeledger.models import Category

JUNE_17 = datetime(2024, 6, 17, tzinfo=timezone.utc)
AUGUST_1 = datetime(2024, 8, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class Rule:
    """A single date-window policy.

    ``starts_at`` is inclusive and ``ends_at`` exclusive; None means the
    window is open on that side.
    """

    number: int
    category: Category
    staking_fraction: Decimal
    reward_fraction: Decimal
    starts_at: datetime | None = None
    ends_at: datetime | None = None

    @property
    def label(self) -> str:
        """Human-readable rule name, e.g. 'Rule 1: soldBeforeJune17'."""
        return f"Rule {self.number}: {self.category.value}"

    def contains(self, instant: datetime) -> bool:
        """Whether the instant falls inside this rule's window."""
        if self.starts_at is not None and instant < self.starts_at:
            return False
        if self.ends_at is not None and instant >= self.ends_at:
            return False
        return True

    def split(self, amount: Decimal) -> tuple[Decimal, Decimal]:
        """Return (staking_amount, reward_amount) for a transaction amount."""
        return multiply(amount, self.staking_fraction), multiply(amount, self.reward_fraction)


RULES: tuple[Rule, ...] = (
    Rule(
        number=1,
        category=Category.SOLD_BEFORE_JUNE_17,
        staking_fraction=Decimal("0.5"),
        reward_fraction=Decimal("1"),
        ends_at=JUNE_17,
    ),
    Rule(
        number=2,
        category=Category.PURCHASED_BEFORE_AUGUST_1_AND_SOLD_AFTER_JUNE_17,
        staking_fraction=Decimal("0.25"),
        reward_fraction=Decimal("1"),
        starts_at=JUNE_17,
        ends_at=AUGUST_1,
    ),
    Rule(
        number=3,
        category=Category.PURCHASED_AFTER_JULY_22,
        staking_fraction=Decimal("0.5"),
        reward_fraction=Decimal("1"),
        starts_at=AUGUST_1,
    ),
)

_RULES_BY_CATEGORY = {rule.category: rule for rule in RULES}


def classify_instant(instant: datetime | None) -> Rule | None:
    """Return the rule whose window contains the instant.

    Naive datetimes are taken as UTC. Returns None for a missing instant;
    every real instant matches exactly one rule since the last window is
    open-ended.
    """
    if instant is None:
        return None
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)

    for rule in RULES:
        if rule.contains(instant):
            return rule
    return None


def rule_for_category(category: Category) -> Rule:
    """Look up the rule that assigns the given category."""
    return _RULES_BY_CATEGORY[category]
