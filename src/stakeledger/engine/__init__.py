"""Transaction classification and aggregation engine.

Stateless building blocks for a batch run: date normalization, date-window
rule classification, per-wallet aggregation, merging against persisted
wallet state, and export table formatting. No I/O happens here.
"""

from stakeledger.engine.aggregator import aggregate_transactions, parse_amount
from stakeledger.engine.dates import normalize_instant
from stakeledger.engine.export import EXPORT_HEADER, format_amount, format_export_table
from stakeledger.engine.merger import MergeResult, merge_wallet
from stakeledger.engine.rules import RULES, Rule, classify_instant

__all__ = [
    "EXPORT_HEADER",
    "MergeResult",
    "RULES",
    "Rule",
    "aggregate_transactions",
    "classify_instant",
    "format_amount",
    "format_export_table",
    "merge_wallet",
    "normalize_instant",
    "parse_amount",
]
