"""Custom exceptions for the staking ledger.

Engine, store and service exceptions live here to avoid circular
imports between modules. Malformed transaction rows are never an
exception: the aggregator drops them silently.
"""


class LedgerError(Exception):
    """Base exception for all ledger errors."""


class IngestError(LedgerError):
    """Raised when the source transaction workbook cannot be read."""


class ExportError(LedgerError):
    """Raised when the summary workbook cannot be written."""


class StoreError(LedgerError):
    """Raised when the wallet store is unavailable or a write fails."""


class WalletNotFoundError(LedgerError):
    """Raised when a wallet address has no persisted record."""

    def __init__(self, wallet_address: str) -> None:
        super().__init__(f"Wallet not found: {wallet_address}")
        self.wallet_address = wallet_address


class AmountPrecisionError(LedgerError):
    """Raised when an amount cannot be summed or rounded without losing digits."""
