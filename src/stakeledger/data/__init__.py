"""Persistence and spreadsheet I/O layer.

Provides the SQLite ledger database, the typed wallet store, and workbook
read/write helpers used around the engine.
"""

from stakeledger.data.database import LedgerDatabase
from stakeledger.data.spreadsheet import read_sheet_rows, write_sheet_rows
from stakeledger.data.store import WalletStore, decode_staking_entry, encode_staking_entry

__all__ = [
    "LedgerDatabase",
    "WalletStore",
    "decode_staking_entry",
    "encode_staking_entry",
    "read_sheet_rows",
    "write_sheet_rows",
]
