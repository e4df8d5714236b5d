"""Async SQLite database manager for the wallet ledger.

Uses aiosqlite for non-blocking database operations with WAL mode
for concurrent read/write performance.
"""

import os
from typing import Self

import aiosqlite

from stakeledger.exceptions import StoreError
from stakeledger.logging import get_logger

logger = get_logger(__name__)

SCHEMA_VERSION = 1

_CREATE_TABLES_SQL = """
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY
);

CREATE TABLE IF NOT EXISTS wallets (
    wallet_address TEXT PRIMARY KEY,
    category TEXT,
    staking TEXT NOT NULL DEFAULT '[]',
    reward_amount TEXT,
    staking_amount TEXT
);

CREATE TABLE IF NOT EXISTS staking_entries (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    wallet_address TEXT NOT NULL,
    staked_amount TEXT,
    apr_daily TEXT,
    lock_date TEXT,
    max_unlock_date TEXT,
    rewards_now TEXT,
    rewards_mud TEXT,
    created_at INTEGER NOT NULL
);
"""

_CREATE_INDEXES_SQL = """
CREATE INDEX IF NOT EXISTS idx_staking_entries_wallet
    ON staking_entries(wallet_address);
"""


class LedgerDatabase:
    """Async SQLite connection manager for the wallet ledger.

    Manages database lifecycle including schema creation, WAL mode
    configuration, and clean resource cleanup. One instance is the store
    handle shared by everything that reads or writes wallets.

    Usage:
        async with LedgerDatabase("data/ledger.db") as database:
            store = WalletStore(database)

        database = LedgerDatabase("data/ledger.db")
        await database.connect()
        try:
            ...
        finally:
            await database.close()
    """

    def __init__(self, db_path: str = "data/ledger.db") -> None:
        self._db_path = db_path
        self._connection: aiosqlite.Connection | None = None

    @property
    def db_path(self) -> str:
        return self._db_path

    @property
    def db(self) -> aiosqlite.Connection:
        """Access the raw aiosqlite connection.

        Raises StoreError if not connected.
        """
        if self._connection is None:
            raise StoreError("Database not connected. Call connect() first.")
        return self._connection

    async def connect(self) -> None:
        """Open database connection, configure pragmas, and create schema.

        Creates the parent directory if it does not exist.

        Raises:
            StoreError: If the database cannot be opened or initialized.
        """
        db_dir = os.path.dirname(self._db_path)
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)

        try:
            self._connection = await aiosqlite.connect(self._db_path)
            await self._connection.execute("PRAGMA journal_mode=WAL")
            await self._connection.execute("PRAGMA synchronous=NORMAL")
            await self._create_tables()
            await self._ensure_schema_version()
        except aiosqlite.Error as e:
            await self.close()
            raise StoreError(f"Failed to open ledger database {self._db_path}: {e}") from e

        logger.info("ledger_db_connected", db_path=self._db_path)

    async def close(self) -> None:
        """Close the database connection if open."""
        if self._connection is not None:
            await self._connection.close()
            self._connection = None
            logger.info("ledger_db_closed", db_path=self._db_path)

    async def _create_tables(self) -> None:
        assert self._connection is not None
        await self._connection.executescript(_CREATE_TABLES_SQL)
        await self._connection.executescript(_CREATE_INDEXES_SQL)
        await self._connection.commit()

    async def _ensure_schema_version(self) -> None:
        """Insert schema version if not already set."""
        assert self._connection is not None
        cursor = await self._connection.execute(
            "SELECT version FROM schema_version LIMIT 1"
        )
        row = await cursor.fetchone()
        if row is None:
            await self._connection.execute(
                "INSERT INTO schema_version (version) VALUES (?)",
                (SCHEMA_VERSION,),
            )
            await self._connection.commit()
            logger.info("schema_version_set", version=SCHEMA_VERSION)

    async def __aenter__(self) -> Self:
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # type: ignore[no-untyped-def]
        await self.close()
