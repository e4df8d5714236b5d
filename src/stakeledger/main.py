"""Entry point for the staking ledger API server.

Wires all components together and serves the FastAPI app with uvicorn.

Component wiring order:
1. AppSettings (configuration)
2. Logging setup
3. LedgerDatabase (SQLite store handle, opened in the lifespan)
4. WalletStore (typed wallet and staking entry access)
5. LedgerService (batch runs and manual staking, per-wallet locks)
"""

import asyncio
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from stakeledger.api.app import create_app
from stakeledger.config import AppSettings
from stakeledger.data.database import LedgerDatabase
from stakeledger.data.store import WalletStore
from stakeledger.logging import get_logger, setup_logging
from stakeledger.service import LedgerService


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the ledger database on startup and close it on shutdown.

    Stores the LedgerService on app.state for route handler access.
    """
    logger = get_logger("stakeledger.main")
    settings: AppSettings = app.state.settings

    database = LedgerDatabase(settings.store.db_path)
    await database.connect()

    store = WalletStore(database)
    app.state.service = LedgerService(store, settings.batch)

    logger.info(
        "lifespan_started",
        db_path=settings.store.db_path,
        input_path=settings.batch.input_path,
        export_path=settings.batch.export_path,
    )

    try:
        yield
    finally:
        await database.close()
        logger.info("staking_ledger_stopped")


async def run() -> None:
    """Run the staking ledger API server."""
    # 1. Load settings
    settings = AppSettings()

    # 2. Setup logging
    setup_logging(settings.log_level, settings.log_format)
    logger = get_logger("stakeledger.main")

    app = create_app(lifespan=lifespan, cors_origins=settings.api.cors_origins)
    app.state.settings = settings

    logger.info("starting_api", host=settings.api.host, port=settings.api.port)

    config = uvicorn.Config(
        app,
        host=settings.api.host,
        port=settings.api.port,
        log_level="warning",  # Suppress uvicorn access logs
    )
    server = uvicorn.Server(config)
    await server.serve()


def main() -> None:
    """Synchronous entry point."""
    asyncio.run(run())


if __name__ == "__main__":
    main()
