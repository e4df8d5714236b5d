"""FastAPI application factory for the staking ledger API."""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from stakeledger.api import routes


def create_app(lifespan: Any = None, cors_origins: list[str] | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        lifespan: Optional async context manager for application lifespan
            events. main.py uses it to open the ledger database and put a
            LedgerService on app.state.service.
        cors_origins: Allowed CORS origins. Defaults to any origin.

    Returns:
        Configured FastAPI application with CORS and routes.
    """
    app = FastAPI(
        title="Staking Ledger",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins or ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Wired by the lifespan
    app.state.service = None

    app.include_router(routes.router)

    return app
