"""JSON endpoints for batch runs, wallet lookups and manual staking."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from stakeledger.data.store import encode_staking_entry
from stakeledger.exceptions import LedgerError, WalletNotFoundError
from stakeledger.models import ManualStakingEntry, PersistedWallet, StakingRecord
from stakeledger.service import LedgerService

log = structlog.get_logger(__name__)

router = APIRouter()

#: Request body key -> ManualStakingEntry field.
_MANUAL_STAKING_FIELDS = {
    "stakedAmount": "staked_amount",
    "APR": "apr",
    "LockDate": "lock_date",
    "MaxUnlockDate": "max_unlock_date",
    "RewardsNow": "rewards_now",
    "RewardsMUD": "rewards_mud",
}


def _decimal_to_str(value: Decimal | None) -> str | None:
    return str(value) if value is not None else None


def wallet_to_dict(wallet: PersistedWallet) -> dict[str, Any]:
    """Serialize a persisted wallet for JSON responses."""
    return {
        "walletAddress": wallet.wallet_address,
        "category": wallet.category.value if wallet.category is not None else None,
        "staking": [encode_staking_entry(entry) for entry in wallet.staking],
        "rewardAmount": _decimal_to_str(wallet.reward_amount),
        "stakingAmount": _decimal_to_str(wallet.staking_amount),
    }


def staking_record_to_dict(record: StakingRecord) -> dict[str, Any]:
    return {
        "id": record.id,
        "walletAddress": record.wallet_address,
        "stakedAmount": record.staked_amount,
        "aprDaily": record.apr_daily,
        "lockDate": record.lock_date,
        "maxUnlockDate": record.max_unlock_date,
        "rewardsNow": record.rewards_now,
        "rewardsMud": record.rewards_mud,
        "createdAt": record.created_at,
    }


def _service(request: Request) -> LedgerService:
    return request.app.state.service


@router.get("/get-wallets")
async def process_wallets(request: Request) -> JSONResponse:
    """Run a batch over the configured transaction workbook.

    Merges every wallet into the store and writes the summary workbook.
    """
    try:
        result = await _service(request).run_batch()
    except LedgerError as e:
        log.error("batch_failed", error=str(e))
        return JSONResponse(
            content={"error": "Failed to process wallets"}, status_code=500
        )

    return JSONResponse(content={
        "message": "Wallets processed and saved successfully",
        "excelFilePath": result.export_path,
        "batchId": result.batch_id,
        "wallets": result.export_table[1:],
    })


@router.get("/api/wallets")
async def list_wallets(request: Request) -> JSONResponse:
    """All persisted wallets."""
    try:
        wallets = await _service(request).list_wallets()
    except LedgerError as e:
        log.error("list_wallets_failed", error=str(e))
        return JSONResponse(
            content={"error": "Failed to fetch wallets"}, status_code=500
        )
    return JSONResponse(content=[wallet_to_dict(w) for w in wallets])


@router.get("/api/wallet-category/{wallet_address}")
async def get_wallet_category(request: Request, wallet_address: str) -> JSONResponse:
    """Category, staking list and reward amount for one wallet."""
    try:
        wallet = await _service(request).get_wallet(wallet_address)
    except WalletNotFoundError:
        return JSONResponse(content={"error": "Wallet not found"}, status_code=404)
    except LedgerError as e:
        log.error("wallet_category_failed", wallet_address=wallet_address, error=str(e))
        return JSONResponse(
            content={"error": "Failed to fetch wallet category"}, status_code=500
        )

    data = wallet_to_dict(wallet)
    return JSONResponse(content={
        "category": data["category"],
        "staking": data["staking"],
        "rewardAmount": data["rewardAmount"],
    })


@router.post("/api/wallet-staking/{wallet_address}")
async def add_wallet_staking(request: Request, wallet_address: str) -> JSONResponse:
    """Attach a manually submitted staking entry to an existing wallet.

    Expects a JSON object with any of: stakedAmount, APR, LockDate,
    MaxUnlockDate, RewardsNow, RewardsMUD. Values are stored as text.
    """
    try:
        body = await request.json()
    except Exception:
        return JSONResponse(
            content={"error": "Invalid JSON body"}, status_code=400
        )
    if not isinstance(body, dict):
        return JSONResponse(
            content={"error": "Request body must be a JSON object"}, status_code=400
        )

    kwargs = {
        field: str(body[key])
        for key, field in _MANUAL_STAKING_FIELDS.items()
        if body.get(key) is not None
    }

    try:
        wallet = await _service(request).add_manual_staking(
            wallet_address, ManualStakingEntry(**kwargs)
        )
    except WalletNotFoundError:
        return JSONResponse(content={"error": "Wallet not found"}, status_code=404)
    except LedgerError as e:
        log.error("add_staking_failed", wallet_address=wallet_address, error=str(e))
        return JSONResponse(
            content={"error": "Failed to add staking details"}, status_code=500
        )

    return JSONResponse(content={
        "message": "Staking details added successfully",
        "wallet": wallet_to_dict(wallet),
    })


@router.get("/api/staking-data")
async def list_staking_data(request: Request) -> JSONResponse:
    """All manually submitted staking records."""
    try:
        records = await _service(request).list_staking_entries()
    except LedgerError as e:
        log.error("staking_data_failed", error=str(e))
        return JSONResponse(
            content={"error": "Failed to fetch staking data"}, status_code=500
        )
    return JSONResponse(content=[staking_record_to_dict(r) for r in records])
