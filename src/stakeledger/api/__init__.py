"""HTTP API for batch runs, wallet lookups and manual staking."""

from stakeledger.api.app import create_app

__all__ = ["create_app"]
