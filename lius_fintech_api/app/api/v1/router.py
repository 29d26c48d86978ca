"""
Top‑level router for version 1 of the API.

The endpoint modules declare their full paths (``/register``,
``/transfer``, ...); the application mounts this router under a
common prefix.
"""

from fastapi import APIRouter

from .endpoints import accounts, transactions, transfers

router = APIRouter()

router.include_router(accounts.router, tags=["accounts"])
router.include_router(transfers.router, tags=["transfers"])
router.include_router(transactions.router, tags=["transactions"])
