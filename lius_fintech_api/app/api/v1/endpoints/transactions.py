"""
Transaction history endpoint.
"""

from fastapi import APIRouter, Path

from lius_fintech_api.app.schemas.common import ErrorResponse
from lius_fintech_api.app.schemas.transaction import TransactionHistoryResponse
from lius_fintech_api.app.services.history_service import HistoryService


router = APIRouter()


@router.get(
    "/transactions/{user_id}",
    response_model=TransactionHistoryResponse,
    responses={404: {"model": ErrorResponse}},
)
async def list_transactions(user_id: str = Path(..., description="Account id")) -> TransactionHistoryResponse:
    """Return the user's transactions, newest first, tagged sent/received."""
    transactions = await HistoryService.list_for_user(user_id)
    return TransactionHistoryResponse(transactions=transactions)
