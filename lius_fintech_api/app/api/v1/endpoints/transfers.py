"""
Transfer endpoint.
"""

from fastapi import APIRouter

from lius_fintech_api.app.schemas.common import ErrorResponse
from lius_fintech_api.app.schemas.transaction import TransferRequest, TransferResponse
from lius_fintech_api.app.services.transfer_service import TransferService


router = APIRouter()


@router.post(
    "/transfer",
    response_model=TransferResponse,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)
async def transfer(body: TransferRequest) -> TransferResponse:
    """Send money to another user by username.

    Returns the sender's new balance and the recorded transaction.  If
    the sender has set a PIN it must be supplied in ``pin``.
    """
    result = await TransferService.transfer(body.fromUserId, body.toUsername, body.amount, body.pin)
    return TransferResponse(
        message="Transfer successful",
        newBalance=result.new_balance,
        transaction=result.transaction,
    )
