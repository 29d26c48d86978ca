"""
Pydantic models for transfers and the transaction ledger.
"""

from datetime import datetime
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, Field

from .common import Envelope, Money


class TransactionRecord(BaseModel):
    """An immutable ledger entry as stored in ``transactions.json``.

    Usernames are snapshots taken at transfer time.
    """

    id: str
    fromUserId: str
    fromUsername: str
    toUserId: str
    toUsername: str
    amount: Money
    date: datetime


class TransactionView(TransactionRecord):
    """A ledger entry as seen by one of its two parties."""

    type: Literal["sent", "received"]


class TransferRequest(BaseModel):
    fromUserId: Optional[str] = None
    toUsername: Optional[str] = Field(None, examples=["bob"])
    # Numbers and numeric strings are both accepted; parsed by the service.
    amount: Any = Field(None, examples=[50.0])
    pin: Optional[str] = None


class TransferResponse(Envelope):
    newBalance: Money
    transaction: TransactionRecord


class TransactionHistoryResponse(Envelope):
    transactions: List[TransactionView]
