"""
Business logic for balance transfers.

A transfer moves through ``REQUESTED → VALIDATED → APPLIED →
RECORDED``.  The first failing check rejects it with a specific
reason, in this order:

1. a required field is missing;
2. the amount is not a positive finite number;
3. the sender does not exist;
4. the recipient does not exist;
5. the recipient is the sender;
6. the sender's balance is lower than the amount;
7. the sender has a PIN and the supplied PIN does not match.

The complete cycle runs inside one store transaction, so a rejected
transfer writes nothing and concurrent transfers are serialised.
"""

import enum
import logging
import uuid
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, NamedTuple, Optional

from ..core.db import TRANSACTIONS, USERS, get_store
from ..core.errors import AuthError, NotFoundError, ValidationError
from ..core.security import verify_password
from ..schemas.common import quantize_money
from ..schemas.transaction import TransactionRecord
from .account_service import dump_user, find_user

logger = logging.getLogger(__name__)


class TransferState(str, enum.Enum):
    REQUESTED = "requested"
    VALIDATED = "validated"
    APPLIED = "applied"
    RECORDED = "recorded"
    REJECTED = "rejected"


class TransferResult(NamedTuple):
    new_balance: Decimal
    transaction: TransactionRecord


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def parse_amount(raw: Any) -> Decimal:
    """Parse a transfer amount into whole cents.

    Accepts ints, floats and numeric strings.  Raises ``ValidationError``
    for anything that is not a finite number greater than zero after
    rounding to cents.
    """
    if isinstance(raw, bool) or not isinstance(raw, (int, float, str, Decimal)):
        raise ValidationError("Invalid transfer amount")
    try:
        value = Decimal(str(raw).strip())
        if not value.is_finite():
            raise ValidationError("Invalid transfer amount")
        # Too many digits to express in cents.
        value = quantize_money(value)
    except InvalidOperation:
        raise ValidationError("Invalid transfer amount") from None
    if value <= 0:
        raise ValidationError("Invalid transfer amount")
    return value


class TransferService:
    """Execute transfers between two accounts."""

    @classmethod
    async def transfer(cls, from_user_id: Optional[str], to_username: Optional[str],
                       amount: Any, pin: Optional[str] = None) -> TransferResult:
        """Move ``amount`` from ``from_user_id`` to the account named ``to_username``.

        Returns the sender's new balance and the recorded transaction.
        """
        state = TransferState.REQUESTED
        try:
            if _is_missing(from_user_id) or _is_missing(to_username) or _is_missing(amount):
                raise ValidationError("From user, to username, and amount are required")
            value = parse_amount(amount)

            with get_store().transaction() as data:
                users = data[USERS]
                sender_index, sender = find_user(users, user_id=from_user_id)
                if sender is None:
                    raise NotFoundError("Sender not found")
                recipient_index, recipient = find_user(users, username=to_username.strip())
                if recipient is None:
                    raise NotFoundError("Recipient not found")
                if recipient.id == sender.id:
                    raise ValidationError("Cannot transfer to yourself")
                if sender.balance < value:
                    raise ValidationError("Insufficient balance")
                if sender.pin and not verify_password(pin or "", sender.pin):
                    raise AuthError("Invalid PIN")
                state = TransferState.VALIDATED

                sender.balance = quantize_money(sender.balance - value)
                recipient.balance = quantize_money(recipient.balance + value)
                users[sender_index] = dump_user(sender)
                users[recipient_index] = dump_user(recipient)
                state = TransferState.APPLIED

                record = TransactionRecord(
                    id=uuid.uuid4().hex,
                    fromUserId=sender.id,
                    fromUsername=sender.username,
                    toUserId=recipient.id,
                    toUsername=recipient.username,
                    amount=value,
                    date=datetime.now(timezone.utc),
                )
                data[TRANSACTIONS].append(record.model_dump(mode="json"))
            state = TransferState.RECORDED
        except (ValidationError, AuthError, NotFoundError) as exc:
            logger.info("Transfer %s at %s: %s", TransferState.REJECTED.value, state.value, exc.message)
            raise

        logger.info(
            "Transfer %s: %s -> %s %s",
            state.value, record.fromUsername, record.toUsername, record.amount,
        )
        return TransferResult(new_balance=sender.balance, transaction=record)
