"""
Business logic for the transaction history.
"""

from typing import List

from ..core.db import TRANSACTIONS, USERS, get_store
from ..core.errors import NotFoundError
from ..schemas.transaction import TransactionRecord, TransactionView
from .account_service import find_user


class HistoryService:

    @classmethod
    async def list_for_user(cls, user_id: str) -> List[TransactionView]:
        """Return every transaction the user took part in, newest first.

        Each entry is tagged ``sent`` or ``received`` from the point of
        view of ``user_id``.  Entries with the same timestamp keep the
        most recently recorded one first.
        """
        store = get_store()
        _, user = find_user(store.read(USERS), user_id=user_id)
        if user is None:
            raise NotFoundError("User not found")

        involved = [
            (position, TransactionRecord.model_validate(row))
            for position, row in enumerate(store.read(TRANSACTIONS))
            if user_id in (row.get("fromUserId"), row.get("toUserId"))
        ]
        involved.sort(key=lambda item: (item[1].date, item[0]), reverse=True)
        return [
            TransactionView(
                **record.model_dump(),
                type="sent" if record.fromUserId == user_id else "received",
            )
            for _, record in involved
        ]
