import asyncio

from lius_fintech_api.app.core.db import TRANSACTIONS, USERS, JsonStore
from lius_fintech_api.app.schemas.transaction import TransactionRecord
from lius_fintech_api.app.schemas.user import UserRecord
from lius_fintech_api.app.services.account_service import AccountService
from lius_fintech_api.app.services.transfer_service import TransferService


def test_records_survive_a_write_read_cycle(store):
    alice = asyncio.run(AccountService.register("alice", "secret123"))
    asyncio.run(AccountService.register("bob", "secret123"))
    asyncio.run(AccountService.set_pin(alice, "secret123", "9876"))
    result = asyncio.run(TransferService.transfer(alice, "bob", "33.33", pin="9876"))

    users = [UserRecord.model_validate(row) for row in store.read(USERS)]
    [txn] = [TransactionRecord.model_validate(row) for row in store.read(TRANSACTIONS)]
    assert txn == result.transaction

    # Re-open the same directory with a fresh store and write everything back.
    reopened = JsonStore(store.data_dir)
    reopened.write(USERS, [u.model_dump(mode="json", exclude_none=True) for u in users])
    reopened.write(TRANSACTIONS, [txn.model_dump(mode="json")])

    assert [UserRecord.model_validate(row) for row in reopened.read(USERS)] == users
    assert [TransactionRecord.model_validate(row) for row in reopened.read(TRANSACTIONS)] == [txn]


def test_legacy_fields_are_ignored(store):
    store.write(USERS, [{
        "id": "abc",
        "username": "legacy",
        "password": "00$00",
        "balance": 12.5,
        "faceImage": "data:image/png;base64,AAAA",
        "createdAt": "2024-05-01T10:00:00.000Z",
    }])
    [user] = [UserRecord.model_validate(row) for row in store.read(USERS)]
    assert str(user.balance) == "12.50"
    assert user.pin is None
