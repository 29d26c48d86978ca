import json
import logging
import os

import pytest

from lius_fintech_api.app.core import db
from lius_fintech_api.app.core.db import TRANSACTIONS, USERS, JsonStore
from lius_fintech_api.app.core.errors import StorageError


def test_init_db_creates_empty_collections(store):
    assert store.path_for(USERS).exists()
    assert store.path_for(TRANSACTIONS).exists()
    assert store.read(USERS) == []
    assert store.read(TRANSACTIONS) == []


def test_missing_file_reads_as_empty(tmp_path):
    store = JsonStore(tmp_path / "nowhere")
    assert store.read(USERS) == []


def test_unparsable_file_reads_as_empty_and_logs(store, caplog):
    store.path_for(USERS).write_text("{not json", encoding="utf-8")
    with caplog.at_level(logging.ERROR, logger="lius_fintech_api.app.core.db"):
        assert store.read(USERS) == []
    assert "Error reading" in caplog.text


def test_non_array_file_reads_as_empty(store):
    store.path_for(TRANSACTIONS).write_text('{"id": "x"}', encoding="utf-8")
    assert store.read(TRANSACTIONS) == []


def test_write_overwrites_wholesale(store):
    store.write(USERS, [{"id": "a"}, {"id": "b"}])
    store.write(USERS, [{"id": "c"}])
    assert store.read(USERS) == [{"id": "c"}]
    assert json.loads(store.path_for(USERS).read_text(encoding="utf-8")) == [{"id": "c"}]


def test_write_failure_is_raised(store, monkeypatch, caplog):
    def boom(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(db.os, "replace", boom)
    with caplog.at_level(logging.ERROR, logger="lius_fintech_api.app.core.db"):
        with pytest.raises(StorageError):
            store.write(USERS, [{"id": "a"}])
    assert "disk full" in caplog.text
    assert store.read(USERS) == []
    leftovers = [name for name in os.listdir(store.data_dir) if name.startswith(".")]
    assert leftovers == []


def test_transaction_writes_changes_on_success(store):
    with store.transaction() as data:
        data[USERS].append({"id": "a"})
    assert store.read(USERS) == [{"id": "a"}]


def test_transaction_discards_changes_on_error(store):
    store.write(USERS, [{"id": "a", "balance": 10.0}])
    with pytest.raises(RuntimeError):
        with store.transaction() as data:
            data[USERS][0]["balance"] = 0.0
            data[TRANSACTIONS].append({"id": "t"})
            raise RuntimeError("abort")
    assert store.read(USERS) == [{"id": "a", "balance": 10.0}]
    assert store.read(TRANSACTIONS) == []


def test_transaction_skips_unchanged_collections(store, monkeypatch):
    written = []
    original_write = store.write

    def tracking_write(collection, data):
        written.append(collection)
        original_write(collection, data)

    monkeypatch.setattr(store, "write", tracking_write)
    with store.transaction() as data:
        data[TRANSACTIONS].append({"id": "t"})
    assert written == [TRANSACTIONS]


def test_unknown_collection_is_rejected(store):
    with pytest.raises(ValueError):
        store.read("accounts")


def test_get_store_initialises_lazily(tmp_path, monkeypatch):
    monkeypatch.setattr(db.settings, "data_dir", str(tmp_path / "lazy"))
    db._store = None
    store = db.get_store()
    assert store.data_dir == (tmp_path / "lazy").resolve()
    assert store.path_for(USERS).exists()


def test_health_reports_missing_collections(client, store):
    assert client.get("/health").json() == {"status": "ok"}
    store.path_for(TRANSACTIONS).unlink()
    body = client.get("/health").json()
    assert body["status"] == "error"
    assert "transactions" in body["details"]


def test_transaction_restores_earlier_writes_when_a_later_one_fails(store, monkeypatch):
    store.write(USERS, [{"id": "a", "balance": 10.0}])
    real_replace = os.replace

    def fail_transactions(src, dst):
        if str(dst).endswith("transactions.json"):
            raise OSError("disk full")
        real_replace(src, dst)

    monkeypatch.setattr(db.os, "replace", fail_transactions)
    with pytest.raises(StorageError, match="transactions"):
        with store.transaction() as data:
            data[USERS][0]["balance"] = 0.0
            data[TRANSACTIONS].append({"id": "t"})
    assert store.read(USERS) == [{"id": "a", "balance": 10.0}]
    assert store.read(TRANSACTIONS) == []
