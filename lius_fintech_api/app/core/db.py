"""
Flat-file JSON persistence.

The whole persistence layer consists of two JSON array files, one for
users and one for transactions.  ``JsonStore`` reads and writes them
wholesale.  Mutations go through ``JsonStore.transaction()``, which
holds a process-wide lock for the entire read-modify-write cycle and
only writes back once the block has finished without error, so two
transfers in the same process can no longer overwrite each other's
balance update.

``init_db`` is called on application start; it creates the data
directory and empty collection files and binds the module-level store
returned by ``get_store``.
"""

import copy
import json
import logging
import os
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

from .config import settings
from .errors import StorageError

logger = logging.getLogger(__name__)

USERS = "users"
TRANSACTIONS = "transactions"
COLLECTIONS = (USERS, TRANSACTIONS)

Records = List[Dict[str, Any]]


class JsonStore:
    """Read and write the users and transactions collections."""

    def __init__(self, data_dir: Union[str, Path]) -> None:
        self.data_dir = Path(data_dir).resolve()
        self._files = {
            USERS: self.data_dir / settings.users_file,
            TRANSACTIONS: self.data_dir / settings.transactions_file,
        }
        self._lock = threading.RLock()

    def path_for(self, collection: str) -> Path:
        try:
            return self._files[collection]
        except KeyError:
            raise ValueError(f"Unknown collection {collection!r}") from None

    def read(self, collection: str) -> Records:
        """Return every record in ``collection``.

        A missing file is an empty collection.  An unreadable or
        unparsable file is logged and also treated as empty.
        """
        path = self.path_for(collection)
        if not path.exists():
            return []
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            logger.error("Error reading %s: %s", path, exc)
            return []
        if not isinstance(data, list):
            logger.error("Error reading %s: expected a JSON array, got %s", path, type(data).__name__)
            return []
        return data

    def write(self, collection: str, data: Records) -> None:
        """Overwrite ``collection`` with ``data``.

        The file is written next to its destination and then moved into
        place.  Any I/O failure is logged and raised as ``StorageError``.
        """
        path = self.path_for(collection)
        tmp_name = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", dir=path.parent, prefix=f".{path.name}.", delete=False
            ) as tmp:
                tmp_name = tmp.name
                json.dump(data, tmp, indent=2)
            os.replace(tmp_name, path)
        except OSError as exc:
            logger.error("Error writing to %s: %s", path, exc)
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageError(f"Could not save {collection}") from exc

    @contextmanager
    def transaction(self) -> Iterator[Dict[str, Records]]:
        """Hold the writer lock and yield both collections for mutation.

        The yielded mapping holds working copies keyed by collection
        name.  When the block exits normally, every collection whose
        contents changed is written back; if it raises, nothing is
        written.  If one write-back fails, the collections already
        written are restored to their original contents before the
        ``StorageError`` propagates.
        """
        with self._lock:
            original = {name: self.read(name) for name in COLLECTIONS}
            working = copy.deepcopy(original)
            yield working
            written: List[str] = []
            try:
                for name in COLLECTIONS:
                    if working[name] != original[name]:
                        self.write(name, working[name])
                        written.append(name)
            except StorageError:
                for name in written:
                    try:
                        self.write(name, original[name])
                    except StorageError:
                        logger.error("Could not restore %s after a failed write", name)
                raise

    def ensure_files(self) -> None:
        """Create the data directory and any missing collection file."""
        for name in COLLECTIONS:
            path = self.path_for(name)
            if not path.exists():
                self.write(name, [])
                logger.info("Created %s", path)


_store: Optional[JsonStore] = None


def init_db(data_dir: Optional[Union[str, Path]] = None) -> JsonStore:
    """Bind the module store to ``data_dir`` and create missing files.

    ``data_dir`` defaults to ``settings.data_dir``.  Relative paths are
    resolved against the current working directory.
    """
    global _store
    _store = JsonStore(data_dir or settings.data_dir)
    _store.ensure_files()
    return _store


def get_store() -> JsonStore:
    """Return the module store, initialising it from settings on first use."""
    if _store is None:
        return init_db()
    return _store
