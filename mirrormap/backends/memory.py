"""In-memory storage backend for testing."""

import copy
from typing import Any, Dict, Iterable, Iterator, List, Optional

from .base import StorageBackend, StoredRecord


class MemoryBackend(StorageBackend):
    """In-memory storage backend.

    Useful for testing and temporary storage. Data is lost when the
    backend is closed or the process ends.

    Example:
        backend = MemoryBackend()
        backend.connect()

        backend.create_table("settings")
        backend.put("settings", "guild1", '{"prefix":"!"}')
        record = backend.get("settings", "guild1")
    """

    def __init__(self):
        self._tables: Dict[str, Dict[str, str]] = {}
        self._counters: Dict[str, int] = {}
        self._connected = False

    def connect(self, **kwargs) -> None:
        """Initialize the in-memory store."""
        self._tables = {}
        self._counters = {}
        self._connected = True

    def close(self) -> None:
        """Clear the in-memory store."""
        self._tables.clear()
        self._counters.clear()
        self._connected = False

    def table_exists(self, table: str) -> bool:
        """Check whether a store table exists."""
        return table in self._tables

    def create_table(self, table: str) -> None:
        """Create a store table if it doesn't exist."""
        self._tables.setdefault(table, {})

    def drop_table(self, table: str) -> None:
        """Drop a store table."""
        self._tables.pop(table, None)

    def get(self, table: str, key: str) -> Optional[StoredRecord]:
        """Retrieve one row by key."""
        text = self._tables[table].get(key)
        if text is None:
            return None
        return StoredRecord(key, text)

    def get_many(self, table: str, keys: Iterable[str]) -> Iterator[StoredRecord]:
        """Retrieve every existing row among keys."""
        rows = self._tables[table]
        for key in dict.fromkeys(keys):
            if key in rows:
                yield StoredRecord(key, rows[key])

    def get_all(self, table: str) -> Iterator[StoredRecord]:
        """Retrieve every row of a table."""
        for key, text in list(self._tables[table].items()):
            yield StoredRecord(key, text)

    def put(self, table: str, key: str, text: str) -> None:
        """Insert or replace one row."""
        self._tables[table][key] = text

    def delete(self, table: str, key: str) -> bool:
        """Delete one row."""
        return self._tables[table].pop(key, None) is not None

    def delete_all(self, table: str) -> None:
        """Delete every row of a table."""
        self._tables[table].clear()

    def count(self, table: str) -> int:
        """Number of rows in a table."""
        return len(self._tables[table])

    def keys(self, table: str) -> List[str]:
        """All keys of a table."""
        return list(self._tables[table])

    def get_counter(self, store: str) -> Optional[int]:
        """Last allocated number for a store."""
        return self._counters.get(store)

    def set_counter(self, store: str, value: int) -> None:
        """Insert or replace the counter row for a store."""
        self._counters[store] = value

    def delete_counter(self, store: str) -> None:
        """Remove the counter row for a store."""
        self._counters.pop(store, None)

    # Transaction support - memory backend uses simple copy-on-write

    def begin_transaction(self) -> Any:
        """Begin a transaction by snapshotting current state."""
        return copy.deepcopy(self._tables), dict(self._counters)

    def commit_transaction(self, handle: Any) -> None:
        """Commit transaction (nothing to do - changes already in place)."""
        pass

    def rollback_transaction(self, handle: Any) -> None:
        """Rollback transaction by restoring snapshot."""
        if handle is not None:
            self._tables, self._counters = handle

    @property
    def supports_transactions(self) -> bool:
        """Memory backend supports basic transactions."""
        return True
