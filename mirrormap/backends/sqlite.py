"""SQLite storage backend."""

import logging
import sqlite3
from typing import Any, Callable, Iterable, Iterator, List, Optional

from ..exceptions import DatabaseConnectionError
from .base import StorageBackend, StoredRecord

logger = logging.getLogger(__name__)

COUNTER_TABLE = "mirrormap::autonum"

# Stay below SQLite's default host parameter limit in IN (...) lookups
_MAX_PARAMS = 500


def quote_identifier(name: str) -> str:
    """Quote a table name for use in SQL."""
    return '"' + str(name).replace('"', '""') + '"'


class SQLiteBackend(StorageBackend):
    """SQLite storage backend.

    Stores each store's rows in its own table of a SQLite database file.
    Zero configuration required.

    Example:
        backend = SQLiteBackend()
        backend.connect(path="data/mirrormap.sqlite")

        # Or in-memory
        backend.connect(path=":memory:")
    """

    def __init__(self):
        self._conn: Optional[sqlite3.Connection] = None
        self._path: Optional[str] = None
        self._tx_depth = 0

    def connect(
        self,
        path: str = ":memory:",
        wal: bool = False,
        trace: Optional[Callable[[str], None]] = None,
        **kwargs,
    ) -> None:
        """Connect to SQLite database.

        Args:
            path: Database file path, or ":memory:" for in-memory database
            wal: Switch the journal to write-ahead logging
            trace: Called with the text of every executed statement

        Raises:
            DatabaseConnectionError: If the database cannot be opened
        """
        self._path = str(path)
        try:
            self._conn = sqlite3.connect(self._path, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            if trace is not None:
                self._conn.set_trace_callback(trace)
            self._conn.execute("PRAGMA synchronous = 1")
            if wal:
                self._conn.execute("PRAGMA journal_mode = wal")
            self._create_counter_table()
        except sqlite3.Error as e:
            self._conn = None
            raise DatabaseConnectionError(
                f"Database could not be opened at {self._path}: {e}"
            ) from e
        logger.debug("Opened SQLite database %s", self._path)

    def _create_counter_table(self) -> None:
        """Create the shared counter table if it doesn't exist."""
        self._conn.execute(
            f"""
            CREATE TABLE IF NOT EXISTS {quote_identifier(COUNTER_TABLE)} (
                store TEXT PRIMARY KEY,
                lastnum INTEGER
            )
            """
        )
        self._conn.commit()

    def close(self) -> None:
        """Close the database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None

    def table_exists(self, table: str) -> bool:
        """Check whether a store table exists."""
        cursor = self._conn.execute(
            "SELECT count(*) FROM sqlite_master WHERE type = 'table' AND name = ?",
            (table,),
        )
        return cursor.fetchone()[0] > 0

    def create_table(self, table: str) -> None:
        """Create a store table if it doesn't exist."""
        self._conn.execute(
            f"CREATE TABLE IF NOT EXISTS {quote_identifier(table)} "
            f"(key TEXT PRIMARY KEY, value TEXT)"
        )
        self._commit()

    def drop_table(self, table: str) -> None:
        """Drop a store table."""
        self._conn.execute(f"DROP TABLE IF EXISTS {quote_identifier(table)}")
        self._commit()

    def get(self, table: str, key: str) -> Optional[StoredRecord]:
        """Retrieve one row by key."""
        cursor = self._conn.execute(
            f"SELECT key, value FROM {quote_identifier(table)} WHERE key = ?",
            (key,),
        )
        row = cursor.fetchone()
        if row is None:
            return None
        return StoredRecord(key=row["key"], text=row["value"])

    def get_many(self, table: str, keys: Iterable[str]) -> Iterator[StoredRecord]:
        """Retrieve every existing row among keys."""
        keys = list(dict.fromkeys(keys))
        for start in range(0, len(keys), _MAX_PARAMS):
            chunk = keys[start : start + _MAX_PARAMS]
            placeholders = ", ".join("?" for _ in chunk)
            cursor = self._conn.execute(
                f"SELECT key, value FROM {quote_identifier(table)} "
                f"WHERE key IN ({placeholders})",
                chunk,
            )
            for row in cursor.fetchall():
                yield StoredRecord(key=row["key"], text=row["value"])

    def get_all(self, table: str) -> Iterator[StoredRecord]:
        """Retrieve every row of a table."""
        cursor = self._conn.execute(
            f"SELECT key, value FROM {quote_identifier(table)} ORDER BY rowid"
        )
        for row in cursor.fetchall():
            yield StoredRecord(key=row["key"], text=row["value"])

    def put(self, table: str, key: str, text: str) -> None:
        """Insert or replace one row."""
        self._conn.execute(
            f"INSERT OR REPLACE INTO {quote_identifier(table)} (key, value) VALUES (?, ?)",
            (key, text),
        )
        self._commit()

    def delete(self, table: str, key: str) -> bool:
        """Delete one row."""
        cursor = self._conn.execute(
            f"DELETE FROM {quote_identifier(table)} WHERE key = ?", (key,)
        )
        self._commit()
        return cursor.rowcount > 0

    def delete_all(self, table: str) -> None:
        """Delete every row of a table."""
        self._conn.execute(f"DELETE FROM {quote_identifier(table)}")
        self._commit()

    def count(self, table: str) -> int:
        """Number of rows in a table."""
        cursor = self._conn.execute(f"SELECT count(*) FROM {quote_identifier(table)}")
        return cursor.fetchone()[0]

    def keys(self, table: str) -> List[str]:
        """All keys of a table."""
        cursor = self._conn.execute(
            f"SELECT key FROM {quote_identifier(table)} ORDER BY rowid"
        )
        return [row["key"] for row in cursor.fetchall()]

    def get_counter(self, store: str) -> Optional[int]:
        """Last allocated number for a store."""
        cursor = self._conn.execute(
            f"SELECT lastnum FROM {quote_identifier(COUNTER_TABLE)} WHERE store = ?",
            (store,),
        )
        row = cursor.fetchone()
        return None if row is None else row["lastnum"]

    def set_counter(self, store: str, value: int) -> None:
        """Insert or replace the counter row for a store."""
        self._conn.execute(
            f"INSERT OR REPLACE INTO {quote_identifier(COUNTER_TABLE)} "
            f"(store, lastnum) VALUES (?, ?)",
            (store, value),
        )
        self._commit()

    def delete_counter(self, store: str) -> None:
        """Remove the counter row for a store."""
        self._conn.execute(
            f"DELETE FROM {quote_identifier(COUNTER_TABLE)} WHERE store = ?", (store,)
        )
        self._commit()

    def _commit(self) -> None:
        # Statements inside an explicit transaction wait for commit_transaction()
        if not self._tx_depth:
            self._conn.commit()

    # Transaction support

    def begin_transaction(self) -> Any:
        """Begin a transaction."""
        self._conn.execute("BEGIN TRANSACTION")
        self._tx_depth = 1
        return True

    def commit_transaction(self, handle: Any) -> None:
        """Commit transaction."""
        self._tx_depth = 0
        self._conn.commit()

    def rollback_transaction(self, handle: Any) -> None:
        """Rollback transaction."""
        self._tx_depth = 0
        self._conn.rollback()

    @property
    def supports_transactions(self) -> bool:
        """SQLite supports transactions."""
        return True
