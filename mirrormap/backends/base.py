"""Abstract base class for storage backends."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, List, Optional


@dataclass
class StoredRecord:
    """Encoded form of one entry as it lives in the backend."""

    key: str
    text: str


class StorageBackend(ABC):
    """Abstract base class for storage backends.

    A backend holds one table of ``(key, text)`` rows per store name and a
    shared counter table with one row per store name. The Store class owns
    caching, encoding and the public API; backends only execute statements.
    """

    @abstractmethod
    def connect(self, **kwargs) -> None:
        """Establish connection to storage.

        Args:
            **kwargs: Backend-specific connection parameters

        Raises:
            DatabaseConnectionError: If the storage cannot be opened
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Close connection and release resources."""
        pass

    # Tables

    @abstractmethod
    def table_exists(self, table: str) -> bool:
        """Check whether a store table exists."""
        pass

    @abstractmethod
    def create_table(self, table: str) -> None:
        """Create a store table if it doesn't exist."""
        pass

    @abstractmethod
    def drop_table(self, table: str) -> None:
        """Drop a store table and all its rows."""
        pass

    # Rows

    @abstractmethod
    def get(self, table: str, key: str) -> Optional[StoredRecord]:
        """Retrieve one row by key.

        Returns:
            StoredRecord if found, None otherwise
        """
        pass

    @abstractmethod
    def get_many(self, table: str, keys: Iterable[str]) -> Iterator[StoredRecord]:
        """Retrieve every existing row among ``keys``."""
        pass

    @abstractmethod
    def get_all(self, table: str) -> Iterator[StoredRecord]:
        """Retrieve every row of a table."""
        pass

    @abstractmethod
    def put(self, table: str, key: str, text: str) -> None:
        """Insert or replace one row."""
        pass

    @abstractmethod
    def delete(self, table: str, key: str) -> bool:
        """Delete one row.

        Returns:
            True if the row existed and was deleted, False if not found
        """
        pass

    @abstractmethod
    def delete_all(self, table: str) -> None:
        """Delete every row of a table in one statement."""
        pass

    @abstractmethod
    def count(self, table: str) -> int:
        """Number of rows in a table."""
        pass

    @abstractmethod
    def keys(self, table: str) -> List[str]:
        """All keys of a table."""
        pass

    # Counters

    @abstractmethod
    def get_counter(self, store: str) -> Optional[int]:
        """Last allocated number for a store, or None if it has no row."""
        pass

    @abstractmethod
    def set_counter(self, store: str, value: int) -> None:
        """Insert or replace the counter row for a store."""
        pass

    @abstractmethod
    def delete_counter(self, store: str) -> None:
        """Remove the counter row for a store."""
        pass

    # Transaction support (optional - default implementations do nothing)

    def begin_transaction(self) -> Any:
        """Begin a transaction.

        Returns:
            Transaction handle (backend-specific), or None if not supported
        """
        return None

    def commit_transaction(self, handle: Any) -> None:
        """Commit transaction.

        Args:
            handle: Transaction handle from begin_transaction()
        """
        pass

    def rollback_transaction(self, handle: Any) -> None:
        """Rollback transaction.

        Args:
            handle: Transaction handle from begin_transaction()
        """
        pass

    @property
    def supports_transactions(self) -> bool:
        """Whether this backend supports transactions."""
        return False
