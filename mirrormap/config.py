"""Configuration dataclass for mirrormap stores."""

import logging
import re
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Callable, Optional, Union

from .cloning import CloneLevel
from .exceptions import OptionsError

# Store name that selects an in-memory SQLite database
MEMORY_NAME = "::memory::"

Hook = Callable[[Any, str], Any]


def sanitize_name(name: str) -> str:
    """Turn a store name into a safe table identifier."""
    return re.sub(r"[^a-z0-9]", "_", name, flags=re.IGNORECASE).lower()


@dataclass
class StoreOptions:
    """Options for a single Store.

    Attributes:
        name: Store identity; None makes a memory-only, non-persistent store
        default: Value materialized for any absent key on get() (None: no default)
        serializer: ``(value, key) -> value`` applied before encoding
        deserializer: ``(value, key) -> value`` applied after decoding
        auto_fetch: Load a missing key from the backend on reads
        fetch_all: Load every row when the store opens
        clone_level: "none", "shallow" or "deep" isolation of values
        data_dir: Directory holding the SQLite file for persistent stores
        wal: Use SQLite write-ahead logging
        verbose: Log every SQL statement at DEBUG level
        logger: Logger receiving the store's warnings and debug output
    """
    name: Optional[str] = None
    default: Any = None
    serializer: Optional[Hook] = None
    deserializer: Optional[Hook] = None
    auto_fetch: bool = True
    fetch_all: bool = True
    clone_level: Union[CloneLevel, str] = CloneLevel.DEEP
    data_dir: Union[Path, str] = Path("data")
    wal: bool = False
    verbose: bool = False
    logger: Optional[logging.Logger] = None

    def __post_init__(self):
        """Normalize and validate option values."""
        if self.name is not None and (not isinstance(self.name, str) or not self.name):
            raise OptionsError(f"Store name must be a non-empty string, got {self.name!r}")
        self.clone_level = CloneLevel.parse(self.clone_level)
        if isinstance(self.data_dir, str):
            self.data_dir = Path(self.data_dir)
        if not isinstance(self.data_dir, Path):
            raise OptionsError(f"data_dir must be a path, got {self.data_dir!r}")
        for hook in ("serializer", "deserializer"):
            value = getattr(self, hook)
            if value is not None and not callable(value):
                raise OptionsError(f"{hook} must be callable, got {value!r}")
        for flag in ("auto_fetch", "fetch_all", "wal", "verbose"):
            if not isinstance(getattr(self, flag), bool):
                raise OptionsError(f"{flag} must be a bool, got {getattr(self, flag)!r}")

    @property
    def persistent(self) -> bool:
        """Whether values are mirrored to a backend."""
        return self.name is not None

    @property
    def in_memory_database(self) -> bool:
        """Whether the backing SQLite database lives in memory."""
        return self.name == MEMORY_NAME

    @property
    def table_name(self) -> Optional[str]:
        """Sanitized name used as the backend table."""
        return sanitize_name(self.name) if self.persistent else None

    @classmethod
    def from_kwargs(cls, **kwargs) -> "StoreOptions":
        """Build options from keyword arguments.

        Raises:
            OptionsError: If an option name is not recognized
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(kwargs) - known)
        if unknown:
            raise OptionsError(f"Unknown store option(s): {', '.join(unknown)}")
        return cls(**kwargs)
