"""mirrormap - an in-memory key-value cache mirrored to SQLite.

Values live in a Python dict for fast reads and are written through to a
backing table on every change, so a store reopened with the same name sees
the same data. Values may be rich (datetimes, sets, numpy arrays, ...) and
can be addressed inside with dotted paths.

Quick Start:
    from mirrormap import Store

    # Persistent store (data/mirrormap.sqlite, table "points")
    points = Store("points", default={"score": 0, "badges": []})

    points.get("alice")            # {'score': 0, 'badges': []}
    points.inc("alice", "score")
    points.push("alice", "early-bird", "badges")
    points.get("alice")            # {'score': 1, 'badges': ['early-bird']}

    # Memory-only store
    cache = Store(clone_level="shallow")
    cache.set("answer", 42)

Key Classes:
    - Store: the cache, its path/array/math helpers, export and import
    - StoreOptions: constructor options as a dataclass
    - connect(): Open a store on a backend given by URL

Backend Classes:
    - MemoryBackend: In-memory storage for testing
    - SQLiteBackend: SQLite file storage

Serialization:
    - Serializer: tagged-JSON encoding of stored values
    - UNDEFINED: marker for absent fields that survives persistence
"""

from .core import Store, connect
from .config import StoreOptions
from .cloning import CloneLevel, clone
from .kinds import UNDEFINED, ValueKind, kind_of
from .backends import StorageBackend, StoredRecord, MemoryBackend, SQLiteBackend
from .serialization import Serializer
from .snapshot import FORMAT_VERSION
from .exceptions import (
    StoreError,
    DatabaseConnectionError,
    OptionsError,
    KeyTypeError,
    PathError,
    NotFoundError,
    StoreTypeError,
    ArgumentError,
    SerializationError,
    DataImportError,
    DestroyedError,
    ClosedError,
)

__all__ = [
    # Main API
    "Store",
    "StoreOptions",
    "connect",
    # Values
    "CloneLevel",
    "clone",
    "UNDEFINED",
    "ValueKind",
    "kind_of",
    # Backends
    "StorageBackend",
    "StoredRecord",
    "MemoryBackend",
    "SQLiteBackend",
    # Serialization
    "Serializer",
    "FORMAT_VERSION",
    # Exceptions
    "StoreError",
    "DatabaseConnectionError",
    "OptionsError",
    "KeyTypeError",
    "PathError",
    "NotFoundError",
    "StoreTypeError",
    "ArgumentError",
    "SerializationError",
    "DataImportError",
    "DestroyedError",
    "ClosedError",
]

__version__ = "0.1.0"
