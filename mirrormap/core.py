"""Core Store class: an in-memory cache mirrored to a storage backend."""

import logging
import math
import operator
import random
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple, Union
from urllib.parse import urlparse

import numpy as np

from .backends.base import StorageBackend, StoredRecord
from .backends.memory import MemoryBackend
from .backends.sqlite import SQLiteBackend
from .cloning import CloneLevel, clone, isolate
from .config import StoreOptions
from .exceptions import (
    ArgumentError,
    ClosedError,
    DatabaseConnectionError,
    DestroyedError,
    KeyTypeError,
    NotFoundError,
    OptionsError,
    PathError,
    StoreTypeError,
)
from .kinds import CONTAINERS, ValueKind, describe, kind_of
from .paths import MISSING, PathLike, delete_path, get_path, has_path, merge, set_path
from .serialization import Serializer
from .snapshot import dump_snapshot, load_snapshot

logger = logging.getLogger(__name__)

DATABASE_FILE = "mirrormap.sqlite"

Key = Union[str, int]

_ADD = (operator.add, np.add)
_SUB = (operator.sub, np.subtract)
_MUL = (operator.mul, np.multiply)
_DIV = (operator.truediv, np.true_divide)
_POW = (operator.pow, np.power)


def _truncated_mod(base, operand):
    """Remainder with the sign of the dividend; exact for integers."""
    if isinstance(base, int) and isinstance(operand, int):
        remainder = abs(base) % abs(operand)
        return -remainder if base < 0 else remainder
    return math.fmod(base, operand)


def _as_float(value) -> np.float64:
    # Integers beyond the float range count as a signed infinity
    try:
        return np.float64(value)
    except OverflowError:
        return np.float64(math.inf if value > 0 else -math.inf)


_MOD = (_truncated_mod, np.fmod)

MATH_OPERATIONS = {
    "add": _ADD, "addition": _ADD, "+": _ADD,
    "sub": _SUB, "subtract": _SUB, "-": _SUB,
    "mult": _MUL, "multiply": _MUL, "*": _MUL,
    "div": _DIV, "divide": _DIV, "/": _DIV,
    "exp": _POW, "exponent": _POW, "^": _POW,
    "mod": _MOD, "modulo": _MOD, "%": _MOD,
}


def apply_math(base: Any, operation: str, operand: Any) -> Any:
    """Apply a named arithmetic operation.

    Division, modulo and power by degenerate operands give IEEE-754 results
    (``inf``, ``-inf``, ``nan``) instead of raising.

    Raises:
        StoreTypeError: If an argument is missing, the operand is not a
            number, or the operation is unknown
    """
    if base is None or operation is None or operand is None:
        raise StoreTypeError("Math operation requires a base, an operation and an operand")
    if kind_of(operand) is not ValueKind.NUMBER:
        raise StoreTypeError(f"Math operand must be a number, got {type(operand).__name__}")
    if operation in ("rand", "random"):
        return math.floor(random.random() * math.floor(operand))
    try:
        func, ufunc = MATH_OPERATIONS[operation]
    except (KeyError, TypeError):
        raise StoreTypeError(f"Unknown math operation: {operation!r}")
    try:
        result = func(base, operand)
    except (ZeroDivisionError, OverflowError):
        result = None
    except ValueError:
        # math.fmod signals a zero divisor or infinite dividend this way
        result = None
    except TypeError as e:
        raise StoreTypeError(f"Cannot apply {operation!r} to {base!r} and {operand!r}: {e}")
    # Fractional powers of negative numbers come back complex; IEEE gives nan
    if result is None or isinstance(result, complex):
        with np.errstate(all="ignore"):
            return float(ufunc(_as_float(base), _as_float(operand)))
    return result


@dataclass
class _Entry:
    """A cached value and its kind tag."""

    value: Any
    kind: ValueKind


def _identity(value: Any, key: str) -> Any:
    return value


def _pairs(entries) -> Iterator[Tuple[Any, Any]]:
    if hasattr(entries, "items"):
        return iter(entries.items())
    return iter(entries)


class Store:
    """Key-value cache whose entries are mirrored to a storage backend.

    Every write is encoded and persisted before the cache is updated, so the
    backend row for a key always matches the cached value once a call
    returns. Values can be addressed inside with dotted paths.

    Example:
        from mirrormap import Store

        settings = Store("settings", default={"prefix": "!", "admins": []})

        settings.get("guild1")                    # {'prefix': '!', 'admins': []}
        settings.set("guild1", "?", "prefix")
        settings.push("guild1", "alice", "admins")
        settings.get("guild1", "prefix")          # '?'

        points = Store("points")
        points.set("alice", 10)
        points.inc("alice")
        points.math("alice", "*", 2)              # alice is now 22
    """

    def __init__(
        self,
        name: Optional[str] = None,
        entries: Optional[Iterable] = None,
        *,
        backend: Optional[StorageBackend] = None,
        options: Optional[StoreOptions] = None,
        **kwargs,
    ):
        """Open a store.

        Args:
            name: Store identity. Without a name the store is memory-only.
                "::memory::" keeps the backing database in memory.
            entries: Initial key/value pairs (memory-only stores)
            backend: Connected backend to use instead of the default SQLite file
            options: Complete StoreOptions, instead of name and keywords
            **kwargs: Any StoreOptions field (default, serializer, clone_level, ...)

        Raises:
            OptionsError: If an option is unknown or invalid
            DatabaseConnectionError: If the backing database cannot be opened
        """
        if options is None:
            options = StoreOptions.from_kwargs(name=name, **kwargs)
        elif name is not None or kwargs:
            raise OptionsError("Pass either options or individual option keywords, not both")
        if backend is not None and not options.persistent:
            raise OptionsError("A backend can only be used by a named store")

        self._options = options
        self.name = options.table_name or "MemoryStore"
        self.persistent = options.persistent
        self.clone_level: CloneLevel = options.clone_level
        self.default = options.default
        self.is_destroyed = False
        self.is_closed = False
        self._logger = options.logger or logger
        self._serialize_hook = options.serializer or _identity
        self._deserialize_hook = options.deserializer or _identity
        self._codec = Serializer()
        self._cache: Dict[str, _Entry] = {}
        self._changed_cb: Optional[Callable[[str, Any, Any], None]] = None
        self._autonum = 0
        self._backend: Optional[StorageBackend] = None

        if self.persistent:
            self._backend = backend or self._open_backend()
            self._init_table()

        if entries is not None:
            if self.persistent:
                self._logger.warning(
                    "Initial entries ignored for persistent store %s", self.name
                )
            else:
                for key, value in _pairs(entries):
                    self._write(self._require_str_key(key), value)

    def _open_backend(self) -> StorageBackend:
        """Connect the default SQLite backend for this store."""
        if self._options.in_memory_database:
            path = ":memory:"
        else:
            try:
                self._options.data_dir.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise DatabaseConnectionError(
                    f"Cannot create data directory {self._options.data_dir}: {e}"
                ) from e
            path = str(self._options.data_dir / DATABASE_FILE)
        backend = SQLiteBackend()
        backend.connect(
            path=path,
            wal=self._options.wal,
            trace=self._logger.debug if self._options.verbose else None,
        )
        return backend

    def _init_table(self) -> None:
        """Create this store's table and counter row, then optionally load all rows."""
        if not self._backend.table_exists(self.name):
            self._backend.create_table(self.name)
        if self._backend.get_counter(self.name) is None:
            self._backend.set_counter(self.name, 0)
        if self._options.fetch_all:
            self.fetch_everything()
        self._logger.info("Opened store %s (%d cached)", self.name, len(self._cache))

    @classmethod
    def multi(cls, names: List[str], **options) -> Dict[str, "Store"]:
        """Open several named stores sharing the same options.

        Example:
            stores = Store.multi(["settings", "tags", "blacklist"], fetch_all=False)
            stores["tags"].set("hello", "world")
        """
        if isinstance(names, str) or not names:
            raise StoreTypeError('"names" must be a non-empty list of store names')
        if "name" in options:
            raise OptionsError("multi() takes store names from the names list")
        return {name: cls(name, **options) for name in names}

    # Internals

    def _ready_check(self) -> None:
        if self.is_destroyed:
            raise DestroyedError(
                f'The store "{self.name}" has been destroyed and can no longer be used'
            )
        if self.is_closed:
            raise ClosedError(
                f'The store "{self.name}" has been closed and can no longer be used'
            )

    def _coerce_key(self, key: Any) -> str:
        if isinstance(key, bool) or not isinstance(key, (str, int)):
            raise KeyTypeError(
                f"Store keys must be strings. Provided: "
                f"{'None' if key is None else type(key).__name__}"
            )
        return str(key)

    def _require_str_key(self, key: Any) -> str:
        if not isinstance(key, str):
            raise KeyTypeError(
                f"Store keys must be strings. Provided: "
                f"{'None' if key is None else type(key).__name__}"
            )
        return key

    def _clone(self, value: Any) -> Any:
        return clone(value, self.clone_level)

    def _decode(self, record: StoredRecord) -> Any:
        return self._deserialize_hook(self._codec.decode(record.text), record.key)

    def _cache_put(self, key: str, value: Any) -> None:
        self._cache[key] = _Entry(self._clone(value), kind_of(value))

    def _write(self, key: str, value: Any) -> None:
        """Encode, persist, then cache. Nothing is cached if persisting fails."""
        if self.persistent:
            text = self._codec.encode(self._serialize_hook(value, key))
            self._backend.put(self.name, key, text)
        self._cache_put(key, value)

    def _commit(self, key: str, value: Any, old_value: Any) -> None:
        self._write(key, value)
        if self._changed_cb is not None:
            self._changed_cb(key, old_value, value)

    def _fetch_check(self, key: str) -> None:
        """Load a missing key from the backend when autofetch applies."""
        if key in self._cache or not self.persistent or not self._options.auto_fetch:
            return
        self._logger.debug("Autofetching key %s in store %s", key, self.name)
        record = self._backend.get(self.name, key)
        if record is not None:
            self._cache_put(key, self._decode(record))

    def _current(self, key: str) -> Any:
        """Cached value for key after autofetch and default materialization."""
        self._fetch_check(key)
        if key not in self._cache and self.default is not None:
            self._write(key, isolate(self.default))
        entry = self._cache.get(key)
        return MISSING if entry is None else entry.value

    def _check(self, key: str, kinds, path: Optional[PathLike] = None) -> Any:
        """Require key (and path) to exist and hold one of ``kinds``.

        Returns:
            The cached value at key/path (not cloned)

        Raises:
            PathError: If the key or path does not exist
            KeyTypeError: If the value has the wrong kind
        """
        self._fetch_check(key)
        entry = self._cache.get(key)
        if entry is None:
            raise PathError(f'The key "{key}" does not exist in the store "{self.name}"')
        if path is None:
            if entry.kind not in kinds:
                raise KeyTypeError(
                    f'The value for key "{key}" is not of type {describe(kinds)} in the '
                    f'store "{self.name}" (value was of type "{entry.kind.value}")'
                )
            return entry.value
        if entry.kind not in CONTAINERS:
            raise KeyTypeError(
                f'The value for key "{key}" is not of type {describe(CONTAINERS)} in the '
                f'store "{self.name}" (value was of type "{entry.kind.value}")'
            )
        leaf = get_path(entry.value, path)
        if leaf is MISSING or kind_of(leaf) is ValueKind.NIL:
            raise PathError(
                f'The property "{path}" in key "{key}" does not exist. Please set() it.'
            )
        leaf_kind = kind_of(leaf)
        if leaf_kind not in kinds:
            raise KeyTypeError(
                f'The property "{path}" in key "{key}" is not of type {describe(kinds)} '
                f'in the store "{self.name}" (property was of type "{leaf_kind.value}")'
            )
        return leaf

    @contextmanager
    def _transaction(self):
        if not self._backend.supports_transactions:
            yield
            return
        handle = self._backend.begin_transaction()
        try:
            yield
            self._backend.commit_transaction(handle)
        except Exception:
            self._backend.rollback_transaction(handle)
            raise

    # Reading

    def get(self, key: Key, path: Optional[PathLike] = None) -> Any:
        """Retrieve a value, or the value at a path inside it.

        A configured default is written for an absent key before it is read,
        so later has() calls see it.

        Args:
            key: Key to read
            path: Optional dotted path inside an object or array value

        Returns:
            A copy of the value (per clone level), or None if absent

        Raises:
            KeyTypeError: If a path is given and the value is not an object or array
        """
        self._ready_check()
        if key is None:
            return None
        key = self._coerce_key(key)
        current = self._current(key)
        if current is MISSING:
            return None
        if path is None:
            return self._clone(current)
        entry = self._cache[key]
        if entry.kind not in CONTAINERS:
            raise KeyTypeError(
                f'Cannot read path "{path}": the value for key "{key}" is of type '
                f'"{entry.kind.value}" in the store "{self.name}"'
            )
        found = get_path(current, path)
        return None if found is MISSING else self._clone(found)

    def has(self, key: Key, path: Optional[PathLike] = None) -> bool:
        """Whether a key exists, or whether a path inside its value resolves.

        Raises:
            PathError: If a path is given and the key does not exist
            KeyTypeError: If a path is given and the value is not an object or array
        """
        self._ready_check()
        key = self._coerce_key(key)
        self._fetch_check(key)
        if path is None:
            return key in self._cache
        value = self._check(key, CONTAINERS)
        return has_path(value, path)

    def includes(self, key: Key, value: Any, path: Optional[PathLike] = None) -> bool:
        """Whether the array at key (or at path inside it) contains value.

        Raises:
            StoreTypeError: If the addressed value is not an array
        """
        self._ready_check()
        key = self._coerce_key(key)
        current = self._check(key, CONTAINERS)
        target = current if path is None else get_path(current, path, None)
        if not isinstance(target, list):
            where = f'property "{path}" in key "{key}"' if path is not None else f'key "{key}"'
            raise StoreTypeError(
                f'The {where} is not an Array in the store "{self.name}" '
                f'(was of type "{kind_of(target).value}")'
            )
        return value in target

    def find(self, prop_or_fn: Union[str, Callable[[Any], bool]], value: Any = None) -> Any:
        """First value whose property equals ``value``, or matching a predicate.

        Example:
            users.find("profile.name", "Bob")
            users.find(lambda user: user["age"] > 30)

        Raises:
            ArgumentError: If neither a predicate nor a property and value are given
        """
        self._ready_check()
        if prop_or_fn is None or (not callable(prop_or_fn) and value is None):
            raise ArgumentError(
                "find() requires either a property and a value, or a function"
            )
        for entry in self._cache.values():
            if callable(prop_or_fn):
                matched = prop_or_fn(entry.value)
            else:
                matched = (
                    entry.kind in CONTAINERS
                    and get_path(entry.value, prop_or_fn) == value
                )
            if matched:
                return self._clone(entry.value)
        return None

    # Writing

    def set(self, key: str, value: Any, path: Optional[PathLike] = None) -> Any:
        """Store a value, or write it at a path inside the current value.

        Args:
            key: String key
            value: Value to store
            path: Optional dotted path; missing intermediate objects are created

        Returns:
            The committed value for key

        Raises:
            KeyTypeError: If key is not a string, or a path is given and the
                current value is not an object or array
            SerializationError: If a persistent store cannot encode the value
        """
        self._ready_check()
        key = self._require_str_key(key)
        current = self._current(key)
        old_value = None if current is MISSING else self._clone(current)
        if path is None:
            data = value
        else:
            data = {} if current is MISSING or current is None else isolate(current)
            if kind_of(data) not in CONTAINERS:
                raise KeyTypeError(
                    f'Cannot set path "{path}": the value for key "{key}" is of type '
                    f'"{kind_of(data).value}" in the store "{self.name}"'
                )
            set_path(data, path, value)
        self._commit(key, data, old_value)
        return data

    def update(self, key: str, value_or_fn: Union[dict, Callable[[dict], dict]]) -> Any:
        """Merge keys into an object value, or replace it using a function.

        A dict is merged recursively into the current value. A function
        receives a copy of the current value and returns the replacement.
        The change callback is not called.

        Example:
            store.set("obj", {"a": 1, "b": {"c": 2}})
            store.update("obj", {"b": {"d": 3}})   # {"a": 1, "b": {"c": 2, "d": 3}}
            store.update("obj", lambda prev: {**prev, "e": 4})

        Returns:
            The new value

        Raises:
            KeyTypeError: If key is missing or not a string, or the value is not an object
            PathError: If the key does not exist
        """
        self._ready_check()
        if key is None:
            raise KeyTypeError("Key not provided for update()")
        key = self._coerce_key(key)
        previous = isolate(self._check(key, {ValueKind.OBJECT}))
        if callable(value_or_fn):
            merged = value_or_fn(previous)
        elif isinstance(value_or_fn, dict):
            merged = merge(previous, isolate(value_or_fn))
        else:
            raise StoreTypeError(
                f"update() requires a dict or a function, got {type(value_or_fn).__name__}"
            )
        self._write(key, merged)
        return merged

    def push(
        self,
        key: Key,
        value: Any,
        path: Optional[PathLike] = None,
        allow_dupes: bool = False,
    ) -> "Store":
        """Append to the array at key, or at a path inside it.

        Unless ``allow_dupes`` is set, nothing happens when an equal element
        is already present.

        Raises:
            PathError: If the key or path does not exist
            KeyTypeError: If the addressed value is not an array
        """
        self._ready_check()
        key = self._coerce_key(key)
        target = self._check(key, {ValueKind.ARRAY}, path)
        if not allow_dupes and value in target:
            return self
        current = self._cache[key].value
        data = isolate(current)
        (data if path is None else get_path(data, path)).append(value)
        self._commit(key, data, self._clone(current))
        return self

    def remove(
        self,
        key: Key,
        value: Union[Any, Callable[[Any], bool]],
        path: Optional[PathLike] = None,
    ) -> "Store":
        """Remove the first matching element from an array value.

        Args:
            key: Key holding an array, or an object containing one at ``path``
            value: Element to remove, or a predicate selecting it
            path: Optional dotted path to the array

        Raises:
            PathError: If the key does not exist
            KeyTypeError: If the value at key is not an object or array
            StoreTypeError: If the addressed value is not an array
        """
        self._ready_check()
        key = self._coerce_key(key)
        current = self._check(key, CONTAINERS)
        target = current if path is None else get_path(current, path, None)
        if not isinstance(target, list):
            raise StoreTypeError(
                f'Cannot remove from "{path if path is not None else key}": '
                f'not an Array (was of type "{kind_of(target).value}")'
            )
        matches = value if callable(value) else (lambda element: element == value)
        for index, element in enumerate(target):
            if matches(element):
                break
        else:
            return self
        data = isolate(target)
        del data[index]
        self.set(key, data, path)
        return self

    def math(
        self,
        key: Key,
        operation: str,
        operand: Any,
        path: Optional[PathLike] = None,
    ) -> "Store":
        """Apply an arithmetic operation to a number and store the result.

        Operations: add/addition/+, sub/subtract/-, mult/multiply/*,
        div/divide//, exp/exponent/^, mod/modulo/%, rand/random.

        Example:
            points.set("number", 42)
            points.math("number", "/", 2)                 # 21.0
            points.math("numberInObject", "+", 10, "sub.anInt")

        Raises:
            PathError: If the key or path does not exist
            KeyTypeError: If the addressed value is not a number
            StoreTypeError: If the operation or operand is invalid
        """
        self._ready_check()
        key = self._coerce_key(key)
        base = self._check(key, {ValueKind.NUMBER}, path)
        self.set(key, apply_math(base, operation, operand), path)
        return self

    def inc(self, key: Key, path: Optional[PathLike] = None) -> "Store":
        """Increment a number (or a number at path) by one."""
        return self.math(key, "add", 1, path)

    def dec(self, key: Key, path: Optional[PathLike] = None) -> "Store":
        """Decrement a number (or a number at path) by one."""
        return self.math(key, "sub", 1, path)

    # Deleting

    def delete(self, key: Key, path: Optional[PathLike] = None) -> "Store":
        """Delete a key, or the property/element at a path inside its value.

        Deleting a whole key from a persistent store does not call the
        change callback; memory-only stores call it with ``new_value=None``.

        Raises:
            PathError: If a path is given and does not exist
        """
        self._ready_check()
        key = self._coerce_key(key)
        self._fetch_check(key)
        if path is not None:
            data = isolate(self._check(key, CONTAINERS))
            delete_path(data, path)
            self.set(key, data)
            return self
        if self.persistent:
            self._backend.delete(self.name, key)
            self._cache.pop(key, None)
            return self
        entry = self._cache.pop(key, None)
        if entry is not None and self._changed_cb is not None:
            self._changed_cb(key, entry.value, None)
        return self

    def evict(self, key_or_keys: Union[Key, Iterable[Key]]) -> "Store":
        """Drop keys from the cache only; backend rows are kept."""
        self._ready_check()
        keys = key_or_keys if isinstance(key_or_keys, (list, tuple, set)) else [key_or_keys]
        for key in keys:
            self._cache.pop(self._coerce_key(key), None)
        return self

    def delete_all(self) -> None:
        """Delete every entry, including every backend row of this store."""
        self._ready_check()
        if self.persistent:
            self._backend.delete_all(self.name)
        self._cache.clear()

    def clear(self) -> None:
        """Alias of delete_all()."""
        self.delete_all()

    def destroy(self) -> None:
        """Delete all data and drop this store's table and counter.

        THIS CANNOT BE UNDONE. Every later call on the store raises
        DestroyedError. Other stores in the same database are unaffected.
        """
        self.delete_all()
        self.is_destroyed = True
        if self.persistent:
            with self._transaction():
                self._backend.drop_table(self.name)
                self._backend.delete_counter(self.name)
        self._logger.info("Destroyed store %s", self.name)

    # Backend access

    def fetch(self, key_or_keys: Union[Key, Iterable[Key]]) -> Any:
        """Reload one or more keys from the backend, replacing cached values.

        Returns:
            The value for a single key (None if it has no row), or the
            store when given a list of keys
        """
        self._ready_check()
        if isinstance(key_or_keys, (list, tuple, set)):
            keys = [self._coerce_key(key) for key in key_or_keys]
            if self.persistent:
                for record in self._backend.get_many(self.name, keys):
                    self._cache_put(record.key, self._decode(record))
            return self
        key = self._coerce_key(key_or_keys)
        if not self.persistent:
            return self.get(key)
        record = self._backend.get(self.name, key)
        if record is None:
            return None
        value = self._decode(record)
        self._cache_put(key, value)
        return value

    def fetch_everything(self) -> "Store":
        """Load every backend row into the cache."""
        self._ready_check()
        if self.persistent:
            loaded = 0
            for record in self._backend.get_all(self.name):
                self._cache_put(record.key, self._decode(record))
                loaded += 1
            self._logger.debug("Fetched %d rows into store %s", loaded, self.name)
        return self

    @property
    def count(self) -> int:
        """Number of rows in the backend, fetched or not."""
        self._ready_check()
        if self.persistent:
            return self._backend.count(self.name)
        return len(self._cache)

    @property
    def indexes(self) -> List[str]:
        """Every key in the backend, fetched or not."""
        self._ready_check()
        if self.persistent:
            return self._backend.keys(self.name)
        return list(self._cache)

    def next_autonum(self) -> str:
        """Allocate the next unused numeric key for this store.

        Example:
            log.set(log.next_autonum(), "User joined")
        """
        self._ready_check()
        if not self.persistent:
            self._autonum += 1
            return str(self._autonum)
        number = (self._backend.get_counter(self.name) or 0) + 1
        self._backend.set_counter(self.name, number)
        return str(number)

    def changed(self, callback: Optional[Callable[[str, Any, Any], None]]) -> None:
        """Register the function called as ``callback(key, old, new)`` after writes.

        Only one callback is kept; registering replaces the previous one and
        None removes it.
        """
        self._ready_check()
        if callback is not None and not callable(callback):
            raise ArgumentError("changed() requires a callable or None")
        self._changed_cb = callback

    # Export / import

    def export(self) -> str:
        """Serialize every entry to snapshot text (see mirrormap.snapshot)."""
        self._ready_check()
        if self.persistent:
            self.fetch_everything()
        return dump_snapshot(
            self.name,
            ((key, entry.value) for key, entry in self._cache.items()),
            self._codec,
        )

    def import_(self, data: str, overwrite: bool = True, clear: bool = False) -> "Store":
        """Load entries from snapshot text produced by export().

        Args:
            data: Snapshot text
            overwrite: Replace keys that already exist
            clear: Delete everything before importing (cannot be undone)

        Raises:
            DataImportError: If the data is missing or malformed
        """
        self._ready_check()
        snapshot = load_snapshot(data, self._codec)
        if clear:
            self.delete_all()
        imported = 0
        for key, value in snapshot.entries:
            if not overwrite and self.has(key):
                continue
            self._write(key, value)
            imported += 1
        self._logger.debug(
            "Imported %d of %d entries from %s into %s",
            imported, len(snapshot.entries), snapshot.name, self.name,
        )
        return self

    # Mapping interface

    @property
    def size(self) -> int:
        """Number of cached entries."""
        self._ready_check()
        return len(self._cache)

    def keys(self) -> List[str]:
        """Cached keys in insertion order."""
        self._ready_check()
        return list(self._cache)

    def values(self) -> List[Any]:
        """Copies of the cached values."""
        self._ready_check()
        return [self._clone(entry.value) for entry in self._cache.values()]

    def items(self) -> List[Tuple[str, Any]]:
        """(key, value copy) pairs of the cache."""
        self._ready_check()
        return [(key, self._clone(entry.value)) for key, entry in self._cache.items()]

    def __getitem__(self, key: Key) -> Any:
        value = self.get(key)
        if self._coerce_key(key) not in self._cache:
            raise NotFoundError(str(key), self.name)
        return value

    def __setitem__(self, key: str, value: Any) -> None:
        self.set(key, value)

    def __delitem__(self, key: Key) -> None:
        if not self.has(key):
            raise NotFoundError(str(key), self.name)
        self.delete(key)

    def __contains__(self, key: Key) -> bool:
        return self.has(key)

    def __len__(self) -> int:
        return self.size

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def __repr__(self) -> str:
        if self.is_destroyed:
            state = "destroyed"
        elif self.is_closed:
            state = "closed"
        else:
            state = f"size={len(self._cache)}"
        return f"<Store {self.name!r} persistent={self.persistent} {state}>"

    # Lifecycle

    def close(self) -> None:
        """Close the backend connection.

        Closing again is a no-op. Every other call raises ClosedError
        afterwards.
        """
        if self.is_closed:
            return
        self._ready_check()
        if self._backend is not None:
            self._backend.close()
        self.is_closed = True

    def __enter__(self) -> "Store":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        if not self.is_destroyed:
            self.close()


def connect(url: str, name: str, **options) -> Store:
    """Open a store on a backend given by URL.

    Supported URL schemes:
        - memory://          In-memory dict backend (testing)
        - sqlite:///path.db  SQLite file storage
        - sqlite:///:memory: SQLite in-memory

    Args:
        url: Connection URL
        name: Store name (table) inside the backend
        **options: StoreOptions fields

    Returns:
        Connected Store instance

    Example:
        settings = connect("sqlite:///bot.sqlite", "settings", fetch_all=False)
    """
    parsed = urlparse(url)
    scheme = parsed.scheme

    if scheme == "memory":
        backend = MemoryBackend()
        backend.connect()

    elif scheme == "sqlite":
        # Handle sqlite:///path and sqlite:///:memory:
        path = parsed.path
        if path.startswith("/"):
            path = path[1:]  # Remove leading slash from file path

        trace = None
        if options.get("verbose"):
            trace = (options.get("logger") or logger).debug
        backend = SQLiteBackend()
        backend.connect(path=path or ":memory:", wal=options.get("wal", False), trace=trace)

    else:
        raise ValueError(f"Unknown storage scheme: {scheme}")

    return Store(name, backend=backend, **options)
