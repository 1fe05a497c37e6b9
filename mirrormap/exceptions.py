"""Exceptions for the mirrormap package."""


class StoreError(Exception):
    """Base exception for all store errors."""

    pass


class DatabaseConnectionError(StoreError):
    """Failed to open the backing database."""

    pass


class OptionsError(StoreError, ValueError):
    """Invalid store configuration value."""

    pass


class KeyTypeError(StoreError, TypeError):
    """Key is not a valid string, or a value has the wrong kind."""

    pass


class PathError(StoreError, LookupError):
    """Key or property path does not exist where it was required."""

    pass


class NotFoundError(PathError, KeyError):
    """No value stored under the given key."""

    def __init__(self, key: str, store_name: str):
        self.key = key
        self.store_name = store_name
        super().__init__(f'The key "{key}" does not exist in the store "{store_name}"')

    def __str__(self) -> str:
        return self.args[0]


class StoreTypeError(StoreError, TypeError):
    """Operation precondition on a value's type was violated."""

    pass


class ArgumentError(StoreError, ValueError):
    """Required argument combination was not supplied."""

    pass


class SerializationError(StoreError, TypeError):
    """Failed to encode or decode a value."""

    pass


class DataImportError(StoreError, ValueError):
    """Snapshot data is missing or malformed."""

    pass


class DestroyedError(StoreError, RuntimeError):
    """The store has been destroyed and can no longer be used."""

    pass


class ClosedError(StoreError, RuntimeError):
    """The store has been closed and can no longer be used."""

    pass
