"""Value kind tags used by the typed store operators."""

import numbers
from enum import Enum
from typing import Any, FrozenSet

import numpy as np


class _Undefined:
    """Marker for an absent or undefined field.

    There is exactly one instance, ``UNDEFINED``. It is falsy, copies to
    itself and survives a round trip through the serializer.
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __bool__(self) -> bool:
        return False

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self

    def __reduce__(self):
        return (_Undefined, ())


UNDEFINED = _Undefined()


class ValueKind(Enum):
    """Closed set of value kinds a stored value can have."""

    NUMBER = "Number"
    STRING = "String"
    BOOLEAN = "Boolean"
    NIL = "Nil"
    ARRAY = "Array"
    OBJECT = "Object"
    OTHER = "Other"


CONTAINERS: FrozenSet[ValueKind] = frozenset({ValueKind.ARRAY, ValueKind.OBJECT})


def kind_of(value: Any) -> ValueKind:
    """Classify a value into its ValueKind.

    Booleans are tested before numbers since ``bool`` subclasses ``int``.
    """
    if value is None or value is UNDEFINED:
        return ValueKind.NIL
    if isinstance(value, (bool, np.bool_)):
        return ValueKind.BOOLEAN
    if isinstance(value, numbers.Number):
        return ValueKind.NUMBER
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, list):
        return ValueKind.ARRAY
    if isinstance(value, dict):
        return ValueKind.OBJECT
    return ValueKind.OTHER


def describe(kinds) -> str:
    """Render a set of kinds for error messages, e.g. '"Array" or "Object"'."""
    names = sorted(kind.value for kind in kinds)
    return " or ".join(f'"{name}"' for name in names)
