"""Clone policy controlling how values are isolated from callers."""

import copy
from enum import Enum
from typing import Any, TypeVar, Union

from .exceptions import OptionsError

T = TypeVar("T")


class CloneLevel(Enum):
    """How deeply values crossing the store boundary are copied."""

    NONE = "none"        # Same object, caller mutations are visible
    SHALLOW = "shallow"  # Top-level container copied, children shared
    DEEP = "deep"        # Fully independent copy

    @classmethod
    def parse(cls, value: Union["CloneLevel", str]) -> "CloneLevel":
        """Accept an enum member or its (case-insensitive) string value.

        Raises:
            OptionsError: If the value is not a known clone level
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.lower())
            except ValueError:
                pass
        raise OptionsError(
            f"Invalid clone level {value!r}; expected one of "
            f"{', '.join(level.value for level in cls)}"
        )


def clone(value: T, level: CloneLevel) -> T:
    """Copy a value according to the clone level."""
    if level is CloneLevel.NONE:
        return value
    if level is CloneLevel.SHALLOW:
        return copy.copy(value)
    if level is CloneLevel.DEEP:
        return copy.deepcopy(value)
    raise OptionsError(f"Invalid clone level {level!r}")


def isolate(value: Any) -> Any:
    """Deep copy regardless of the store's clone level (used for defaults)."""
    return copy.deepcopy(value)
