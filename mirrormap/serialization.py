"""Tagged-JSON serialization for stored values.

Plain JSON values are written as-is. Everything JSON cannot express is
written as a tagged variant::

    {"__type__": "datetime", "__data__": "2016-04-28T22:02:17+00:00"}

and decoded through a closed switch over the tag, so decoding never runs
code from the stored text. Callables are rejected; store plain data.

Example:
    serializer = Serializer()
    text = serializer.encode({"when": datetime(2024, 1, 1), "ids": {1, 2}})
    value = serializer.decode(text)
"""

import base64
import json
import math
import re
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable, Dict

import numpy as np

from .exceptions import SerializationError
from .kinds import UNDEFINED

TYPE_KEY = "__type__"
DATA_KEY = "__data__"

# Largest integer a JSON reader using IEEE doubles represents exactly
MAX_SAFE_INTEGER = 2**53 - 1


def _tag(name: str, data: Any) -> Dict[str, Any]:
    return {TYPE_KEY: name, DATA_KEY: data}


class Serializer:
    """Encode values to text and decode them back.

    Supported beyond plain JSON: UNDEFINED, large integers, non-finite
    floats, Decimal, datetime, date, compiled regular expressions, tuples,
    sets, frozensets, dicts with non-string keys, bytes, numpy arrays and
    numpy scalars.
    """

    def __init__(self):
        self._decoders: Dict[str, Callable[[Any], Any]] = {
            "undefined": lambda data: UNDEFINED,
            "bigint": lambda data: int(data),
            "float": lambda data: float(data),
            "decimal": lambda data: Decimal(data),
            "datetime": lambda data: datetime.fromisoformat(data),
            "date": lambda data: date.fromisoformat(data),
            "regex": lambda data: re.compile(data["pattern"], data["flags"]),
            "tuple": lambda data: tuple(self._from_json_compatible(v) for v in data),
            "set": lambda data: {self._from_json_compatible(v) for v in data},
            "frozenset": lambda data: frozenset(
                self._from_json_compatible(v) for v in data
            ),
            "map": lambda data: {
                self._from_json_compatible(k): self._from_json_compatible(v)
                for k, v in data
            },
            "bytes": lambda data: base64.b64decode(data.encode("ascii")),
            "ndarray": self._decode_ndarray,
            "numpy": lambda data: np.dtype(data["dtype"]).type(
                self._from_json_compatible(data["value"])
            ),
        }

    def encode(self, value: Any) -> str:
        """Serialize a value to compact JSON text.

        Raises:
            SerializationError: If the value contains an unsupported type
        """
        data = self._to_json_compatible(value)
        return json.dumps(
            data, separators=(",", ":"), ensure_ascii=False, allow_nan=False
        )

    def decode(self, text: str) -> Any:
        """Rebuild a value from text produced by encode().

        Raises:
            SerializationError: If the text is not a valid encoding
        """
        if not isinstance(text, (str, bytes, bytearray)):
            raise SerializationError(
                f"Cannot decode value of type {type(text).__name__}"
            )
        try:
            data = json.loads(text)
        except ValueError as e:
            raise SerializationError(f"Invalid encoded value: {e}")
        return self._from_json_compatible(data)

    def _to_json_compatible(self, value: Any) -> Any:
        """Convert a value to JSON-compatible format."""
        if value is None or isinstance(value, (bool, str)):
            return value
        if value is UNDEFINED:
            return _tag("undefined", None)
        # numpy scalars before int/float: np.float64 subclasses float
        if isinstance(value, np.ndarray):
            return _tag(
                "ndarray",
                {
                    "dtype": value.dtype.str,
                    "shape": list(value.shape),
                    "data": self._to_json_compatible(value.tolist()),
                },
            )
        if isinstance(value, np.generic):
            return _tag(
                "numpy",
                {"dtype": value.dtype.str, "value": self._to_json_compatible(value.item())},
            )
        if isinstance(value, int):
            if abs(value) > MAX_SAFE_INTEGER:
                return _tag("bigint", str(value))
            return value
        if isinstance(value, float):
            if math.isfinite(value):
                return value
            return _tag("float", repr(value))
        if isinstance(value, Decimal):
            return _tag("decimal", str(value))
        if isinstance(value, datetime):
            return _tag("datetime", value.isoformat())
        if isinstance(value, date):
            return _tag("date", value.isoformat())
        if isinstance(value, re.Pattern):
            if not isinstance(value.pattern, str):
                raise SerializationError("Cannot serialize a bytes regular expression")
            return _tag("regex", {"pattern": value.pattern, "flags": value.flags})
        if isinstance(value, list):
            return [self._to_json_compatible(v) for v in value]
        if isinstance(value, tuple):
            return _tag("tuple", [self._to_json_compatible(v) for v in value])
        if isinstance(value, (set, frozenset)):
            items = sorted(
                (self._to_json_compatible(v) for v in value),
                key=lambda item: json.dumps(item, sort_keys=True),
            )
            return _tag("frozenset" if isinstance(value, frozenset) else "set", items)
        if isinstance(value, dict):
            if all(isinstance(k, str) for k in value) and TYPE_KEY not in value:
                return {k: self._to_json_compatible(v) for k, v in value.items()}
            return _tag(
                "map",
                [
                    [self._to_json_compatible(k), self._to_json_compatible(v)]
                    for k, v in value.items()
                ],
            )
        if isinstance(value, (bytes, bytearray)):
            return _tag("bytes", base64.b64encode(bytes(value)).decode("ascii"))
        if callable(value):
            raise SerializationError(
                f"Cannot serialize callable {getattr(value, '__name__', value)!r}. "
                f"Store plain data instead."
            )
        raise SerializationError(f"Cannot serialize type: {type(value).__name__}")

    def _from_json_compatible(self, value: Any) -> Any:
        """Convert a value from JSON-compatible format."""
        if isinstance(value, list):
            return [self._from_json_compatible(v) for v in value]
        if isinstance(value, dict):
            if TYPE_KEY not in value:
                return {k: self._from_json_compatible(v) for k, v in value.items()}
            tag = value[TYPE_KEY]
            decoder = self._decoders.get(tag) if isinstance(tag, str) else None
            if decoder is None or DATA_KEY not in value:
                raise SerializationError(f"Unknown encoded type: {tag!r}")
            try:
                return decoder(value[DATA_KEY])
            except SerializationError:
                raise
            except (TypeError, ValueError, KeyError, re.error) as e:
                raise SerializationError(f"Malformed {tag} value: {e}")
        return value

    def _decode_ndarray(self, data: Dict[str, Any]) -> np.ndarray:
        items = self._from_json_compatible(data["data"])
        return np.array(items, dtype=np.dtype(data["dtype"])).reshape(data["shape"])
