"""Whole-store snapshot format used by Store.export() and Store.import_().

A snapshot is a JSON document::

    {
      "name": "settings",
      "formatVersion": 1,
      "exportTimestamp": "2024-05-01T12:00:00+00:00",
      "entries": [{"key": "guild1", "value": "<encoded value>"}, ...]
    }

where each ``value`` is the text produced by Serializer.encode().
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable, List, Optional, Tuple

from .exceptions import DataImportError, SerializationError
from .serialization import Serializer

FORMAT_VERSION = 1


@dataclass
class Snapshot:
    """Decoded snapshot contents."""

    name: str
    format_version: int
    exported_at: Optional[datetime]
    entries: List[Tuple[str, Any]] = field(default_factory=list)


def dump_snapshot(
    name: str,
    items: Iterable[Tuple[str, Any]],
    serializer: Serializer,
    exported_at: Optional[datetime] = None,
) -> str:
    """Encode a store's entries as snapshot text.

    Raises:
        SerializationError: If a value cannot be encoded
    """
    exported_at = exported_at or datetime.now(timezone.utc)
    document = {
        "name": name,
        "formatVersion": FORMAT_VERSION,
        "exportTimestamp": exported_at.isoformat(),
        "entries": [
            {"key": key, "value": serializer.encode(value)} for key, value in items
        ],
    }
    return json.dumps(document, indent=2, ensure_ascii=False)


def load_snapshot(data: Optional[str], serializer: Serializer) -> Snapshot:
    """Parse and fully decode snapshot text.

    Raises:
        DataImportError: If the data is missing, not a snapshot, from a newer
            format version, or holds an undecodable value
    """
    if data is None:
        raise DataImportError("No data provided for import")
    try:
        document = json.loads(data)
    except (TypeError, ValueError) as e:
        raise DataImportError(f"Import data is not valid JSON: {e}") from e
    if not isinstance(document, dict):
        raise DataImportError("Import data must be a JSON object")

    missing = [k for k in ("name", "formatVersion", "entries") if k not in document]
    if missing:
        raise DataImportError(f"Import data is missing field(s): {', '.join(missing)}")

    version = document["formatVersion"]
    if not isinstance(version, int) or isinstance(version, bool) or version > FORMAT_VERSION:
        raise DataImportError(
            f"Unsupported snapshot format version {version!r} "
            f"(this version reads up to {FORMAT_VERSION})"
        )
    if not isinstance(document["entries"], list):
        raise DataImportError("Import data 'entries' must be a list")

    exported_at = None
    if document.get("exportTimestamp"):
        try:
            exported_at = datetime.fromisoformat(document["exportTimestamp"])
        except (TypeError, ValueError) as e:
            raise DataImportError(f"Invalid exportTimestamp: {e}") from e

    entries = []
    for index, entry in enumerate(document["entries"]):
        if not isinstance(entry, dict) or not isinstance(entry.get("key"), str):
            raise DataImportError(f"Entry {index} must have a string 'key'")
        if "value" not in entry:
            raise DataImportError(f"Entry {index} ({entry['key']}) has no 'value'")
        try:
            value = serializer.decode(entry["value"])
        except SerializationError as e:
            raise DataImportError(f"Entry {entry['key']!r} could not be decoded: {e}") from e
        entries.append((entry["key"], value))

    return Snapshot(
        name=document["name"],
        format_version=version,
        exported_at=exported_at,
        entries=entries,
    )
