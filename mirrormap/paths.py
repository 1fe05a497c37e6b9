"""Dotted path access into nested dict/list values.

A path addresses a value inside a stored object or array::

    "profile.name"        dict field
    "tags.0"              list index
    "tags[0].label"       bracket indices are accepted too

Reads never raise for a missing segment, they stop and report MISSING.
Writes create ``{}`` for every missing intermediate segment.
"""

import re
from typing import Any, List, Sequence, Union

from .exceptions import PathError


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()

PathLike = Union[str, int, Sequence[Union[str, int]]]

_SEGMENT_RE = re.compile(r"[^.\[\]]+")


def parse_path(path: PathLike) -> List[str]:
    """Split a path into string segments.

    Args:
        path: Dotted string, integer index, or sequence of segments

    Returns:
        List of segments

    Raises:
        PathError: If the path is empty or of an unsupported type
    """
    if isinstance(path, bool):
        raise PathError(f"Invalid path: {path!r}")
    if isinstance(path, int):
        return [str(path)]
    if isinstance(path, str):
        segments = _SEGMENT_RE.findall(path)
    elif isinstance(path, (list, tuple)):
        segments = [str(segment) for segment in path]
    else:
        raise PathError(f"Invalid path: {path!r}")
    if not segments:
        raise PathError(f"Empty path: {path!r}")
    return segments


def _as_index(segment: str):
    if segment.isdigit():
        return int(segment)
    return None


def _child(container: Any, segment: str) -> Any:
    if isinstance(container, dict):
        return container.get(segment, MISSING)
    if isinstance(container, list):
        index = _as_index(segment)
        if index is not None and index < len(container):
            return container[index]
    return MISSING


def get_path(obj: Any, path: PathLike, default: Any = MISSING) -> Any:
    """Resolve a path, returning ``default`` at the first missing segment."""
    current = obj
    for segment in parse_path(path):
        current = _child(current, segment)
        if current is MISSING:
            return default
    return current


def has_path(obj: Any, path: PathLike) -> bool:
    """Whether every segment of the path resolves."""
    return get_path(obj, path) is not MISSING


def _assign(container: Any, segment: str, value: Any) -> None:
    if isinstance(container, dict):
        container[segment] = value
        return
    index = _as_index(segment)
    if index is None:
        raise PathError(f'Cannot set field "{segment}" on an array')
    if index < len(container):
        container[index] = value
    else:
        container.extend([None] * (index - len(container)))
        container.append(value)


def set_path(obj: Any, path: PathLike, value: Any) -> Any:
    """Write ``value`` at ``path`` inside ``obj`` in place.

    Missing or non-container intermediate segments are replaced by ``{}``.

    Returns:
        obj, for chaining

    Raises:
        PathError: If ``obj`` is not a container, or a field name is used
            on a list
    """
    if not isinstance(obj, (dict, list)):
        raise PathError(f"Cannot set a path on a value of type {type(obj).__name__}")
    segments = parse_path(path)
    current = obj
    for segment in segments[:-1]:
        nxt = _child(current, segment)
        if not isinstance(nxt, (dict, list)):
            nxt = {}
            _assign(current, segment, nxt)
        current = nxt
    _assign(current, segments[-1], value)
    return obj


def delete_path(obj: Any, path: PathLike) -> Any:
    """Remove the leaf addressed by ``path`` in place.

    List parents lose the element at that index (later elements shift
    down); dict parents lose the field.

    Raises:
        PathError: If the path does not resolve
    """
    segments = parse_path(path)
    parent = obj if len(segments) == 1 else get_path(obj, segments[:-1])
    last = segments[-1]
    if _child(parent, last) is MISSING:
        raise PathError(f'The property "{".".join(segments)}" does not exist')
    if isinstance(parent, list):
        del parent[int(last)]
    else:
        del parent[last]
    return obj


def merge(target: dict, source: dict) -> dict:
    """Recursively merge ``source`` into ``target`` in place.

    Nested dicts are merged; every other value in ``source`` replaces the
    one in ``target``.
    """
    for key, value in source.items():
        existing = target.get(key, MISSING)
        if isinstance(existing, dict) and isinstance(value, dict):
            merge(existing, value)
        else:
            target[key] = value
    return target
