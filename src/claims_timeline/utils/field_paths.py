"""Dotted/bracketed path resolution over parsed JSON.

Path grammar: dot-separated segments, each segment a key optionally followed
by one or more bracketed integer indexes, e.g. ``medHistory.claims``,
``lines[0].srvcStart`` or ``matrix[1][2]``. A bare ``[0]`` segment indexes the
value produced by the previous segment.
"""

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Optional, Tuple

_SEGMENT_RE = re.compile(r"^([^\[\]]*)((?:\[\d+\])*)$")
_INDEX_RE = re.compile(r"\[(\d+)\]")

_MISSING = object()


@dataclass(frozen=True)
class PathSegment:
    """One step of a field path: a key, then zero or more list indexes."""

    key: Optional[str]
    indexes: Tuple[int, ...] = ()

    def __str__(self) -> str:
        return (self.key or "") + "".join(f"[{i}]" for i in self.indexes)


@lru_cache(maxsize=1024)
def parse_path(path: str) -> Tuple[PathSegment, ...]:
    """Parse a path string into segments.

    Raises:
        ValueError: If a segment is malformed (unbalanced or non-integer brackets).
    """
    if not path or not path.strip():
        raise ValueError("Field path cannot be empty")

    segments = []
    for raw in path.strip().split("."):
        m = _SEGMENT_RE.match(raw)
        if not m or (not m.group(1) and not m.group(2)):
            raise ValueError(f"Invalid path segment '{raw}' in '{path}'")
        key = m.group(1) or None
        indexes = tuple(int(i) for i in _INDEX_RE.findall(m.group(2)))
        segments.append(PathSegment(key=key, indexes=indexes))
    return tuple(segments)


def _step(current: Any, segment: PathSegment) -> Any:
    if segment.key is not None:
        if not isinstance(current, dict):
            return _MISSING
        current = current.get(segment.key, _MISSING)
        if current is _MISSING or current is None:
            return _MISSING

    for index in segment.indexes:
        if not isinstance(current, list) or index >= len(current):
            return _MISSING
        current = current[index]
        if current is None:
            return _MISSING

    return current


def resolve_path(root: Any, path: str, default: Any = None) -> Any:
    """Resolve ``path`` against ``root``; never raises for missing data.

    Resolution short-circuits to ``default`` as soon as an intermediate value
    is missing, ``None`` or not a container of the expected kind. Malformed
    paths also resolve to ``default``.
    """
    if root is None or not path:
        return default
    try:
        segments = parse_path(path)
    except ValueError:
        return default

    current = root
    for segment in segments:
        current = _step(current, segment)
        if current is _MISSING:
            return default
    return current


def require_path(root: Any, path: str) -> Any:
    """Resolve a structural path used for validation, raising when absent.

    Raises:
        KeyError: If the path does not resolve to a value.
    """
    value = resolve_path(root, path, _MISSING)
    if value is _MISSING:
        raise KeyError(path)
    return value
