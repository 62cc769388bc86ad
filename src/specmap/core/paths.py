"""Canonical paths: segment rules shared by the index, resolver and mutator."""

import json
import re
from collections.abc import Hashable, Iterable, Mapping
from typing import Any

from specmap.models import CanonicalPath

UNSAFE_SEGMENTS: frozenset[str] = frozenset({"__proto__", "constructor", "prototype"})

_INDEX_RE = re.compile(r"-?[0-9]+")


def is_unsafe_segment(segment: str) -> bool:
    return segment in UNSAFE_SEGMENTS


def is_unsafe_path(path: Iterable[str]) -> bool:
    """Return True if any segment of ``path`` must never be dereferenced."""
    return any(is_unsafe_segment(segment) for segment in path)


def to_segment(key: Any) -> str:
    """Render a mapping key or sequence index as a path segment."""
    if isinstance(key, str):
        return key
    if isinstance(key, bool):
        return "true" if key else "false"
    if key is None:
        return "null"
    return str(key)


def parse_index(segment: str) -> int | None:
    """Parse a base-10 sequence index; anything else yields None."""
    if not _INDEX_RE.fullmatch(segment):
        return None
    return int(segment)


def match_key(mapping: Mapping[Hashable, Any], segment: str) -> tuple[bool, Hashable]:
    """Find the key of ``mapping`` addressed by ``segment``.

    String keys match exactly; otherwise a key matches when its segment form
    equals ``segment`` (so ``"200"`` addresses the YAML integer key ``200``).
    """
    if segment in mapping:
        return True, segment
    for key in mapping:
        if not isinstance(key, str) and to_segment(key) == segment:
            return True, key
    return False, segment


def require_path(path: Iterable[str]) -> CanonicalPath:
    """Return ``path`` as a tuple of segments; a bare string is a caller error."""
    if isinstance(path, str):
        raise TypeError(f"Expected a sequence of path segments, got the string {path!r}; see parse_path()")
    return tuple(path)


def path_key(path: Iterable[str]) -> str:
    return ".".join(path)


def as_path(path: Iterable[Any]) -> CanonicalPath:
    return tuple(to_segment(segment) for segment in path)


def parse_path(text: str) -> CanonicalPath:
    """Parse a user-supplied path: a JSON array of segments or a dotted string."""
    stripped = text.strip()
    if not stripped:
        return ()
    if stripped.startswith("["):
        try:
            segments = json.loads(stripped)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid JSON path: {text}") from exc
        if not isinstance(segments, list):
            raise ValueError(f"JSON path must be an array: {text}")
        return as_path(segments)
    return tuple(stripped.split("."))
