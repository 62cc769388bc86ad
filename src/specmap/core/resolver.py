from collections.abc import Iterable
from typing import Any, Final

from specmap.core.paths import is_unsafe_segment, match_key, parse_index, require_path
from specmap.models import DocumentNode


class _NotFound:
    """Sentinel for a path that does not resolve; distinct from a ``None`` value."""

    _instance: "_NotFound | None" = None

    def __new__(cls) -> "_NotFound":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NOT_FOUND"

    def __reduce__(self) -> str:
        return "NOT_FOUND"


NOT_FOUND: Final = _NotFound()


def find_in_value(value: Any, path: Iterable[str]) -> Any:
    current = value
    for segment in require_path(path):
        if current is None:
            return NOT_FOUND
        if is_unsafe_segment(segment):
            return NOT_FOUND
        if isinstance(current, list):
            index = parse_index(segment)
            if index is None or index < 0 or index >= len(current):
                return NOT_FOUND
            current = current[index]
        elif isinstance(current, dict):
            found, key = match_key(current, segment)
            if not found:
                return NOT_FOUND
            current = current[key]
        else:
            return NOT_FOUND
    return current


def find(doc: DocumentNode, path: Iterable[str]) -> Any:
    """Return the value at ``path`` or ``NOT_FOUND``; never raises for absence."""
    return find_in_value(doc.value, path)


def exists(doc: DocumentNode, path: Iterable[str]) -> bool:
    return find(doc, path) is not NOT_FOUND
