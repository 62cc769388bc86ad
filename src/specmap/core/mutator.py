"""Immutable, path-scoped edits of a document's value tree.

Only the containers along the edited path are copied; every sibling subtree is
shared with the original document, which is never modified.
"""

import logging
from collections.abc import Iterable
from enum import Enum
from typing import Any

from specmap.core.paths import is_unsafe_path, match_key, parse_index, require_path
from specmap.errors import InvalidPathError
from specmap.models import CanonicalPath, DocumentNode

logger = logging.getLogger(__name__)


class _Op(Enum):
    SET = "set"
    INSERT = "insert"
    DELETE = "delete"


def _sequence_index(container: list[Any], segment: str, path: CanonicalPath, allow_append: bool) -> int:
    index = parse_index(segment)
    upper = len(container) + 1 if allow_append else len(container)
    if index is None or index < 0 or index >= upper:
        raise InvalidPathError(f"Invalid sequence index '{segment}' in path {list(path)!r}", path)
    return index


def _rewrite(container: Any, path: CanonicalPath, depth: int, op: _Op, value: Any) -> Any:
    segment = path[depth]
    is_last = depth == len(path) - 1

    if isinstance(container, list):
        index = _sequence_index(container, segment, path, allow_append=is_last and op is _Op.INSERT)
        copy = list(container)
        if not is_last:
            copy[index] = _rewrite(container[index], path, depth + 1, op, value)
        elif op is _Op.DELETE:
            del copy[index]
        elif op is _Op.INSERT:
            copy.insert(index, value)
        else:
            copy[index] = value
        return copy

    if isinstance(container, dict):
        found, key = match_key(container, segment)
        copy = dict(container)
        if not is_last:
            if found:
                child = container[key]
            elif op is _Op.INSERT:
                child = {}
            else:
                raise InvalidPathError(f"Path segment '{segment}' not found in {list(path)!r}", path)
            copy[key] = _rewrite(child, path, depth + 1, op, value)
        elif op is _Op.DELETE:
            if not found:
                raise InvalidPathError(f"Nothing to remove at {list(path)!r}", path)
            del copy[key]
        else:
            copy[key] = value
        return copy

    raise InvalidPathError(f"Cannot descend into a scalar at segment '{segment}' of {list(path)!r}", path)


def _apply(doc: DocumentNode, path: Iterable[str], op: _Op, value: Any = None) -> DocumentNode:
    segments = require_path(path)
    if not segments:
        raise InvalidPathError("Path must not be empty", segments)
    if is_unsafe_path(segments):
        raise InvalidPathError("Invalid path key", segments)

    new_value = _rewrite(doc.value, segments, 0, op, value)
    logger.debug("Applied %s at depth %d", op.value, len(segments))
    # The new value has no source text yet, so source ranges no longer apply.
    return doc.model_copy(update={"value": new_value, "range": None, "raw": None})


def update(doc: DocumentNode, path: Iterable[str], new_value: Any) -> DocumentNode:
    """Return a new document with the value at ``path`` replaced by ``new_value``.

    Every segment but the last must resolve to an existing container; the last
    may name a new mapping key. Raises ``InvalidPathError`` otherwise.
    """
    return _apply(doc, path, _Op.SET, new_value)


def insert(doc: DocumentNode, path: Iterable[str], value: Any) -> DocumentNode:
    """Like ``update``, but missing intermediate mapping keys are created and a
    final sequence index inserts before that position (the length appends)."""
    return _apply(doc, path, _Op.INSERT, value)


def remove(doc: DocumentNode, path: Iterable[str]) -> DocumentNode:
    return _apply(doc, path, _Op.DELETE)
