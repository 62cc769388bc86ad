"""Apply fix operations addressed by canonical path to document text."""

import logging
from collections.abc import Iterable, Sequence
from typing import Any

from specmap.core.builder import parse_document
from specmap.core.mutator import insert, remove, update
from specmap.core.paths import is_unsafe_path, is_unsafe_segment
from specmap.core.resolver import NOT_FOUND, find
from specmap.core.serializer import serialize
from specmap.errors import InvalidPathError
from specmap.models import FixOperation

logger = logging.getLogger(__name__)


def sanitize_value(value: Any) -> Any:
    """Return a copy of ``value`` with unsafe mapping keys dropped at every depth."""
    if isinstance(value, dict):
        return {
            key: sanitize_value(child)
            for key, child in value.items()
            if not (isinstance(key, str) and is_unsafe_segment(key))
        }
    if isinstance(value, list):
        return [sanitize_value(child) for child in value]
    return value


def apply_fix(text: str, format: str, operation: FixOperation) -> str:
    """Parse ``text``, apply ``operation`` and serialize back to ``format``."""
    if not operation.path:
        raise InvalidPathError("Invalid fix operation: path is required")
    if is_unsafe_path(operation.path):
        raise InvalidPathError("Invalid path key", operation.path)

    doc = parse_document(text, format)
    if operation.type == "remove":
        if find(doc, operation.path) is NOT_FOUND:
            logger.debug("Nothing to remove at depth %d, skipping fix", len(operation.path))
            return serialize(doc)
        doc = remove(doc, operation.path)
    elif operation.type == "add":
        doc = insert(doc, operation.path, sanitize_value(operation.value))
    else:
        doc = update(doc, operation.path, sanitize_value(operation.value))

    logger.debug("Applied %s fix at depth %d", operation.type, len(operation.path))
    return serialize(doc)


def apply_fixes(text: str, format: str, operations: Iterable[FixOperation]) -> str:
    result = text
    for operation in operations:
        result = apply_fix(result, format, operation)
    return result


def current_value(text: str, format: str, path: Sequence[str]) -> Any:
    return find(parse_document(text, format), path)


def undo_operation(
    operation: FixOperation, previous_value: Any = NOT_FOUND, in_sequence: bool = False
) -> FixOperation:
    """Build the operation that reverts ``operation``.

    ``previous_value`` is the value at the path before the fix ran, or
    ``NOT_FOUND`` when nothing was there. ``in_sequence`` tells whether the
    path ends in a sequence index; an ``add`` there inserts, so its undo is a
    ``remove`` whatever the previous value. Use :func:`plan_undo` to derive
    both from the document.
    """
    if operation.type == "remove":
        if previous_value is NOT_FOUND:
            # The remove was a no-op; so is removing again.
            return FixOperation(type="remove", path=operation.path)
        return FixOperation(type="add", path=operation.path, value=previous_value)
    if previous_value is NOT_FOUND or (operation.type == "add" and in_sequence):
        return FixOperation(type="remove", path=operation.path)
    return FixOperation(type="update", path=operation.path, value=previous_value, previous_value=operation.value)


def plan_undo(text: str, format: str, operation: FixOperation) -> FixOperation:
    """Return the undo of ``operation`` as it would apply to ``text``."""
    doc = parse_document(text, format)
    parent = find(doc, operation.path[:-1])
    return undo_operation(operation, find(doc, operation.path), in_sequence=isinstance(parent, list))
